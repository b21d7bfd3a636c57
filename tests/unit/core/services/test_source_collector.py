from __future__ import annotations

"""
Unit tests for the orphan Source Collector.

Verifies:
1. Directory pruning (deny-list, ignored modules, existing sources, deep hidden dirs).
2. File filtering (excluded extensions, covered languages, hidden files).
3. Walk behaviour (symbolic links, error modes, sorted output).
"""

import os
from pathlib import Path

import pytest

from scanprops.core.services.source_collector import (
    SourceCollector,
    VisitResult,
    collect_sources,
    walk_file_tree,
)


def _touch(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Structure:
    /project
      README.md
      run.sh
      Main.java
      app.jar
      .env
      .npmrc
      .hidden.properties
      /build/generated.txt
      /node_modules/pkg/index.js
      /src/main/java/Foo.java
      /src/main/resources/app.yaml
      /.github/workflows/ci.yml
      /.github/workflows/nested/.cache/blob.txt
      /docs/guide.md
    """
    root = tmp_path / "project"
    for rel in (
        "README.md",
        "run.sh",
        "Main.java",
        "app.jar",
        ".env",
        ".npmrc",
        ".hidden.properties",
        "build/generated.txt",
        "node_modules/pkg/index.js",
        "src/main/java/Foo.java",
        "src/main/resources/app.yaml",
        ".github/workflows/ci.yml",
        ".github/workflows/nested/.cache/blob.txt",
        "docs/guide.md",
    ):
        _touch(root / rel)
    return root


def _rel(root: Path, paths):
    return sorted(os.path.relpath(p, root).replace(os.sep, "/") for p in paths)


# -----------------------------------------------------------------------------
# Directory pruning
# -----------------------------------------------------------------------------

def test_pre_visit_skips_deny_listed_directories(project):
    collector = SourceCollector(str(project))
    assert collector.pre_visit_directory(str(project / "build")) is VisitResult.SKIP_SUBTREE
    assert collector.pre_visit_directory(str(project / "node_modules")) is VisitResult.SKIP_SUBTREE
    assert collector.pre_visit_directory(str(project / "docs")) is VisitResult.CONTINUE


def test_pre_visit_deny_list_is_case_insensitive(tmp_path):
    collector = SourceCollector(str(tmp_path))
    assert collector.pre_visit_directory(str(tmp_path / "Target")) is VisitResult.SKIP_SUBTREE


def test_pre_visit_skips_existing_sources_and_ignored_dirs(project):
    collector = SourceCollector(
        str(project),
        existing_sources=[str(project / "src" / "main" / "java")],
        directories_to_ignore=[str(project / "docs")],
    )
    assert collector.pre_visit_directory(str(project / "src" / "main" / "java")) is VisitResult.SKIP_SUBTREE
    assert collector.pre_visit_directory(str(project / "docs")) is VisitResult.SKIP_SUBTREE
    # Exact match only: the parent of a source dir is still walked
    assert collector.pre_visit_directory(str(project / "src" / "main")) is VisitResult.CONTINUE


def test_hidden_directories_are_walked_near_the_root(project):
    collector = SourceCollector(str(project))
    assert collector.pre_visit_directory(str(project / ".github")) is VisitResult.CONTINUE
    assert collector.pre_visit_directory(str(project / ".github" / "workflows")) is VisitResult.CONTINUE
    deep = project / ".github" / "workflows" / "nested"
    assert collector.pre_visit_directory(str(deep)) is VisitResult.SKIP_SUBTREE


# -----------------------------------------------------------------------------
# File filtering
# -----------------------------------------------------------------------------

def test_visit_file_excludes_binary_extensions(project):
    collector = SourceCollector(str(project))
    collector.visit_file(str(project / "app.jar"))
    collector.visit_file(str(project / "README.md"))
    assert _rel(project, collector.collected_sources) == ["README.md"]


def test_visit_file_keeps_relevant_hidden_files(project):
    collector = SourceCollector(str(project))
    for name in (".env", ".npmrc", ".hidden.properties"):
        collector.visit_file(str(project / name))
    assert _rel(project, collector.collected_sources) == [".env", ".hidden.properties"]


def test_visit_file_ignores_symlinks_and_excluded_files(project):
    collector = SourceCollector(str(project), excluded_files=[str(project / "run.sh")])
    collector.visit_file(str(project / "run.sh"))
    collector.visit_file(str(project / "README.md"), is_symlink=True)
    assert collector.collected_sources == set()


# -----------------------------------------------------------------------------
# Full walk
# -----------------------------------------------------------------------------

def test_collect_sources_end_to_end(project):
    found = collect_sources(
        str(project),
        existing_sources=[str(project / "src" / "main" / "java")],
    )
    assert _rel(project, found) == [
        ".env",
        ".github/workflows/ci.yml",
        ".hidden.properties",
        "README.md",
        "docs/guide.md",
        "run.sh",
        "src/main/resources/app.yaml",
    ]
    assert found == sorted(found)


def test_relative_existing_sources_prune_only_their_own_subtree(tmp_path, monkeypatch):
    _touch(tmp_path / "src" / "main" / "java" / "Foo.java")
    _touch(tmp_path / "src" / "main" / "js" / "app.js")
    monkeypatch.chdir(tmp_path)

    collector = SourceCollector(".", existing_sources={"src/main/java"})

    assert collector.pre_visit_directory(os.path.join("src", "main", "java")) is VisitResult.SKIP_SUBTREE
    assert collector.pre_visit_directory(os.path.join("src", "main", "js")) is VisitResult.CONTINUE


def test_file_filtering_literal_cases(tmp_path):
    for name in ("notes.txt", "app.class", ".env", ".gitignore"):
        _touch(tmp_path / name)

    found = collect_sources(str(tmp_path))

    assert _rel(tmp_path, found) == [".env", "notes.txt"]


def test_collect_sources_can_include_covered_languages(project):
    found = collect_sources(str(project), exclude_covered_languages=False)
    rel = _rel(project, found)
    assert "Main.java" in rel
    assert "src/main/java/Foo.java" in rel


def test_collect_sources_skips_pruned_root(project):
    build_dir = project / "build"
    assert collect_sources(str(build_dir)) == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinked_directories_are_not_followed(project, tmp_path):
    outside = tmp_path / "outside"
    _touch(outside / "secret.txt")
    link = project / "linked"
    try:
        os.symlink(str(outside), str(link), target_is_directory=True)
    except OSError:
        pytest.skip("symlink creation not permitted")

    found = collect_sources(str(project))
    assert not any("secret.txt" in p for p in found)
    assert str(link) not in found


def test_walk_file_tree_rejects_unknown_error_mode(project):
    with pytest.raises(ValueError):
        walk_file_tree(str(project), SourceCollector(str(project)), on_error="ignore")
