from __future__ import annotations

"""
Unit tests for the path helpers.

Verifies:
1. Existence filtering.
2. Base directory reconciliation across modules.
3. Report path property detection and resolution.
"""

import os

import pytest

from scanprops.core.processing.paths import (
    compute_report_paths,
    contains_junit_report,
    existing_paths,
    extract_report_paths,
    find_project_base_dir,
    has_wildcard,
    is_report_path_property,
)


def test_existing_paths_drops_missing_and_repeats(tmp_path):
    a = tmp_path / "a"
    a.mkdir()
    missing = tmp_path / "missing"
    assert existing_paths([str(a), str(missing), str(a), ""]) == [str(a)]


@pytest.mark.parametrize("path, expected", [
    ("src/**/*.java", True),
    ("file?.txt", True),
    ("${buildDir}/classes", True),
    ("/plain/path", False),
])
def test_has_wildcard(path, expected):
    assert has_wildcard(path) is expected


def test_contains_junit_report(tmp_path):
    assert contains_junit_report(str(tmp_path)) is False
    (tmp_path / "notes.xml").write_text("<x/>", encoding="utf-8")
    assert contains_junit_report(str(tmp_path)) is False
    (tmp_path / "TEST-com.acme.FooTest.xml").write_text("<x/>", encoding="utf-8")
    assert contains_junit_report(str(tmp_path)) is True


def test_contains_junit_report_on_missing_dir(tmp_path):
    assert contains_junit_report(str(tmp_path / "nope")) is False


def test_base_dir_is_root_when_modules_are_nested(tmp_path):
    root = str(tmp_path / "root")
    properties = {
        "sonar.projectBaseDir": root,
        ":lib.sonar.projectBaseDir": os.path.join(root, "lib"),
    }
    assert find_project_base_dir(properties) == os.path.normpath(root)


def test_base_dir_widens_to_common_ancestor(tmp_path):
    root = str(tmp_path / "root")
    outside = str(tmp_path / "elsewhere" / "mod")
    properties = {
        "sonar.projectBaseDir": root,
        ":mod.sonar.projectBaseDir": outside,
    }
    assert find_project_base_dir(properties) == os.path.normpath(str(tmp_path))


@pytest.mark.parametrize("key, expected", [
    ("sonar.junit.reportPaths", True),
    ("sonar.coverage.jacoco.xmlReportPaths", True),
    ("sonar.coverageReportPaths", True),
    ("sonar.androidLint.reportPaths", True),
    ("sonar.surefire.reportsPath", True),
    ("sonar.sources", False),
    ("sonar.projectBaseDir", False),
])
def test_is_report_path_property(key, expected):
    assert is_report_path_property(key) is expected


def test_extract_report_paths_splits_values():
    properties = {
        "sonar.junit.reportPaths": "a.xml, b.xml",
        "sonar.sources": "src",
    }
    assert extract_report_paths(properties) == {"a.xml", "b.xml"}


def test_compute_report_paths_resolves_relative_entries(tmp_path):
    base = str(tmp_path)
    absolute = os.path.join(base, "abs", "report.xml")
    properties = {
        "sonar.projectBaseDir": base,
        "sonar.coverage.jacoco.xmlReportPaths": f"build/jacoco.xml,{absolute}",
    }
    assert compute_report_paths(properties) == {
        os.path.join(base, "build", "jacoco.xml"),
        os.path.normpath(absolute),
    }


def test_compute_report_paths_needs_base_dir():
    with pytest.raises(ValueError):
        compute_report_paths({"sonar.junit.reportPaths": "a.xml"})

