from __future__ import annotations

"""
Unit tests for the path property filtering stage.

Verifies:
1. Missing paths are removed from source, binary and library properties.
2. Wildcards and user-defined properties are left untouched.
3. Empty properties are dropped, except sources and tests.
4. Report properties are filtered by content.
"""

from pathlib import Path

import pytest

from scanprops.core.pipeline.path_filter import filter_path_properties


@pytest.fixture
def layout(tmp_path: Path):
    src = tmp_path / "src"
    src.mkdir()
    classes = tmp_path / "classes"
    classes.mkdir()
    reports = tmp_path / "test-results"
    reports.mkdir()
    (reports / "TEST-FooTest.xml").write_text("<testsuite/>", encoding="utf-8")
    empty_reports = tmp_path / "empty-results"
    empty_reports.mkdir()
    jacoco = tmp_path / "jacoco.xml"
    jacoco.write_text("<report/>", encoding="utf-8")
    return {
        "src": str(src),
        "classes": str(classes),
        "missing": str(tmp_path / "missing"),
        "reports": str(reports),
        "empty_reports": str(empty_reports),
        "jacoco": str(jacoco),
    }


def test_missing_paths_are_removed(layout):
    properties = {
        "sonar.sources": f"{layout['src']},{layout['missing']}",
        ":app.sonar.java.binaries": f"{layout['missing']},{layout['classes']}",
    }
    filter_path_properties(properties)
    assert properties["sonar.sources"] == layout["src"]
    assert properties[":app.sonar.java.binaries"] == layout["classes"]


def test_wildcards_are_kept(layout):
    properties = {"sonar.java.libraries": f"{layout['missing']},/libs/*.jar"}
    filter_path_properties(properties)
    assert properties["sonar.java.libraries"] == "/libs/*.jar"


def test_user_defined_properties_are_not_filtered(layout):
    properties = {"sonar.sources": layout["missing"]}
    filter_path_properties(properties, {"sonar.sources"})
    assert properties["sonar.sources"] == layout["missing"]


def test_empty_sources_and_tests_are_kept_others_dropped(layout):
    properties = {
        "sonar.sources": layout["missing"],
        ":app.sonar.tests": layout["missing"],
        "sonar.java.libraries": layout["missing"],
        "sonar.libraries": "",
    }
    filter_path_properties(properties)
    assert properties["sonar.sources"] == ""
    assert properties[":app.sonar.tests"] == ""
    assert "sonar.java.libraries" not in properties
    assert "sonar.libraries" not in properties


def test_junit_report_dirs_need_result_files(layout):
    properties = {
        "sonar.junit.reportPaths": f"{layout['reports']},{layout['empty_reports']}",
        ":app.sonar.surefire.reportsPath": layout["empty_reports"],
    }
    filter_path_properties(properties)
    assert properties["sonar.junit.reportPaths"] == layout["reports"]
    assert ":app.sonar.surefire.reportsPath" not in properties


def test_jacoco_report_paths_need_existing_files(layout):
    properties = {"sonar.coverage.jacoco.xmlReportPaths": f"{layout['missing']},{layout['jacoco']}"}
    filter_path_properties(properties)
    assert properties["sonar.coverage.jacoco.xmlReportPaths"] == layout["jacoco"]

    gone = {"sonar.coverage.jacoco.xmlReportPaths": layout["missing"]}
    filter_path_properties(gone)
    assert gone == {}


def test_unrelated_properties_are_untouched(layout):
    properties = {"sonar.projectKey": "k", "sonar.projectBaseDir": layout["missing"]}
    filter_path_properties(properties)
    assert properties == {"sonar.projectKey": "k", "sonar.projectBaseDir": layout["missing"]}
