from __future__ import annotations

"""
Unit tests for the property map writer.

Verifies:
1. '.properties' rendering with escaping.
2. JSON rendering.
3. Physical file creation.
"""

import json

import pytest

from scanprops.core.pipeline.writer import render_properties, write_properties


def test_render_properties_format():
    text = render_properties({"sonar.projectKey": "k", "sonar.sources": "a,b"})
    assert text == "sonar.projectKey=k\nsonar.sources=a,b\n"


def test_render_escapes_keys_and_values():
    text = render_properties({":app.sonar.x": "C:\\path\nnext"})
    assert text == "\\:app.sonar.x=C:\\\\path\\nnext\n"


def test_render_json_keeps_order():
    text = render_properties({"b": "1", "a": "2"}, fmt="json")
    assert list(json.loads(text)) == ["b", "a"]


def test_render_unknown_format_raises():
    with pytest.raises(ValueError):
        render_properties({}, fmt="yaml")


def test_write_properties_creates_parent_dirs(tmp_path):
    target = tmp_path / "out" / "nested" / "analysis.properties"
    written = write_properties({"sonar.projectKey": "k"}, str(target))

    assert written == str(target)
    assert target.read_text(encoding="utf-8") == "sonar.projectKey=k\n"
