from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for configuration dictionaries and module trees.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict(tmp_path: Path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'scanprops.domain.config', with every
    path pointing inside the test's temporary directory.

    Returns:
        Dict[str, Any]: A sample configuration dictionary.
    """
    return {
        # Host model
        "model_path": str(tmp_path / "scanprops-model.json"),
        "target_path": "",

        # Two-phase resolution
        "resolution_dir": str(tmp_path / "build" / "sonar-resolver"),

        # Output
        "output_path": "",
        "output_format": "properties",

        # Orphan source collection
        "scan_all": False,
        "exclude_covered_languages": True,

        # Ambient inputs
        "system_properties": {},
        "use_environment": False,

        # Diagnostics
        "log_level": "INFO",
        "save_log": False,
    }


@pytest.fixture
def multi_module_project(tmp_path: Path) -> Path:
    """
    Create a three-module project on disk.

    Structure:
    /project
      build.gradle.kts
      /src/main/java
      /lib
        /src/main/java
        /src/test/java
        /build/classes/java/main
        /sub
          /src/main/java
      /skipped
        /src/main/java
    """
    root = tmp_path / "project"
    for rel in (
        "src/main/java",
        "lib/src/main/java",
        "lib/src/test/java",
        "lib/build/classes/java/main",
        "lib/sub/src/main/java",
        "skipped/src/main/java",
    ):
        (root / rel).mkdir(parents=True)
    (root / "build.gradle.kts").write_text("plugins {}", encoding="utf-8")
    return root
