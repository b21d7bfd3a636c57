from __future__ import annotations

"""
Path Utilities for Analysis Properties.

Helpers shared by the property computer, the path filter and the scan-all
step: existence filtering, base-directory reconciliation and report path
extraction.
"""

import logging
import os
import re
from typing import Dict, Iterable, List, Set

from scanprops.core.processing.csv_codec import split_as_csv
from scanprops.domain.constants import (
    PROJECT_BASE_DIR,
    TEST_RESULT_FILE_PATTERN,
    WILDCARD_TOKENS,
)

logger = logging.getLogger(__name__)

_REPORT_PATH_PROPERTY_RX = re.compile(
    r"^sonar\.(coverageReportPaths|([^.]+\.)+(xml)?reports?paths?)$",
    re.IGNORECASE,
)

_TEST_RESULT_FILE_RX = re.compile(TEST_RESULT_FILE_PATTERN)


# -----------------------------------------------------------------------------
# EXISTENCE FILTERS
# -----------------------------------------------------------------------------

def existing_paths(paths: Iterable[str]) -> List[str]:
    """Keep the paths that exist on disk, dropping repeats and keeping order."""
    out: List[str] = []
    for p in paths:
        if p and p not in out and os.path.exists(p):
            out.append(p)
    return out


def has_wildcard(path: str) -> bool:
    return any(token in path for token in WILDCARD_TOKENS)


def contains_junit_report(directory: str) -> bool:
    """Check whether a directory holds at least one 'TEST-*.xml' result file."""
    try:
        names = os.listdir(directory)
    except OSError:
        return False
    return any(_TEST_RESULT_FILE_RX.fullmatch(name) for name in names)


# -----------------------------------------------------------------------------
# BASE DIRECTORY
# -----------------------------------------------------------------------------

def find_project_base_dir(properties: Dict[str, str]) -> str:
    """
    Compute the deepest directory containing every module base directory.

    Module base dirs on a different filesystem root (another drive) than the
    top-level one are ignored.

    Args:
        properties: Flat property map holding 'sonar.projectBaseDir' and the
                    prefixed '<module>.sonar.projectBaseDir' entries.

    Returns:
        str: The reconciled base directory.
    """
    root_base = os.path.normpath(os.path.abspath(properties[PROJECT_BASE_DIR]))
    root_drive = _fs_root(root_base)

    for key, value in properties.items():
        if not key.endswith("." + PROJECT_BASE_DIR):
            continue
        base = os.path.normpath(os.path.abspath(value))
        if _fs_root(base) != root_drive:
            continue
        if not _is_within(base, root_base):
            root_base = _common_ancestor(base, root_base)

    return root_base


def _fs_root(path: str) -> str:
    drive, _ = os.path.splitdrive(path)
    return drive.lower() if drive else os.sep


def _common_ancestor(a: str, b: str) -> str:
    try:
        return os.path.commonpath([a, b])
    except ValueError:
        return b


def _is_within(path: str, parent: str) -> bool:
    try:
        return os.path.commonpath([path, parent]) == parent
    except ValueError:
        return False


# -----------------------------------------------------------------------------
# REPORT PATHS
# -----------------------------------------------------------------------------

def is_report_path_property(key: str) -> bool:
    return bool(_REPORT_PATH_PROPERTY_RX.match(key.strip()))


def extract_report_paths(properties: Dict[str, str]) -> Set[str]:
    """Collect the raw paths listed under every report path property."""
    out: Set[str] = set()
    for key, value in properties.items():
        if not isinstance(value, str) or not is_report_path_property(key):
            continue
        for item in split_as_csv(value):
            item = item.strip()
            if item:
                out.add(item)
    return out


def compute_report_paths(properties: Dict[str, str]) -> Set[str]:
    """
    Resolve the report paths found in the properties to absolute paths.

    Relative paths are anchored on the reconciled project base directory.

    Raises:
        ValueError: If 'sonar.projectBaseDir' is not defined.
    """
    if PROJECT_BASE_DIR not in properties:
        raise ValueError(
            f"Cannot compute absolute paths for reports because '{PROJECT_BASE_DIR}' is not defined."
        )
    base_dir = find_project_base_dir(properties)
    out: Set[str] = set()
    for p in extract_report_paths(properties):
        resolved = p if os.path.isabs(p) else os.path.join(base_dir, p)
        out.add(os.path.normpath(resolved))
    return out

