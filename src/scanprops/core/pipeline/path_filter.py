from __future__ import annotations

"""
Path Property Filtering Stage.

Runs once the classpaths are resolved, right before the map is handed to
the scanner: paths that do not exist on disk are removed from the source,
binary and library properties so the scanner does not report them.

User-defined properties are left untouched, since users may point at paths
that do not exist yet or use wildcards and placeholders.
"""

import logging
import os
from typing import Callable, Dict, FrozenSet, Iterable, List, Tuple

from scanprops.core.processing.csv_codec import join_as_csv, split_as_csv
from scanprops.core.processing.paths import contains_junit_report, has_wildcard
from scanprops.domain import constants as props
from scanprops.domain.property_key import PropertyKey

logger = logging.getLogger(__name__)

_PATH_PROPERTY_NAMES: FrozenSet[str] = frozenset({
    props.PROJECT_SOURCE_DIRS,
    props.PROJECT_TEST_DIRS,
    props.JAVA_BINARIES,
    props.JAVA_LIBRARIES,
    props.JAVA_TEST_BINARIES,
    props.JAVA_TEST_LIBRARIES,
    props.LIBRARIES,
    props.GROOVY_BINARIES,
    props.BINARIES,
})

_JUNIT_REPORT_NAMES: FrozenSet[str] = frozenset({
    props.JUNIT_REPORT_PATHS,
    props.SUREFIRE_REPORTS_PATH,
    props.JUNIT_REPORTS_PATH,
})

# Modules without these keys inherit them from their parent module
_KEEP_WHEN_EMPTY: FrozenSet[str] = frozenset({props.PROJECT_SOURCE_DIRS, props.PROJECT_TEST_DIRS})


def filter_path_properties(properties: Dict[str, str], user_defined_keys: Iterable[str] = ()) -> None:
    """
    Remove non-existent paths from path-valued properties, in place.

    Args:
        properties: Flat property map to filter.
        user_defined_keys: Keys exempt from filtering.
    """
    user_defined = set(user_defined_keys)

    for full_key, parsed in _keys_with_names(properties, _PATH_PROPERTY_NAMES):
        if full_key in user_defined:
            continue
        filtered = _filter_paths(properties[full_key], os.path.exists)
        if not filtered and parsed.name not in _KEEP_WHEN_EMPTY:
            del properties[full_key]
        else:
            properties[full_key] = filtered

    for full_key, _ in _keys_with_names(properties, _JUNIT_REPORT_NAMES):
        _filter_or_drop(properties, full_key, contains_junit_report)

    for full_key, _ in _keys_with_names(properties, frozenset({props.JACOCO_XML_REPORT_PATHS})):
        _filter_or_drop(properties, full_key, os.path.exists)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _keys_with_names(properties: Dict[str, str], names: FrozenSet[str]) -> List[Tuple[str, PropertyKey]]:
    out: List[Tuple[str, PropertyKey]] = []
    for key in properties:
        parsed = PropertyKey.parse(key)
        if parsed is not None and parsed.name in names:
            out.append((key, parsed))
    return out


def _filter_or_drop(properties: Dict[str, str], key: str, keep: Callable[[str], bool]) -> None:
    filtered = _filter_paths(properties[key], keep)
    if filtered:
        properties[key] = filtered
    else:
        logger.debug(f"Dropping '{key}': no usable report path")
        del properties[key]


def _filter_paths(value: str, keep: Callable[[str], bool]) -> str:
    """Filter a comma-separated path list, never dropping wildcard entries."""
    return join_as_csv(
        p for p in split_as_csv(value)
        if p and (has_wildcard(p) or keep(p))
    )
