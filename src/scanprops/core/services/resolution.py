from __future__ import annotations

"""
Classpath Resolution Interchange.

The resolve phase evaluates each module's classpaths and writes them to a
small text file; the analyze phase reads those files back and completes the
library properties. The two phases cannot share memory (they may be split by
a cache boundary), so the file is the only channel between them.

File format: UTF-8, one 'key=csv(absolute paths)' line per classpath list,
followed by a blank line. Keys of the top-level record are bare
('compileClasspath'); other records use '<module>.<list>'.
"""

import logging
import os
from typing import Dict, Iterable, List, Mapping, Optional

from scanprops.core.processing.csv_codec import join_as_csv, join_csv_without_duplicates, split_as_csv
from scanprops.core.processing.paths import existing_paths
from scanprops.domain.constants import (
    CLASSPATH_KINDS,
    COMPILE_CLASSPATH,
    DEFAULT_RESOLUTION_FILE,
    JAVA_BINARIES,
    JAVA_LIBRARIES,
    JAVA_TEST_LIBRARIES,
    LIBRARIES,
    MAIN_LIBRARIES,
    RESOLUTION_FILE_SUFFIX,
    TEST_COMPILE_CLASSPATH,
    TEST_LIBRARIES,
)
from scanprops.domain.module_models import ModuleSpec, module_prefix
from scanprops.domain.property_key import prefixed_key
from scanprops.domain.resolution_models import ResolvedClasspathRecord

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def records_to_map(records: Iterable[ResolvedClasspathRecord]) -> Dict[str, List[str]]:
    """Flatten records into interchange keys, keeping record and list order."""
    out: Dict[str, List[str]] = {}
    for record in records:
        for kind, paths in record.classpaths().items():
            key = kind if record.is_top_level else f"{record.module_name}.{kind}"
            out[key] = [os.path.abspath(p) for p in paths]
    return out


def write(records: Iterable[ResolvedClasspathRecord], target: str) -> str:
    """
    Write resolution records to an interchange file.

    Args:
        records: Records to persist.
        target: Destination file path. Parent directories are created.

    Returns:
        str: The absolute path of the written file.
    """
    return write_entries(records_to_map(records), target)


def write_entries(entries: Mapping[str, Iterable[str]], target: str) -> str:
    target_abs = os.path.abspath(target)
    parent = os.path.dirname(target_abs)
    if parent:
        os.makedirs(parent, exist_ok=True)

    lines = [f"{key}={join_as_csv(paths)}" for key, paths in entries.items()]
    with open(target_abs, "w", encoding="utf-8", newline="\n") as f:
        f.write("\n".join(lines))
        f.write("\n\n")

    logger.debug(f"Wrote {len(lines)} classpath entries to {target_abs}")
    return target_abs


def read(source: str) -> Dict[str, List[str]]:
    """
    Read an interchange file back into its key to path-list map.

    A missing file means nothing was resolved yet and yields an empty map.
    Blank lines are skipped and a line without '=' maps its text to an
    empty list.

    Args:
        source: Interchange file path.

    Returns:
        Dict[str, List[str]]: Paths per key, in file order.

    Raises:
        CsvFormatError: If a value is not valid CSV.
    """
    if not os.path.isfile(source):
        logger.debug(f"No resolution file at {source}; nothing resolved yet.")
        return {}

    out: Dict[str, List[str]] = {}
    with open(source, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line:
                continue
            if "=" not in line:
                out[line] = []
                continue
            key, _, value = line.partition("=")
            out[key.strip()] = split_as_csv(value.strip())

    logger.debug(f"Read {len(out)} classpath entries from {source}")
    return out


def records_from_map(entries: Mapping[str, List[str]]) -> List[ResolvedClasspathRecord]:
    """
    Rebuild resolution records from interchange keys.

    Keys that do not end with a known classpath list name are ignored.
    """
    grouped: Dict[str, Dict[str, List[str]]] = {}
    for key, paths in entries.items():
        if key in CLASSPATH_KINDS:
            module, kind = "", key
        else:
            module, _, kind = key.rpartition(".")
            if kind not in CLASSPATH_KINDS or not module:
                logger.debug(f"Ignoring unknown resolution key '{key}'")
                continue
        grouped.setdefault(module, {})[kind] = list(paths)

    return [
        ResolvedClasspathRecord(
            module_name=module,
            is_top_level=(module == ""),
            compile_classpath=tuple(lists.get(COMPILE_CLASSPATH, [])),
            test_compile_classpath=tuple(lists.get(TEST_COMPILE_CLASSPATH, [])),
            main_libraries=tuple(lists.get(MAIN_LIBRARIES, [])),
            test_libraries=tuple(lists.get(TEST_LIBRARIES, [])),
        )
        for module, lists in grouped.items()
    ]


def resolution_file_name(module_name: Optional[str]) -> str:
    """File name of a module's interchange file ('properties' for the top level)."""
    if not module_name:
        return DEFAULT_RESOLUTION_FILE
    safe = module_name.replace(":", "_").replace(os.sep, "_")
    return f"{safe}{RESOLUTION_FILE_SUFFIX}"


# -----------------------------------------------------------------------------
# RESOLVE PHASE
# -----------------------------------------------------------------------------

def resolve_module(spec: ModuleSpec, output_dir: str, is_top_level: bool = False) -> str:
    """
    Resolve one module's classpaths and write its interchange file.

    Only classpath entries that exist on disk are kept.

    Args:
        spec: Module to resolve.
        output_dir: Directory receiving the interchange files.
        is_top_level: Whether the module is the target of the analysis.

    Returns:
        str: Path of the written interchange file.
    """
    module_name = "" if is_top_level else spec.path
    record = ResolvedClasspathRecord(
        module_name=module_name,
        is_top_level=is_top_level,
        compile_classpath=tuple(os.path.abspath(p) for p in existing_paths(spec.compile_classpath)),
        test_compile_classpath=tuple(os.path.abspath(p) for p in existing_paths(spec.test_compile_classpath)),
    )
    logger.info(f"Resolving properties for {record.display_name}.")
    target = os.path.join(output_dir, resolution_file_name(module_name))
    return write([record], target)


# -----------------------------------------------------------------------------
# ANALYZE PHASE
# -----------------------------------------------------------------------------

def apply_resolved_classpath(
        properties: Dict[str, str],
        record: ResolvedClasspathRecord,
        prefix: Optional[str] = None,
) -> None:
    """
    Complete the library properties of one module from its resolved record.

    Main libraries are appended to 'sonar.java.libraries' without repeating
    entries already listed, and mirrored to the legacy 'sonar.libraries'.
    Test libraries are led by the module's binaries, then the existing value,
    then the resolved entries, without duplicates.

    Args:
        properties: Flat property map, updated in place.
        record: Resolved classpaths of the module.
        prefix: Property prefix of the module. Derived from the module path
                when omitted; always empty for the top-level record.
    """
    if record.is_top_level:
        key_prefix = ""
    elif prefix is not None:
        key_prefix = prefix
    else:
        key_prefix = module_prefix(record.module_name)

    logger.debug(f"Resolving class paths for {record.display_name}")

    main_entries = existing_paths(list(record.compile_classpath) + list(record.main_libraries))
    resolved_main = join_as_csv(os.path.abspath(p) for p in main_entries)

    libraries_key = prefixed_key(JAVA_LIBRARIES, key_prefix)
    libraries = join_csv_without_duplicates(properties.get(libraries_key, ""), resolved_main)
    properties[libraries_key] = libraries
    properties[prefixed_key(LIBRARIES, key_prefix)] = libraries

    test_entries = existing_paths(list(record.test_compile_classpath) + list(record.test_libraries))
    resolved_test = join_as_csv(os.path.abspath(p) for p in test_entries)

    test_key = prefixed_key(JAVA_TEST_LIBRARIES, key_prefix)
    test_libraries = properties.get(prefixed_key(JAVA_BINARIES, key_prefix), "")
    if test_key in properties:
        test_libraries = _join_non_empty(test_libraries, properties[test_key])
    if test_libraries:
        test_libraries = join_csv_without_duplicates(test_libraries, resolved_test)
    else:
        test_libraries = resolved_test
    properties[test_key] = test_libraries


def _join_non_empty(first: str, second: str) -> str:
    return ",".join(part for part in (first, second) if part)
