from __future__ import annotations

"""
Core orchestration pipeline.

Coordinates the two phases of a run:

Resolve phase ('run_resolution'):
1. Validates configuration and loads the module model.
2. Writes one classpath interchange file per analysed module.

Analyze phase ('run_analysis'):
1. Validates configuration and loads the module model.
2. Computes the hierarchical property map.
3. Honours skipped analyses (empty map, 'sonar.skip').
4. Completes library properties from the interchange files.
5. Optionally collects orphan sources (scan-all).
6. Filters non-existent paths and computes the cache fingerprint.
7. Persists the map when an output path is configured.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Set

from scanprops.core.pipeline.path_filter import filter_path_properties
from scanprops.core.pipeline.validator import validate_config
from scanprops.core.pipeline.writer import write_properties
from scanprops.core.processing.csv_codec import join_as_csv, join_csv_without_duplicates
from scanprops.core.processing.paths import compute_report_paths
from scanprops.core.services import resolution
from scanprops.core.services.environment import EnvironmentSnapshot
from scanprops.core.services.fingerprint import compute_fingerprint
from scanprops.core.services.property_computer import PropertyComputer
from scanprops.core.services.source_collector import collect_sources
from scanprops.domain import constants as props
from scanprops.domain.errors import MalformedOverrideError, ScanPropsError
from scanprops.domain.module_models import ModuleNode, ModuleTree
from scanprops.domain.pipeline_models import (
    AnalysisResult,
    create_error_result,
    create_skipped_result,
)
from scanprops.infra.model_loader import load_model

logger = logging.getLogger(__name__)


# ==============================================================================
# RESOLVE PHASE
# ==============================================================================

def run_resolution(config: Optional[Dict[str, Any]]) -> AnalysisResult:
    """
    Resolve the classpaths of every analysed module into interchange files.

    Args:
        config: The configuration dictionary (raw or partial).

    Returns:
        AnalysisResult: Status and the list of written files.
    """
    logger.info("Resolution phase started.")
    cfg = _prepare_config(config)

    model_path = cfg["model_path"]
    if not os.path.isfile(model_path):
        msg = f"Module model not found: {model_path}"
        logger.error(msg)
        return create_error_result(msg, {"model_path": model_path})

    try:
        tree = ModuleTree.snapshot(load_model(model_path))
        target_path = cfg["target_path"] or None
        computer = PropertyComputer(tree)
        target = computer.target_node(target_path)

        written: List[str] = []
        for path in computer.module_prefixes(target_path):
            node = tree.find(path)
            if node is None:
                continue
            written.append(
                resolution.resolve_module(node.spec, cfg["resolution_dir"], is_top_level=(node.index == target.index))
            )
    except (ScanPropsError, OSError, ValueError) as e:
        msg = f"Resolution failure: {e}"
        logger.error(msg)
        return create_error_result(msg, {"model_path": model_path})

    logger.info(f"Resolution completed: {len(written)} file(s) in {cfg['resolution_dir']}")
    return AnalysisResult(
        ok=True,
        resolution_files=written,
        summary={"phase": "resolve", "modules": len(written), "resolution_dir": cfg["resolution_dir"]},
    )


# ==============================================================================
# ANALYZE PHASE
# ==============================================================================

def run_analysis(config: Optional[Dict[str, Any]]) -> AnalysisResult:
    """
    Execute the full analyze phase and return the final property map.

    Failures are reported through the result object, except a failing user
    override, which is re-raised.

    Args:
        config: The configuration dictionary (raw or partial).

    Returns:
        AnalysisResult: Object containing status, properties and summary.

    Raises:
        MalformedOverrideError: If a user override callback fails.
    """
    logger.info("Analysis pipeline started.")
    cfg = _prepare_config(config)

    model_path = cfg["model_path"]
    if not os.path.isfile(model_path):
        msg = f"Module model not found: {model_path}"
        logger.error(msg)
        return create_error_result(msg, {"model_path": model_path})

    try:
        return _analyze(cfg)
    except MalformedOverrideError:
        raise
    except (ScanPropsError, OSError, ValueError) as e:
        msg = f"Analysis failure: {e}"
        logger.error(msg)
        return create_error_result(msg, {"model_path": model_path})


def _analyze(cfg: Dict[str, Any]) -> AnalysisResult:
    # -------------------------------------------------------------------------
    # 1) Model & Computation
    # -------------------------------------------------------------------------
    tree = ModuleTree.snapshot(load_model(cfg["model_path"]))
    environment = EnvironmentSnapshot.capture(
        cfg["system_properties"],
        use_environment=cfg["use_environment"],
    )
    computer = PropertyComputer(tree, environment=environment)
    target_path = cfg["target_path"] or None
    computed = computer.compute(target_path)

    properties: Dict[str, str] = dict(computed.properties)
    user_defined: Set[str] = set(computed.user_defined_keys)

    # -------------------------------------------------------------------------
    # 2) Skipped analyses
    # -------------------------------------------------------------------------
    if not properties:
        reason = "no properties configured, was it skipped in all projects?"
        logger.warning(f"Skipping analysis: {reason}")
        return create_skipped_result(reason)

    if properties.get(props.SKIP, "false").strip().lower() == "true":
        logger.warning("Analysis skipped")
        return create_skipped_result(f"{props.SKIP}=true", properties)

    if logger.isEnabledFor(logging.DEBUG):
        properties[props.VERBOSE] = "true"

    # -------------------------------------------------------------------------
    # 3) Classpath resolution
    # -------------------------------------------------------------------------
    resolution_files = _apply_resolution_files(
        cfg["resolution_dir"], properties, computer.module_prefixes(target_path)
    )

    # -------------------------------------------------------------------------
    # 4) Scan-all
    # -------------------------------------------------------------------------
    collected: List[str] = []
    scan_all = cfg["scan_all"] or properties.get(props.GRADLE_SCAN_ALL, "").strip().lower() == "true"
    if scan_all:
        target = computer.target_node(target_path)
        collected = _scan_all(tree, target, properties, user_defined, cfg["exclude_covered_languages"])

    # -------------------------------------------------------------------------
    # 5) Path filtering & fingerprint
    # -------------------------------------------------------------------------
    filter_path_properties(properties, user_defined)
    fingerprint = compute_fingerprint(properties)

    # -------------------------------------------------------------------------
    # 6) Persistence
    # -------------------------------------------------------------------------
    output_path: Optional[str] = None
    if cfg["output_path"]:
        output_path = write_properties(properties, cfg["output_path"], cfg["output_format"])

    summary = {
        "phase": "analyze",
        "modules": len(computer.module_prefixes(target_path)),
        "properties": len(properties),
        "user_defined": len(user_defined),
        "resolution_files": len(resolution_files),
        "collected_sources": len(collected),
        "scan_all": scan_all,
    }

    logger.info("Analysis pipeline completed successfully.")
    return AnalysisResult(
        ok=True,
        properties=properties,
        user_defined_keys=sorted(user_defined),
        collected_sources=collected,
        fingerprint=fingerprint,
        resolution_files=resolution_files,
        output_path=output_path,
        summary=summary,
    )


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _prepare_config(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    cfg, warnings = validate_config(config if config is not None else {}, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")
    return cfg


def _apply_resolution_files(
        resolution_dir: str,
        properties: Dict[str, str],
        prefixes: Dict[str, str],
) -> List[str]:
    """Merge every interchange file of the directory into the property map."""
    if not os.path.isdir(resolution_dir):
        logger.debug(f"No resolution directory at {resolution_dir}; nothing resolved yet.")
        return []

    applied: List[str] = []
    for name in sorted(os.listdir(resolution_dir)):
        if name != props.DEFAULT_RESOLUTION_FILE and not name.endswith(props.RESOLUTION_FILE_SUFFIX):
            continue
        path = os.path.join(resolution_dir, name)
        logger.info(f"Looking at resolution file: {path}")
        for record in resolution.records_from_map(resolution.read(path)):
            if record.is_top_level:
                resolution.apply_resolved_classpath(properties, record)
            elif record.module_name in prefixes:
                resolution.apply_resolved_classpath(properties, record, prefixes[record.module_name])
            else:
                logger.debug(f"Ignoring resolved classpath of {record.module_name}: not part of this analysis")
        applied.append(path)
    return applied


def _scan_all(
        tree: ModuleTree,
        target: ModuleNode,
        properties: Dict[str, str],
        user_defined: Set[str],
        exclude_covered_languages: bool,
) -> List[str]:
    """Append orphan files below the target's base directory to 'sonar.sources'."""
    if props.PROJECT_SOURCE_DIRS in user_defined or props.PROJECT_TEST_DIRS in user_defined:
        logger.warning(
            f"Parameter {props.GRADLE_SCAN_ALL} is enabled but the scanner will not collect additional "
            f"sources because {props.PROJECT_SOURCE_DIRS} or {props.PROJECT_TEST_DIRS} has been overridden."
        )
        return []

    logger.info(f"Parameter {props.GRADLE_SCAN_ALL} is enabled. The scanner will attempt to collect additional sources.")

    existing: List[str] = []
    ignored: List[str] = []
    for node in tree.descendants_of(target):
        spec = node.spec
        if _is_skipped(tree, node):
            ignored.append(spec.project_dir)
            continue
        existing.extend(spec.source_dirs)
        existing.extend(spec.test_dirs)
        if spec.build_file:
            existing.append(spec.build_file)

    collected = collect_sources(
        target.spec.project_dir,
        existing_sources=existing,
        directories_to_ignore=ignored,
        excluded_files=compute_report_paths(properties),
        exclude_covered_languages=exclude_covered_languages,
    )

    if collected:
        properties[props.PROJECT_SOURCE_DIRS] = join_csv_without_duplicates(
            properties.get(props.PROJECT_SOURCE_DIRS, ""),
            join_as_csv(collected),
        )
    return collected


def _is_skipped(tree: ModuleTree, node: ModuleNode) -> bool:
    """A module is skipped when it or one of its ancestors is."""
    current: Optional[ModuleNode] = node
    while current is not None:
        if current.skip:
            return True
        current = None if current.parent is None else tree.node(current.parent)
    return False
