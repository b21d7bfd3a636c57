from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, loading and merging of
configuration sources (defaults, persisted file, CLI overrides), execution
of the resolve or analyze phase, and result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from scanprops.core.pipeline.engine import run_analysis, run_resolution
from scanprops.core.pipeline.validator import validate_config
from scanprops.core.pipeline.writer import render_properties
from scanprops.domain.config import get_default_config, load_config, save_config
from scanprops.domain.errors import MalformedOverrideError
from scanprops.domain.pipeline_models import AnalysisResult
from scanprops.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from scanprops.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success or skipped, 1 failure,
             2 invalid input, 130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional rotating file)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=_log_file(args.save_log)))

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (defaults vs persisted state)
    if args.use_defaults:
        base_conf = get_default_config()
    else:
        base_conf = load_config(args.config_path)

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    # Persisted settings may ask for another level or a log file
    if clean_conf["log_level"] != log_level or clean_conf["save_log"] != args.save_log:
        configure_logging(
            LoggingConfig(level=clean_conf["log_level"], console=True, log_file=_log_file(clean_conf["save_log"])),
            force=True,
        )

    if args.save_config:
        save_config(clean_conf, args.config_path)
        logger.info("Effective configuration persisted.")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 6. Pre-flight input verification
    model_path = clean_conf.get("model_path", "")
    if not os.path.isfile(model_path):
        msg = f"Module model does not exist: {model_path}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    # 7. Pipeline execution phase
    logger.info(f"Using module model: {model_path}")
    try:
        if args.resolve:
            result = run_resolution(clean_conf)
        else:
            result = run_analysis(clean_conf)
    except KeyboardInterrupt:
        msg = "Interrupted by user."
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130
    except MalformedOverrideError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        msg = f"Pipeline failure: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 1

    # 8. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    elif result.ok and not result.skipped and not args.resolve and not result.output_path:
        sys.stdout.write(render_properties(result.properties, clean_conf["output_format"]))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged; 'system_properties' is merged key by key so
    '-D' values extend the persisted ones.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    keys_to_merge = [
        "model_path", "target_path", "resolution_dir",
        "output_path", "output_format",
        "scan_all", "exclude_covered_languages",
        "use_environment", "log_level", "save_log",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]

    extra = overrides.get("system_properties")
    if extra:
        merged = dict(out.get("system_properties") or {})
        merged.update(extra)
        out["system_properties"] = merged
    return out


def _log_file(save_log: bool) -> Optional[str]:
    return get_default_log_path() if save_log else None

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: AnalysisResult) -> None:
    """
    Format and print the execution result.

    Args:
        result: The pipeline result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    summary = result.summary

    if result.skipped:
        print(f"Analysis skipped: {summary.get('skip_reason', '')}")
        return

    print("Success.")

    if summary.get("phase") == "resolve":
        print(f"Resolution files written to: {summary.get('resolution_dir')}")
        for path in result.resolution_files:
            print(f"  - {path}")
        return

    if result.output_path:
        print(f"Properties written to: {result.output_path}")

    stats_keys = {
        "modules": "Modules analysed",
        "properties": "Properties",
        "resolution_files": "Resolution files applied",
        "collected_sources": "Orphan files collected",
    }
    for key, label in stats_keys.items():
        if key in summary:
            print(f"{label}: {summary[key]}")

    if result.fingerprint:
        print(f"Fingerprint: {result.fingerprint}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
