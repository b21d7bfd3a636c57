from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
argparse namespace into configuration overrides for the pipeline.
"""

import argparse
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the scanprops CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="scanprops",
        description="Compute the analysis properties of a multi-module build.",
    )

    # --- Model & Configuration ---
    p.add_argument(
        "-m", "--model",
        dest="model_path",
        default=None,
        help="Module model JSON file (default: ./scanprops-model.json).",
    )
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Configuration file to load instead of the user configuration.",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore any persisted configuration.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective configuration (to --config or the user configuration).",
    )

    # --- Analysis Scope ---
    p.add_argument(
        "-t", "--target",
        dest="target_path",
        default=None,
        help="Path of the module to analyse (e.g. ':app'). Defaults to the root module.",
    )
    p.add_argument(
        "-r", "--resolution-dir",
        dest="resolution_dir",
        default=None,
        help="Directory holding the classpath resolution files.",
    )
    p.add_argument(
        "--resolve",
        action="store_true",
        help="Run the resolve phase only: write classpath resolution files.",
    )
    p.add_argument(
        "--scan-all",
        action="store_true",
        help="Also collect files not declared in any source set.",
    )
    p.add_argument(
        "--include-jvm-sources",
        action="store_true",
        help="With --scan-all, also collect .java/.jav/.kt files.",
    )

    # --- Ambient Properties ---
    p.add_argument(
        "-D",
        dest="system_properties",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="System property applied to the target module (repeatable).",
    )
    p.add_argument(
        "--no-env",
        action="store_true",
        help="Ignore SONAR_* environment variables.",
    )

    # --- Output ---
    p.add_argument(
        "-o", "--output",
        dest="output_path",
        default=None,
        help="Write the properties to this file instead of stdout.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Render the output as JSON.",
    )

    # --- Diagnostics ---
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--save-log",
        action="store_true",
        help="Also write the log to the user data directory.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["model_path"] = args.model_path
    overrides["target_path"] = args.target_path
    overrides["resolution_dir"] = args.resolution_dir
    overrides["output_path"] = args.output_path

    if args.json_output:
        overrides["output_format"] = "json"
    if args.scan_all:
        overrides["scan_all"] = True
    if args.include_jvm_sources:
        overrides["exclude_covered_languages"] = False
    if args.no_env:
        overrides["use_environment"] = False
    if args.save_log:
        overrides["save_log"] = True
    if args.debug:
        overrides["log_level"] = "DEBUG"

    system_properties = _parse_key_values(args.system_properties)
    if system_properties:
        overrides["system_properties"] = system_properties

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _parse_key_values(values: Optional[List[str]]) -> Dict[str, str]:
    """
    Convert repeated 'KEY=VALUE' items into a mapping.

    An item without '=' maps its key to the empty string.
    """
    out: Dict[str, str] = {}
    for item in values or []:
        key, _, value = item.partition("=")
        key = key.strip()
        if key:
            out[key] = value.strip()
    return out
