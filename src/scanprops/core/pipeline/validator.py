from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper between untrusted inputs (config file, CLI flags) and the pipeline
engine. Coerces types, normalizes paths and fills missing keys with domain
defaults so the engine can rely on a well-formed dictionary.
"""

import logging
import os
from typing import Any, Dict, List, Tuple

from scanprops.domain.config import OUTPUT_FORMATS, get_default_config
from scanprops.domain.errors import ConfigError
from scanprops.infra.fs import normalize_path
from scanprops.infra.logging.config import LEVEL_NAMES

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on invalid input instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and the
                                          list of warnings produced.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    string_fields = ["model_path", "target_path", "resolution_dir", "output_path", "output_format", "log_level"]
    bool_fields = ["scan_all", "exclude_covered_languages", "use_environment", "save_log"]

    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults.get(field, ""), field, warnings, strict)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults.get(field, False), field, warnings, strict)

    merged["system_properties"] = _as_str_dict(
        merged.get("system_properties"), "system_properties", warnings, strict
    )

    # Domain-specific normalization
    merged["model_path"] = normalize_path(merged["model_path"], defaults["model_path"])
    merged["resolution_dir"] = normalize_path(merged["resolution_dir"], defaults["resolution_dir"])
    if merged["output_path"]:
        merged["output_path"] = os.path.abspath(os.path.expanduser(merged["output_path"]))

    merged["target_path"] = _normalize_target(merged["target_path"], warnings, strict)
    merged["output_format"] = _check_choice(
        merged["output_format"].lower(), OUTPUT_FORMATS, defaults["output_format"], "output_format", warnings, strict
    )
    merged["log_level"] = _check_choice(
        merged["log_level"].upper(), LEVEL_NAMES, defaults["log_level"], "log_level", warnings, strict
    )

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_str_dict(value: Any, field: str, warnings: List[str], strict: bool) -> Dict[str, str]:
    """Ensure input is a flat str-to-str mapping."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"Invalid field '{field}': expected dict, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using empty mapping.")
        return {}

    out: Dict[str, str] = {}
    for k, v in value.items():
        if not isinstance(k, str) or not k.strip():
            msg = f"Invalid key in '{field}': {k!r}."
            if strict:
                raise TypeError(msg)
            warnings.append(f"{msg} Entry discarded.")
            continue
        if isinstance(v, bool):
            out[k.strip()] = "true" if v else "false"
        elif v is None:
            out[k.strip()] = ""
        else:
            out[k.strip()] = str(v)
    return out


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_target(target: str, warnings: List[str], strict: bool) -> str:
    """Module paths are absolute within the build (':' or ':a:b')."""
    if not target:
        return ""
    if not target.startswith(":"):
        if strict:
            raise ConfigError(f"Invalid target module '{target}': must start with ':'.")
        warnings.append(f"Target module '{target}' corrected to ':{target}'.")
        target = ":" + target
    return target


def _check_choice(
        value: str,
        choices: Tuple[str, ...],
        fallback: str,
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    if value in choices:
        return value
    msg = f"Invalid value for '{field}': {value!r} (expected one of {', '.join(choices)})."
    if strict:
        raise ConfigError(msg)
    warnings.append(f"{msg} Using '{fallback}'.")
    return fallback
