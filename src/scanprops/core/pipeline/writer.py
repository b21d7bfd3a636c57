from __future__ import annotations

"""
Property Map Output Formatting.

Renders the final property map as a Java-style '.properties' document or
as JSON, and persists it to disk.
"""

import json
import logging
import os
from typing import Dict

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# RENDERING
# -----------------------------------------------------------------------------

def render_properties(properties: Dict[str, str], fmt: str = "properties") -> str:
    """
    Render the property map in the requested format.

    Args:
        properties: Flat property map (insertion order is preserved).
        fmt: 'properties' or 'json'.

    Returns:
        str: The rendered document, newline-terminated.
    """
    if fmt == "json":
        return json.dumps(properties, ensure_ascii=False, indent=2) + "\n"
    if fmt != "properties":
        raise ValueError(f"Unknown output format: {fmt}")

    lines = [f"{_escape(k, is_key=True)}={_escape(v, is_key=False)}" for k, v in properties.items()]
    return "\n".join(lines) + "\n"


def _escape(text: str, is_key: bool) -> str:
    out = text.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    if is_key:
        for ch in ("=", ":", " "):
            out = out.replace(ch, "\\" + ch)
    return out

# -----------------------------------------------------------------------------
# PERSISTENCE
# -----------------------------------------------------------------------------

def write_properties(properties: Dict[str, str], output_path: str, fmt: str = "properties") -> str:
    """
    Write the rendered property map to a file, creating parent directories.

    Raises:
        OSError: If the file cannot be written.
    """
    target = os.path.abspath(output_path)
    parent = os.path.dirname(target)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        f.write(render_properties(properties, fmt))
    logger.info(f"Wrote {len(properties)} properties to {target}")
    return target
