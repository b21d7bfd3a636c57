from __future__ import annotations

"""
Property Cache Fingerprint.

Builds a stable SHA-256 digest of the properties that matter for caching a
previous analysis. Machine-specific locations and classpath-like values are
left out: they are tracked as input files, not as input values.
"""

import hashlib
import logging
from typing import Dict, FrozenSet

from scanprops.domain import constants as props
from scanprops.domain.property_key import PropertyKey

logger = logging.getLogger(__name__)

_UNCACHED_NAMES: FrozenSet[str] = frozenset({
    props.KOTLIN_GRADLE_PROJECT_ROOT,
    props.PROJECT_BASE_DIR,
    props.WORKING_DIRECTORY,
    props.JAVA_JDK_HOME,
    props.PROJECT_SOURCE_DIRS,
    props.PROJECT_TEST_DIRS,
})


def exclude_property_from_cache(key: str) -> bool:
    """
    Decide whether a property is left out of the cache fingerprint.

    Module-prefixed keys are judged by their canonical property name.
    """
    if key.endswith(".libraries") or key.endswith(".binaries"):
        return True
    if key in _UNCACHED_NAMES:
        return True
    parsed = PropertyKey.parse(key)
    return parsed is not None and parsed.name in _UNCACHED_NAMES


def compute_fingerprint(properties: Dict[str, str]) -> str:
    """
    Hash the cache-relevant properties, independent of insertion order.

    Args:
        properties: Flat property map.

    Returns:
        str: Hex SHA-256 digest.
    """
    lines = [
        f"{key}={properties[key]}"
        for key in sorted(properties)
        if not exclude_property_from_cache(key)
    ]
    raw = "\n".join(lines)
    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()
    logger.debug(f"Fingerprint over {len(lines)} properties: {digest[:12]}")
    return digest
