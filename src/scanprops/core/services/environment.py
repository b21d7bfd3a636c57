from __future__ import annotations

"""
Environment Snapshot Service.

Captures the ambient inputs that apply to the analysis target module:
'SONAR_*' environment variables, the JSON blob in 'SONARQUBE_SCANNER_PARAMS'
and the 'sonar*' system properties given on the command line. The snapshot
is taken once and injected into the property computer, which never reads
process state itself.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from scanprops.domain.constants import ENV_JSON_PARAMS, ENV_PREFIX, PROPERTY_PREFIX
from scanprops.domain.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """
    Immutable view of the environment-derived and system properties.

    Attributes:
        environment_properties: Properties derived from environment variables.
        system_properties: Allow-listed system properties.
    """
    environment_properties: Dict[str, str] = field(default_factory=dict)
    system_properties: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> EnvironmentSnapshot:
        return cls()

    @classmethod
    def capture(
            cls,
            system_properties: Optional[Mapping[str, str]] = None,
            env: Optional[Mapping[str, str]] = None,
            use_environment: bool = True,
    ) -> EnvironmentSnapshot:
        """
        Build a snapshot from the process environment and the given properties.

        Args:
            system_properties: Raw system properties (e.g. from '-D' flags).
            env: Environment mapping; defaults to 'os.environ'.
            use_environment: When False, environment variables are ignored.

        Returns:
            EnvironmentSnapshot: The captured inputs.
        """
        env_props: Dict[str, str] = {}
        if use_environment:
            env_props = load_environment_properties(os.environ if env is None else env)
        return cls(
            environment_properties=env_props,
            system_properties=filter_system_properties(system_properties or {}),
        )

    def merged(self) -> Dict[str, str]:
        """Environment properties first, then system properties (which win)."""
        out = dict(self.environment_properties)
        out.update(self.system_properties)
        return out


# -----------------------------------------------------------------------------
# PUBLIC HELPERS
# -----------------------------------------------------------------------------

def load_environment_properties(env: Mapping[str, str]) -> Dict[str, str]:
    """
    Derive analysis properties from environment variables.

    'SONAR_HOST_URL' becomes 'sonar.host.url'. Entries of the JSON object in
    'SONARQUBE_SCANNER_PARAMS' are merged first, so individual variables win.

    Args:
        env: Environment variable mapping.

    Returns:
        Dict[str, str]: Derived properties, in a stable order.

    Raises:
        ConfigError: If 'SONARQUBE_SCANNER_PARAMS' is not a JSON object.
    """
    out: Dict[str, str] = {}

    raw_json = env.get(ENV_JSON_PARAMS)
    if raw_json:
        try:
            params = json.loads(raw_json)
        except ValueError as e:
            raise ConfigError(f"Failed to parse JSON in {ENV_JSON_PARAMS} environment variable: {e}") from e
        if not isinstance(params, dict):
            raise ConfigError(f"{ENV_JSON_PARAMS} must contain a JSON object.")
        for key, value in params.items():
            out[str(key)] = _as_property_value(value)

    for name in sorted(env):
        if not name.startswith(ENV_PREFIX) or len(name) == len(ENV_PREFIX):
            continue
        key = PROPERTY_PREFIX + "." + name[len(ENV_PREFIX):].lower().replace("_", ".")
        out[key] = env[name]

    if out:
        logger.debug(f"Loaded {len(out)} properties from the environment")
    return out


def filter_system_properties(props: Mapping[str, str]) -> Dict[str, str]:
    """Keep only the properties whose key starts with 'sonar'."""
    return {
        str(k): _as_property_value(v)
        for k, v in props.items()
        if str(k).startswith(PROPERTY_PREFIX)
    }


def _as_property_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)
