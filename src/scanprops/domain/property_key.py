from __future__ import annotations

"""
Property Key Domain Model.

A property key is the full identifier of an analysis property as it appears
in the flat output map: an optional module prefix followed by a canonical
property name. Module prefixes may themselves contain dots, so parsing works
by suffix-matching against the known property names.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from scanprops.domain.constants import ALL_PROPERTIES

# Longest names first so that nested names win over their shorter suffixes
_KNOWN_NAMES = tuple(sorted(ALL_PROPERTIES, key=len, reverse=True))


@dataclass(frozen=True)
class PropertyKey:
    """
    Canonical (prefix, name) pair.

    Attributes:
        name: Canonical property name (e.g. 'sonar.sources').
        prefix: Module prefix, or None for the root module.
    """
    name: str
    prefix: Optional[str] = None

    def __post_init__(self) -> None:
        if self.prefix == "":
            object.__setattr__(self, "prefix", None)

    @property
    def is_root(self) -> bool:
        return self.prefix is None

    def __str__(self) -> str:
        if self.prefix is None:
            return self.name
        return f"{self.prefix}.{self.name}"

    @classmethod
    def parse(
            cls,
            value: Optional[str],
            known_names: Iterable[str] = _KNOWN_NAMES,
    ) -> Optional[PropertyKey]:
        """
        Split a flat key back into its module prefix and property name.

        Args:
            value: Key as found in the output map.
            known_names: Canonical names to match against.

        Returns:
            Optional[PropertyKey]: Parsed key, or None if the name is unknown.
        """
        if not value:
            return None

        for name in known_names:
            if value == name:
                return cls(name=name)
            suffix = "." + name
            if value.endswith(suffix):
                prefix = value[: -len(suffix)]
                if prefix:
                    return cls(name=name, prefix=prefix)
        return None


def prefixed_key(name: str, prefix: str) -> str:
    """Build the flat key of a property for the given module prefix."""
    return name if not prefix else f"{prefix}.{name}"
