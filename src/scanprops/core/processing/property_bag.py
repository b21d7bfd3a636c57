from __future__ import annotations

"""
Property Merge Map.

The per-module property bag that defaults, user overrides and the
environment all write into before the values are flattened to strings.
Raw values may be strings, booleans, paths or (nested) collections of
those; 'convert_value' turns them into the final comma-joined form.
"""

import os
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple


class PropertyBag:
    """
    Insertion-ordered map of raw property values for a single module.

    Writes made through 'property'/'properties' are tracked as
    user-defined, which exempts them from later path filtering. The
    'property' method shadows the builtin for the rest of the class body,
    so read accessors are declared above it.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})
        self._user_defined: Dict[str, None] = {}

    # -------------------------------------------------------------------------
    # Merge primitives
    # -------------------------------------------------------------------------

    def put(self, key: str, value: Any) -> None:
        self._values[key] = value

    def put_if_absent(self, key: str, value: Any) -> None:
        # A key holding None counts as absent
        if self._values.get(key) is None:
            self._values[key] = value

    def append(self, key: str, values: Iterable[Any]) -> None:
        """
        Grow the list stored under 'key'.

        A missing key starts a new list, an existing list is extended and a
        scalar becomes the first element of a new list. Duplicates are kept.
        """
        previous = self._values.get(key)
        if isinstance(previous, list):
            grown = list(previous)
        elif previous is None:
            grown = []
        else:
            grown = [previous]
        grown.extend(values)
        self._values[key] = grown

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def items(self) -> List[Tuple[str, Any]]:
        return list(self._values.items())

    @property
    def user_defined_keys(self) -> List[str]:
        return list(self._user_defined)

    def mark_user_defined(self, key: str) -> None:
        self._user_defined[key] = None

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    # -------------------------------------------------------------------------
    # User-facing API (override callbacks)
    # -------------------------------------------------------------------------

    def property(self, key: str, value: Any) -> None:
        """Set a property on behalf of the user."""
        self._values[key] = value
        self._user_defined[key] = None

    def properties(self, mapping: Mapping[str, Any]) -> None:
        for key, value in mapping.items():
            self.property(key, value)


# -----------------------------------------------------------------------------
# VALUE CONVERSION
# -----------------------------------------------------------------------------

def convert_value(value: Any) -> Optional[str]:
    """
    Flatten a raw property value into its final string form.

    Args:
        value: String, bool, path-like, number or nested collection.

    Returns:
        Optional[str]: The converted value, or None when the key must be
                       dropped (a None value or an empty collection).
    """
    return _convert(value, nested=False)


def _convert(value: Any, nested: bool) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, os.PathLike):
        path = os.fspath(value)
        if nested and "," in path:
            return f'"{path}"'
        return path
    if isinstance(value, Iterable):
        parts = [_convert(v, nested=True) for v in value]
        joined = ",".join(p for p in parts if p is not None)
        return joined or None
    return str(value)
