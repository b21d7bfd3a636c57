from __future__ import annotations

"""
CSV Codec for Multi-Valued Properties.

Encodes lists of strings into a single comma-separated value and back. A
value that contains a comma is wrapped in double quotes. Embedded double
quotes are NOT escaped, so values containing quotes do not round-trip; this
is a known limitation of the format and is left as is.
"""

from typing import Iterable, List, Optional

from scanprops.domain.errors import CsvFormatError

_SEPARATOR = ","
_QUOTE = '"'


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def join_as_csv(values: Iterable[str]) -> str:
    """
    Join values with commas, quoting any value that contains a comma.

    Args:
        values: Ordered string values.

    Returns:
        str: The encoded value.
    """
    out: List[str] = []
    for value in values:
        text = str(value)
        if _SEPARATOR in text:
            out.append(f"{_QUOTE}{text}{_QUOTE}")
        else:
            out.append(text)
    return _SEPARATOR.join(out)


def split_as_csv(joined: Optional[str]) -> List[str]:
    """
    Split an encoded value on commas that are outside quoted spans.

    The empty string decodes to the empty list.

    Args:
        joined: Encoded value.

    Returns:
        List[str]: The decoded values with their enclosing quotes removed.

    Raises:
        CsvFormatError: On an unterminated quote, or on characters between a
                        closing quote and the next separator.
    """
    if not joined:
        return []

    values: List[str] = []
    current: List[str] = []
    in_quotes = False
    after_quote = False

    for pos, ch in enumerate(joined):
        if in_quotes:
            if ch == _QUOTE:
                in_quotes = False
                after_quote = True
            else:
                current.append(ch)
            continue

        if ch == _SEPARATOR:
            values.append("".join(current))
            current = []
            after_quote = False
        elif after_quote:
            raise CsvFormatError(
                f"Unexpected character {ch!r} after closing quote at position {pos} in {joined!r}"
            )
        elif ch == _QUOTE and not current:
            in_quotes = True
        else:
            current.append(ch)

    if in_quotes:
        raise CsvFormatError(f"Unterminated quoted value in {joined!r}")

    values.append("".join(current))
    return values


def join_csv_without_duplicates(first: Optional[str], second: Optional[str]) -> str:
    """
    Merge two encoded values, keeping first-seen order.

    Blank entries and repeated entries are dropped.
    """
    seen: List[str] = []
    for value in split_as_csv(first) + split_as_csv(second):
        v = value.strip()
        if v and v not in seen:
            seen.append(v)
    return join_as_csv(seen)
