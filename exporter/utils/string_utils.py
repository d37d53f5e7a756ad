"""String manipulation utilities for canvasform.

This module provides the identifier and value clean-up functions shared by
the resource synthesizers and the HCL formatter.
"""

import math
import re
from typing import Any, List

_UNSAFE_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")


def sanitize_name(name: str) -> str:
    """Convert a display label into a Terraform-safe resource name.

    Lowercases, replaces anything outside ``[a-z0-9_]`` with ``_``, collapses
    repeated underscores and trims them from both ends. Applying it twice
    gives the same result as applying it once.

    Args:
        name: Free-form label, e.g. ``"My Web Server"``

    Returns:
        Sanitized identifier, e.g. ``"my_web_server"`` (may be empty)
    """
    cleaned = _UNSAFE_CHARS.sub("_", str(name).lower())
    cleaned = _REPEATED_UNDERSCORES.sub("_", cleaned)
    return cleaned.strip("_")


def to_snake_case(key: str) -> str:
    """Convert a camelCase property key to snake_case.

    Keys that are already snake_case pass through unchanged.

    Examples:
        >>> to_snake_case("instanceType")
        'instance_type'
        >>> to_snake_case("sseKMSKeyId")
        'sse_kms_key_id'
    """
    key = _ACRONYM_BOUNDARY.sub(r"\1_\2", key)
    key = _CAMEL_BOUNDARY.sub(r"\1_\2", key)
    return key.replace("-", "_").lower()


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def first_value(value: Any) -> Any:
    """Pick a representative from a merged property value.

    Conflicting scalars surface from the merger as a list; synthesizers that
    need a single value take the first non-blank entry.
    """
    if isinstance(value, list):
        for item in value:
            if not is_blank(item):
                return item
        return None
    return value


def split_csv(value: Any) -> List[str]:
    """Split a comma-separated text field into trimmed, non-empty items.

    Lists are accepted as-is (each item trimmed), so merged list values and
    free text are handled the same way.
    """
    if value is None:
        return []
    items = value if isinstance(value, list) else str(value).split(",")
    result = []
    for item in items:
        text = str(item).strip()
        if text and text not in result:
            result.append(text)
    return result


def parse_number(value: Any) -> Any:
    """Coerce numeric text to int/float, passing anything else through.

    Text that only parses as a non-finite float (``"inf"``, ``"nan"``) is
    passed through unchanged.

    Examples:
        >>> parse_number("20")
        20
        >>> parse_number("twenty")
        'twenty'
        >>> parse_number("inf")
        'inf'
    """
    if isinstance(value, bool) or not isinstance(value, str):
        return value
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    return number if math.isfinite(number) else value
