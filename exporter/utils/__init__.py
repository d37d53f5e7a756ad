"""Utility modules for canvasform.

This package contains helpers for identifier sanitization, key case
conversion and lenient parsing of user-entered property values.
"""

from .string_utils import (
    sanitize_name,
    to_snake_case,
    split_csv,
    parse_number,
    first_value,
    is_blank,
)

__all__ = [
    "sanitize_name",
    "to_snake_case",
    "split_csv",
    "parse_number",
    "first_value",
    "is_blank",
]
