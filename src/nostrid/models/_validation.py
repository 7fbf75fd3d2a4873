"""Shared validation helpers for frozen dataclass models.

Private module -- not part of the public API. Used by ``__post_init__``
methods in sibling model modules to enforce runtime type constraints.
"""

from __future__ import annotations

import re
from typing import Any


_HEX_32_RE = re.compile(r"^[0-9a-f]{64}$")


def validate_instance(value: Any, expected: type, name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        article = "an" if expected.__name__[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {expected.__name__}, got {type(value).__name__}")


def validate_str_no_null(value: Any, name: str) -> None:
    """Raise if *value* is not a ``str`` or contains null bytes."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if "\x00" in value:
        raise ValueError(f"{name} contains null bytes")


def validate_optional_str(value: Any, name: str) -> None:
    """Raise if *value* is neither ``None`` nor a null-free ``str``."""
    if value is not None:
        validate_str_no_null(value, name)


def is_hex32(value: str) -> bool:
    """Return True if *value* is a lowercase 64-character hex string."""
    return bool(_HEX_32_RE.match(value))


def validate_hex32_or_empty(value: Any, name: str) -> None:
    """Raise if *value* is not ``""`` or a lowercase 32-byte hex string."""
    validate_str_no_null(value, name)
    if value and not is_hex32(value):
        raise ValueError(f"{name} must be a 64-character lowercase hex string")
