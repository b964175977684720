"""Helpers for reading the loosely typed ``specs`` bag of a product."""

from __future__ import annotations

import re
from typing import Any, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from ..schemas import Product

Number = Union[int, float]

_DIGITS = re.compile(r"(\d+)")
_SEPARATORS = re.compile(r"[\s-]")


def parse_watts(value: Any) -> Number:
    """Read a power or length figure such as ``"120W"``, ``"65 W"`` or ``120``.

    Numbers pass through unchanged. Strings yield the first run of digits as an
    int. Anything falsy, or a string without digits, is 0.
    """
    if not value:
        return 0
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value

    match = _DIGITS.search(str(value))
    return int(match.group(1)) if match else 0


def spec_value(product: Optional["Product"], *keys: str) -> Any:
    """Return the first truthy value among ``keys``, or None."""
    if product is None:
        return None
    specs = product.specs or {}
    for key in keys:
        value = specs.get(key)
        if value:
            return value
    return None


def has_spec(product: Optional["Product"], key: str) -> bool:
    return product is not None and key in (product.specs or {})


def normalize_socket(socket: Any) -> str:
    return _SEPARATORS.sub("", str(socket).lower())


def normalize_memory_type(memory_type: Any) -> str:
    return _SEPARATORS.sub("", str(memory_type).upper())


def normalize_form_factor(form_factor: Any) -> str:
    return _SEPARATORS.sub("", str(form_factor).upper())
