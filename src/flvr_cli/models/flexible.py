"""Lenient integer decoding for loosely typed API fields.

The Flavortown backend is inconsistent about numeric fields: the same id may
arrive as ``12``, ``"12"`` or ``12.0`` depending on the endpoint. Fields typed
as :data:`FlexibleNumber` accept all three and always hold a plain ``int``.
"""

from __future__ import annotations

import math
import re
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class MalformedNumber(ValueError):
    """Raised when a JSON scalar cannot be read as an integer."""


def parse_flexible_int(value: Any) -> int:
    """Normalize a JSON integer, numeric string or float into an ``int``.

    Floats are truncated toward zero. Strings must be a plain (optionally
    signed) run of digits. Booleans, null, objects and arrays are rejected.

    Raises:
        MalformedNumber: If the value cannot be read as an integer.
    """
    if isinstance(value, bool):
        raise MalformedNumber(f"Expected Int, String-Int, or Double, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if not _INT_PATTERN.fullmatch(value):
            raise MalformedNumber(f"String {value!r} is not an integer")
        return int(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedNumber(f"Float {value!r} has no integer value")
        return int(value)
    raise MalformedNumber(
        f"Expected Int, String-Int, or Double, got {type(value).__name__}"
    )


FlexibleNumber = Annotated[
    int,
    BeforeValidator(parse_flexible_int),
    PlainSerializer(int, return_type=int),
]
