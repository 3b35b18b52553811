"""Lenient reading of numbers that may arrive as JSON strings."""

from __future__ import annotations

import math
import re
from typing import Any, Union

Number = Union[int, float]

_JSON_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?P<frac>\.\d+)?(?P<exp>[eE][+-]?\d+)?")


def deserialize_str_to_number(value: Any) -> Number:
    """Accept a JSON number or a string holding one and return the number.

    Raise ValueError if the value is neither, or the string is not a number.
    """
    if isinstance(value, bool):
        raise ValueError("Expected a string or a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError("Expected a finite number")
        return value
    if isinstance(value, str):
        match = _JSON_NUMBER.fullmatch(value)
        if match is None:
            raise ValueError(f"invalid number: {value!r}")
        if match.group("frac") is None and match.group("exp") is None:
            return int(value)
        parsed = float(value)
        if not math.isfinite(parsed):
            raise ValueError(f"number out of range: {value!r}")
        return parsed
    raise ValueError("Expected a string or a number")