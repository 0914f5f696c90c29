"""
Inclusive value ranges for column filters

A range is written as a two element list, e.g. ``[1, 2]`` or ``["a", "f"]``.
"""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from geostream.core.exceptions import InvalidTypeError, ValidationError

INT64 = np.iinfo(np.int64)


@dataclass(frozen=True)
class StringOrNumberRange:
    """
    Inclusive range over strings, integers or floats

    Attributes:
        start: Lower bound (inclusive)
        end: Upper bound (inclusive)

    Examples:
        >>> StringOrNumberRange.from_value([1, 2]).into_float_range()
        (1.0, 2.0)
        >>> StringOrNumberRange.from_value(["a", "c"]).into_string_range()
        ('a', 'c')
    """

    start: str | int | float
    end: str | int | float

    def __post_init__(self):
        kinds = {_kind_of(self.start), _kind_of(self.end)}
        if None in kinds:
            raise ValidationError(f"Range bounds must be strings or numbers: {self.to_list()}")
        if "string" in kinds and len(kinds) > 1:
            raise ValidationError(f"Range mixes strings and numbers: {self.to_list()}")
        if self.start > self.end:
            raise ValidationError(f"Range start must not exceed end: {self.to_list()}")

    @property
    def kind(self) -> str:
        """One of "string", "int" or "float"."""
        kinds = {_kind_of(self.start), _kind_of(self.end)}
        if "string" in kinds:
            return "string"
        if "float" in kinds:
            return "float"
        return "int"

    @classmethod
    def from_value(cls, value: Any) -> "StringOrNumberRange":
        if isinstance(value, StringOrNumberRange):
            return value
        if isinstance(value, range):
            return cls(value.start, value.stop - 1)
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValidationError(f"Range must be a two element list, got {value!r}")
        return cls(value[0], value[1])

    def into_string_range(self) -> tuple[str, str]:
        if self.kind != "string":
            raise InvalidTypeError(expected="string", found="number")
        return (self.start, self.end)

    def into_float_range(self) -> tuple[float, float]:
        if self.kind == "string":
            raise InvalidTypeError(expected="number", found="string")
        return (float(self.start), float(self.end))

    def into_int_range(self) -> tuple[int, int]:
        """
        Float bounds are truncated towards zero and saturate at the int64
        limits; NaN becomes 0
        """
        if self.kind == "string":
            raise InvalidTypeError(expected="number", found="string")
        return (_saturating_int(self.start), _saturating_int(self.end))

    def to_list(self) -> list:
        return [self.start, self.end]


def _kind_of(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return "string"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    return None


def _saturating_int(value: int | float) -> int:
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        if math.isinf(value):
            return INT64.max if value > 0 else INT64.min
    return max(INT64.min, min(INT64.max, int(value)))
