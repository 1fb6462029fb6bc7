"""Signed fixed-point decimal with six fractional digits."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import total_ordering
from typing import ClassVar, Union

_U64_MAX = 2**64 - 1
_U64_TEXT = re.compile(r"\+?[0-9]+")


def _parse_u64(text: str, error: str) -> int:
    if not _U64_TEXT.fullmatch(text):
        raise ValueError(error)
    value = int(text)
    if value > _U64_MAX:
        raise ValueError(error)
    return value


@total_ordering
@dataclass(frozen=True)
class Decimal:
    """A sign and an unsigned magnitude scaled by 10**6."""

    sign: int = 1
    raw: int = 0

    DECIMAL: ClassVar[int] = 6
    SCALE: ClassVar[int] = 10**6
    MAX: ClassVar[int] = _U64_MAX // 10**6
    ZERO: ClassVar["Decimal"]

    def __post_init__(self) -> None:
        if self.sign not in (-1, 1):
            raise ValueError("sign must be 1 or -1")
        if not 0 <= self.raw <= _U64_MAX:
            raise OverflowError("Decimal raw value out of range")

    @classmethod
    def from_float(cls, value: float) -> Decimal:
        """Convert a float, rounding half away from zero to six places."""
        value = float(value)
        if math.isnan(value) or math.isinf(value):
            raise ValueError("Cannot convert NaN or infinite value to Decimal")
        if value == 0.0:
            return cls.ZERO
        if abs(value) > float(cls.MAX):
            raise ValueError("Value exceeds Decimal maximum limit")
        sign = -1 if value < 0.0 else 1
        raw = math.floor(abs(value) * cls.SCALE + 0.5)
        return cls(sign, min(raw, _U64_MAX))

    @classmethod
    def from_int(cls, value: int) -> Decimal:
        """Convert a non-negative integer."""
        if value < 0:
            raise ValueError("Negative integer cannot be converted to Decimal")
        raw = value * cls.SCALE
        if raw > _U64_MAX:
            raise OverflowError("Decimal overflow")
        return cls(1, raw)

    @classmethod
    def parse(cls, text: str) -> Decimal:
        """Parse text such as '-12.5'; digits past the sixth are dropped."""
        trimmed = text.strip()
        if not trimmed:
            raise ValueError("Empty string cannot be converted to Decimal")
        sign = -1 if trimmed.startswith("-") else 1
        unsigned = trimmed[1:] if sign == -1 else trimmed
        parts = unsigned.split(".")
        if len(parts) > 2:
            raise ValueError("Invalid Decimal format")
        integer_part = _parse_u64(parts[0], "Invalid integer part")
        if len(parts) == 2:
            fraction = parts[1].ljust(cls.DECIMAL, "0")[: cls.DECIMAL]
            fractional_part = _parse_u64(fraction, "Invalid fractional part")
        else:
            fractional_part = 0
        raw = integer_part * cls.SCALE + fractional_part
        if raw > _U64_MAX:
            raise OverflowError("Decimal overflow")
        return cls(sign, raw)

    @classmethod
    def coerce(cls, value: Union[Decimal, int, float, str]) -> Decimal:
        """Turn a Decimal, int, float or str into a Decimal."""
        if isinstance(value, Decimal):
            return value
        if isinstance(value, bool):
            raise TypeError("bool cannot be converted to Decimal")
        if isinstance(value, int):
            return cls.from_int(value)
        if isinstance(value, float):
            return cls.from_float(value)
        if isinstance(value, str):
            return cls.parse(value)
        raise TypeError(f"cannot convert {type(value).__name__} to Decimal")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Decimal):
            return NotImplemented
        if self.sign != other.sign:
            return self.sign < other.sign
        return self.raw < other.raw

    def _magnitude_diff(self, other: Decimal) -> Decimal:
        if self.raw > other.raw:
            return Decimal(self.sign, self.raw - other.raw)
        if self.raw < other.raw:
            return Decimal(-self.sign, other.raw - self.raw)
        return Decimal.ZERO

    def _magnitude_sum(self, other: Decimal) -> Decimal:
        raw = self.raw + other.raw
        if raw > _U64_MAX:
            raise OverflowError("Decimal addition overflow")
        return Decimal(self.sign, raw)

    def __add__(self, other: object) -> Decimal:
        if not isinstance(other, Decimal):
            return NotImplemented
        if self.sign == other.sign:
            return self._magnitude_sum(other)
        return self._magnitude_diff(other)

    def __sub__(self, other: object) -> Decimal:
        if not isinstance(other, Decimal):
            return NotImplemented
        if self.sign != other.sign:
            return self._magnitude_sum(other)
        return self._magnitude_diff(other)

    def __mul__(self, other: object) -> Decimal:
        if not isinstance(other, Decimal):
            return NotImplemented
        if self.raw == 0 or other.raw == 0:
            return Decimal.ZERO
        raw = self.raw * other.raw // self.SCALE
        if raw > self.MAX:
            raise OverflowError("Decimal multiplication overflow")
        return Decimal(self.sign * other.sign, raw)

    def __truediv__(self, other: object) -> Decimal:
        if not isinstance(other, Decimal):
            return NotImplemented
        if other.raw == 0:
            raise ZeroDivisionError("Division by zero in Decimal division")
        if self.raw == 0:
            return Decimal.ZERO
        raw = (self.raw * self.SCALE // other.raw) & _U64_MAX
        return Decimal(self.sign * other.sign, raw)

    def __str__(self) -> str:
        sign = "-" if self.sign < 0 else ""
        digits = str(self.raw).rjust(self.DECIMAL + 1, "0")
        return f"{sign}{digits[:-self.DECIMAL]}.{digits[-self.DECIMAL:]}"

    def __repr__(self) -> str:
        return f"Decimal({self})"


Decimal.ZERO = Decimal(1, 0)