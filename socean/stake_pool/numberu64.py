"""
Numberu64
=========
Unsigned 64-bit integer matching the stake pool program's integer semantics:
out-of-range results raise instead of wrapping.

Numberu64 subclasses int, so it works anywhere an int does (comparisons,
formatting, struct packing). + - * // stay range-checked whichever side the
plain int operand is on; other int operators return plain ints.
"""

from __future__ import annotations

from socean.errors import Numberu64Error

U64_MAX = (1 << 64) - 1


class Numberu64(int):
    """Range-checked u64."""

    def __new__(cls, value: int = 0) -> "Numberu64":
        value = int(value)
        if value < 0 or value > U64_MAX:
            raise Numberu64Error(f"{value} does not fit in a u64")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Numberu64({int(self)})"

    # ------------------------------------------------------------------
    # Checked arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: int) -> "Numberu64":
        return Numberu64(int(self) + int(other))

    __radd__ = __add__

    def __sub__(self, other: int) -> "Numberu64":
        result = int(self) - int(other)
        if result < 0:
            raise Numberu64Error(f"u64 underflow: {int(self)} - {int(other)}")
        return Numberu64(result)

    def __rsub__(self, other: int) -> "Numberu64":
        return Numberu64(other) - self

    def __mul__(self, other: int) -> "Numberu64":
        return Numberu64(int(self) * int(other))

    __rmul__ = __mul__

    def __floordiv__(self, other: int) -> "Numberu64":
        if int(other) == 0:
            raise Numberu64Error("u64 division by zero")
        return Numberu64(int(self) // int(other))

    def __rfloordiv__(self, other: int) -> "Numberu64":
        return Numberu64(other) // self

    def div(self, other: int) -> "Numberu64":
        """Floor division."""
        return self // other

    def sat_sub(self, other: int) -> "Numberu64":
        """Subtraction clamped at zero."""
        return Numberu64(max(int(self) - int(other), 0))

    def ceil_div(self, denominator: int) -> "Numberu64":
        """Division rounded up: (a + b - 1) // b."""
        return ceil_div(self, denominator)

    # ------------------------------------------------------------------
    # 8-byte little-endian form
    # ------------------------------------------------------------------

    def to_bytes_le(self) -> bytes:
        return int(self).to_bytes(8, "little")

    @classmethod
    def from_bytes_le(cls, data: bytes) -> "Numberu64":
        if len(data) != 8:
            raise Numberu64Error(f"Invalid buffer length: {len(data)}")
        return cls(int.from_bytes(data, "little"))


def ceil_div(numerator: int, denominator: int) -> Numberu64:
    """
    Ceiling division of two non-negative integers.

    The numerator may be a u128-width intermediate product; only the quotient
    has to fit in a u64.
    """
    numerator, denominator = int(numerator), int(denominator)
    if denominator == 0:
        raise Numberu64Error("u64 division by zero")
    if numerator < 0 or denominator < 0:
        raise Numberu64Error("ceil_div operands must be non-negative")
    return Numberu64((numerator + denominator - 1) // denominator)
