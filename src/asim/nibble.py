"""
4-bit Nibble Arithmetic
=======================

A Nibble models the accumulator and register width of the asim machine.

The value is backed by a raw byte. Only the low four bits are the number;
bits 3 and 4 of an arithmetic result double as the negative and carry flags
until the next operation truncates them away again:

    bit:   7  6  5  4  3  2  1  0
                    C  N  [value ]

- value    = raw & 0b1111
- zero     = value == 0
- negative = bit 3 (sign bit of the 4-bit two's-complement reading)
- carry    = bit 4 (fifth bit of an addition, "no borrow" after subtraction)

Addition truncates both operands to four bits and stores the untruncated
sum. Subtraction adds the two's-complement of the right operand, so the
carry after a - b is set exactly when a >= b.

Example:
    >>> result = Nibble(7) + Nibble(1)
    >>> result.value, result.negative, result.carry
    (8, True, False)
    >>> result.as_signed()
    -8
"""

from typing import Union

VALUE_MASK = 0b0000_1111
NEGATIVE_BIT = 0b0000_1000
CARRY_BIT = 0b0001_0000
RAW_MASK = 0xFF


class Nibble:
    """
    A 4-bit integer with derived carry, negative and zero flags.

    Nibbles are immutable; arithmetic returns a new Nibble. Integers are
    accepted wherever a right-hand Nibble is expected.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: int = 0):
        self._raw = raw & RAW_MASK

    @property
    def raw(self) -> int:
        """The backing byte, including any flag bits."""
        return self._raw

    @property
    def value(self) -> int:
        """The canonical 4-bit value (0-15)."""
        return self._raw & VALUE_MASK

    @property
    def carry(self) -> bool:
        return (self._raw & CARRY_BIT) != 0

    @property
    def negative(self) -> bool:
        return (self._raw & NEGATIVE_BIT) != 0

    @property
    def zero(self) -> bool:
        return self.value == 0

    def as_unsigned(self) -> int:
        return self.value

    def as_signed(self) -> int:
        """Read the value as a 4-bit two's-complement number (-8 to 7)."""
        if self.negative:
            return -self.complement()
        return self.value

    def complement(self) -> int:
        """Two's-complement of the 4-bit value, in the range 1-16."""
        return ((~self.value) & VALUE_MASK) + 1

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def __add__(self, other: Union["Nibble", int]) -> "Nibble":
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return Nibble(self.value + other.value)

    def __sub__(self, other: Union["Nibble", int]) -> "Nibble":
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return Nibble(self.value + other.complement())

    # =========================================================================
    # Comparison and Conversion
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Nibble):
            return self.value == other.value
        if isinstance(other, int):
            return self.value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"Nibble(0b{self._raw:08b})"

    def __str__(self) -> str:
        return str(self.value)


def _coerce(other: object) -> "Nibble | None":
    if isinstance(other, Nibble):
        return other
    if isinstance(other, int):
        return Nibble(other)
    return None
