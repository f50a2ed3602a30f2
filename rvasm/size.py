"""Fixed-width machine integers with wrapping arithmetic."""

from __future__ import annotations

from dataclasses import dataclass

_WIDTHS = (32, 64)


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def _check_width(bits: int) -> None:
    if bits not in _WIDTHS:
        raise ValueError(f"unsupported width {bits}, must be 32 or 64")


@dataclass(frozen=True)
class Usize:
    """An unsigned machine word of 32 or 64 bits."""

    value: int
    bits: int = 32

    def __post_init__(self) -> None:
        _check_width(self.bits)
        if not 0 <= self.value <= _mask(self.bits):
            raise ValueError(f"{self.value} does not fit in an unsigned {self.bits}-bit word")

    def _wrap(self, value: int) -> Usize:
        return Usize(value & _mask(self.bits), self.bits)

    def _operand(self, other: object) -> int:
        if isinstance(other, (Usize, Isize)):
            if other.bits != self.bits:
                raise TypeError("Not the same type")
            return other.value & _mask(self.bits)
        raise TypeError(f"unsupported operand {other!r}")

    def low_u32(self) -> int:
        """The low 32 bits of the word."""
        return self.value & 0xFFFFFFFF

    def __add__(self, other: object) -> Usize:
        if isinstance(other, Usize):
            return self._wrap(self.value + self._operand(other))
        if isinstance(other, Isize):
            if other.bits != self.bits:
                raise TypeError("Not the same type")
            # A signed addend contributes its magnitude.
            return self._wrap(self.value + abs(other.value))
        if isinstance(other, int):
            if not 0 <= other <= 0xFFFFFFFF:
                raise ValueError(f"{other} is not an unsigned 32-bit value")
            return self._wrap(self.value + other)
        return NotImplemented

    def __sub__(self, other: object) -> Usize:
        if not isinstance(other, Usize):
            return NotImplemented
        return self._wrap(self.value - self._operand(other))

    def __and__(self, other: object) -> Usize:
        return self._wrap(self.value & self._operand(other))

    def __or__(self, other: object) -> Usize:
        return self._wrap(self.value | self._operand(other))

    def __xor__(self, other: object) -> Usize:
        return self._wrap(self.value ^ self._operand(other))

    def __invert__(self) -> Usize:
        return self._wrap(~self.value)

    def __lshift__(self, amount: int) -> Usize:
        if amount >= self.bits:
            return Usize(0, self.bits)
        return self._wrap(self.value << amount)

    def __rshift__(self, amount: int) -> Usize:
        if amount >= self.bits:
            return Usize(0, self.bits)
        return Usize(self.value >> amount, self.bits)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Usize):
            return NotImplemented
        if other.bits != self.bits:
            return False
        return self.value < other.value

    def __format__(self, spec: str) -> str:
        return format(self.value, spec)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Isize:
    """A signed machine word of 32 or 64 bits."""

    value: int
    bits: int = 32

    def __post_init__(self) -> None:
        _check_width(self.bits)
        limit = 1 << (self.bits - 1)
        if not -limit <= self.value < limit:
            raise ValueError(f"{self.value} does not fit in a signed {self.bits}-bit word")

    def cast_to_usize(self) -> Usize:
        """Reinterpret the two's-complement bits as unsigned."""
        return Usize(self.value & _mask(self.bits), self.bits)

    def __rshift__(self, amount: int) -> Isize:
        if amount >= self.bits:
            return Isize(-1, self.bits)
        return Isize(self.value >> amount, self.bits)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Isize):
            return NotImplemented
        if other.bits != self.bits:
            return False
        return self.value < other.value

    def __str__(self) -> str:
        return str(self.value)