"""Immediate operands and register widths."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .size import Isize, Usize


def _mask(bits: int) -> int:
    return (1 << bits) - 1


class Xlen(Enum):
    """Base integer register width."""

    X32 = 32
    X64 = 64
    X128 = 128

    @classmethod
    def from_bits(cls, bits: int) -> Xlen:
        try:
            return cls(bits)
        except ValueError:
            raise ValueError(f"invalid xlen {bits}, must be 32, 64, or 128") from None


def _check_valid_bits(valid_bits: int) -> None:
    if not 1 <= valid_bits <= 32:
        raise ValueError(f"valid bit count must be within 1..32, got {valid_bits}")


@dataclass(frozen=True)
class Imm:
    """A signed immediate holding `valid_bits` meaningful low bits."""

    data: int
    valid_bits: int

    def __post_init__(self) -> None:
        _check_valid_bits(self.valid_bits)
        object.__setattr__(self, "data", self.data & 0xFFFFFFFF)

    def low_u32(self) -> int:
        return self.data & _mask(self.valid_bits)

    def low_i32(self) -> int:
        value = self.low_u32()
        return value - (1 << 32) if value & 0x8000_0000 else value

    def sext(self, xlen: Xlen) -> Isize:
        """Sign-extend to the register width."""
        if xlen is Xlen.X128:
            raise ValueError("128-bit sign extension is unsupported")
        width = xlen.value
        value = self.low_u32()
        if self.data & (1 << (self.valid_bits - 1)):
            value |= _mask(width) & ~_mask(self.valid_bits)
        if value >> (width - 1):
            value -= 1 << width
        return Isize(value, width)

    def __str__(self) -> str:
        return str(self.low_i32())


@dataclass(frozen=True, eq=False)
class Uimm:
    """An unsigned immediate holding `valid_bits` meaningful low bits."""

    data: int
    valid_bits: int

    def __post_init__(self) -> None:
        _check_valid_bits(self.valid_bits)
        object.__setattr__(self, "data", self.data & 0xFFFFFFFF)

    def low32(self) -> int:
        return self.data & _mask(self.valid_bits)

    def zext(self, xlen: Xlen) -> Usize:
        """Zero-extend to the register width."""
        if xlen is Xlen.X128:
            raise ValueError("128-bit zero extension is unsupported")
        return Usize(self.low32(), xlen.value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, bool):
            return NotImplemented
        if isinstance(other, int):
            return self.low32() == other
        if isinstance(other, Uimm):
            return (self.data, self.valid_bits) == (other.data, other.valid_bits)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.data, self.valid_bits))

    def __str__(self) -> str:
        return str(self.low32())