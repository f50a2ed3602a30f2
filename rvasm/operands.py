"""Lexical helpers for assembly operands: comments, registers, integers, memory forms."""

from __future__ import annotations

import re


class AssemblyError(ValueError):
    """Raised when a line of assembly cannot be parsed or encoded."""


_ABI_NAMES = (
    "zero", "ra", "sp", "gp", "tp", "t0", "t1", "t2",
    "s0", "s1", "a0", "a1", "a2", "a3", "a4", "a5",
    "a6", "a7", "s2", "s3", "s4", "s5", "s6", "s7",
    "s8", "s9", "s10", "s11", "t3", "t4", "t5", "t6",
)

_REGISTERS = {name: number for number, name in enumerate(_ABI_NAMES)}
_REGISTERS.update({f"x{number}": number for number in range(32)})
_REGISTERS["fp"] = 8

_HEX_DIGITS = re.compile(r"[+-]?[0-9a-fA-F]+")
_DEC_DIGITS = re.compile(r"[+-]?[0-9]+")
_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


def register_number(name: str) -> int | None:
    """Number of an integer register given as xN or by ABI name, or None."""
    return _REGISTERS.get(name.strip().lower())


def trim_comment(text: str) -> str:
    """Drop anything after a `//` or `#` comment marker."""
    return text.split("//", 1)[0].split("#", 1)[0]


def split_operands(text: str) -> list[str]:
    """Split a comma-separated operand list, dropping empty entries."""
    return [part for part in (piece.strip() for piece in text.split(",")) if part]


def parse_register(text: str) -> int:
    number = register_number(text)
    if number is None:
        raise AssemblyError(f"未知寄存器: {text}")
    return number


def _parse_i64(digits: str, pattern: re.Pattern[str], base: int) -> int:
    if not digits:
        raise AssemblyError("立即数解析失败: cannot parse integer from empty string")
    if not pattern.fullmatch(digits):
        raise AssemblyError("立即数解析失败: invalid digit found in string")
    value = int(digits, base)
    if value > _I64_MAX:
        raise AssemblyError("立即数解析失败: number too large to fit in target type")
    if value < _I64_MIN:
        raise AssemblyError("立即数解析失败: number too small to fit in target type")
    return value


def parse_int(text: str) -> int:
    """Parse a decimal or 0x-prefixed hexadecimal integer with optional sign."""
    stripped = text.strip()
    if not stripped:
        raise AssemblyError("缺少立即数")
    sign, body = 1, stripped
    if stripped[0] == "-":
        sign, body = -1, stripped[1:]
    elif stripped[0] == "+":
        body = stripped[1:]
    if body.startswith(("0x", "0X")):
        return sign * _parse_i64(body[2:], _HEX_DIGITS, 16)
    try:
        return sign * _parse_i64(body, _DEC_DIGITS, 10)
    except AssemblyError:
        if register_number(stripped) is not None:
            raise AssemblyError(
                f"期望立即数，但提供了寄存器: {stripped}。对于 addi 这类指令，第 3 个参数应为立即数。"
            ) from None
        raise


def imm_signed_bits(value: int, bits: int) -> int:
    """Two's-complement encoding of `value` in `bits` bits, range-checked."""
    low = -(1 << (bits - 1))
    high = (1 << (bits - 1)) - 1
    if not low <= value <= high:
        raise AssemblyError(f"立即数超出范围: {value} ({bits} 位)")
    return value if value >= 0 else (1 << bits) + value


def parse_mem_operand(text: str) -> tuple[int, int]:
    """Parse `imm(reg)` into the 12-bit encoded offset and the register number."""
    open_at = text.find("(")
    close_at = text.find(")")
    if open_at < 0 or close_at < 0:
        raise AssemblyError(f"内存操作数格式错误: {text}")
    offset = parse_int(text[:open_at].strip())
    register = parse_register(text[open_at + 1:close_at])
    return imm_signed_bits(offset, 12), register