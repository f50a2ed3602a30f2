"""Line-oriented assembly front end and command-line entry point."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Iterator, Sequence

from .encode16 import encode_u16
from .encode32 import encode_u32
from .imm import Xlen
from .instruction import Instruction
from .operands import AssemblyError
from .parser import parse_line

_HEX_WORD = re.compile(r"\+?[0-9a-fA-F]+")
_AUTO_ORDER = (Xlen.X32, Xlen.X64, Xlen.X128)


def parse_hex_word(text: str) -> int:
    """Parse a hexadecimal 32-bit word, with or without a 0x prefix."""
    digits = text[2:] if text.startswith(("0x", "0X")) else text
    if not digits:
        raise AssemblyError("cannot parse integer from empty string")
    if not _HEX_WORD.fullmatch(digits):
        raise AssemblyError("invalid digit found in string")
    value = int(digits, 16)
    if value > 0xFFFFFFFF:
        raise AssemblyError("number too large to fit in target type")
    return value


def is_16_bit_instruction(value: int) -> bool:
    """A word whose two lowest bits are not both set is a compressed instruction."""
    return value & 0b11 != 0b11


def _encode(inst: Instruction, xlen: Xlen) -> str:
    if inst.is_compressed():
        return f"0x{encode_u16(inst, xlen):04x}"
    return f"0x{encode_u32(inst, xlen):08x}"


def assemble_line(line: str, xlen: Xlen) -> str:
    """Assemble one instruction into its hexadecimal machine word."""
    return _encode(parse_line(line, xlen), xlen)


def _instruction_lines(text: str) -> Iterator[str]:
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped:
            yield stripped


def assemble_with_xlen(text: str, xlen_bits: int) -> str:
    """Assemble every non-blank line for the given register width.

    Each line yields a hex word or an ``Error:`` message; results are joined by newlines.
    """
    try:
        xlen = Xlen.from_bits(xlen_bits)
    except ValueError as exc:
        return f"Error: {exc}"
    outputs = []
    for line in _instruction_lines(text):
        try:
            outputs.append(assemble_line(line, xlen))
        except AssemblyError as exc:
            outputs.append(f"Error: {exc}")
    return "\n".join(outputs)


def _assemble_any_width(line: str) -> str:
    last_error = ""
    for xlen in _AUTO_ORDER:
        try:
            inst = parse_line(line, xlen)
        except AssemblyError as exc:
            last_error = str(exc)
            continue
        try:
            return _encode(inst, xlen)
        except AssemblyError as exc:
            last_error = f"编码失败({xlen.name}): {exc}"
    if not last_error:
        return "Error: unsupported or invalid instruction"
    return f"Error: {last_error}"


def assemble_auto(text: str) -> str:
    """Assemble every non-blank line, trying RV32, then RV64, then RV128."""
    return "\n".join(_assemble_any_width(line) for line in _instruction_lines(text))


def main(argv: Sequence[str] | None = None) -> int:
    """Assemble instructions given as arguments, or read from standard input."""
    parser = argparse.ArgumentParser(prog="rvasm", description="Assemble RISC-V instructions.")
    parser.add_argument(
        "--xlen",
        choices=("32", "64", "128", "auto"),
        default="auto",
        help="register width to assemble for (default: try each)",
    )
    parser.add_argument("instructions", nargs="*", help="instructions, one per argument")
    args = parser.parse_args(argv)

    text = "\n".join(args.instructions) if args.instructions else sys.stdin.read()
    if args.xlen == "auto":
        result = assemble_auto(text)
    else:
        result = assemble_with_xlen(text, int(args.xlen))
    if result:
        print(result)
    failed = any(line.startswith("Error:") for line in result.split("\n"))
    return 1 if failed else 0