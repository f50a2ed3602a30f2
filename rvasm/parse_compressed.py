"""Parser for the compressed (RVC) instruction forms.

Register fields follow one convention: a register that is both destination and
source (``rd/rs1`` in the CI, CR and CA formats) is kept in ``rd``. A jump
target or branch offset is kept in ``imm``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .imm import Imm, Uimm, Xlen
from .instruction import Extension, Instruction
from .operands import (
    AssemblyError,
    imm_signed_bits,
    parse_int,
    parse_mem_operand,
    parse_register,
)

_SP = 2


def _is_wide(xlen: Xlen) -> bool:
    return xlen in (Xlen.X64, Xlen.X128)


def _expect(operands: Sequence[str], count: int, usage: str) -> None:
    if len(operands) != count:
        raise AssemblyError(usage)


def _require_wide(xlen: Xlen, message: str) -> None:
    if not _is_wide(xlen):
        raise AssemblyError(message)


def _make(mnemonic: str, **fields: object) -> Instruction:
    return Instruction(Extension.RVC, mnemonic, **fields)


def _addi4spn(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, "用法: c.addi4spn rd, uimm")
    rd = parse_register(operands[0])
    value = parse_int(operands[1])
    if value <= 0:
        raise AssemblyError("c.addi4spn 的 uimm 必须为正且非零")
    value &= 0xFFFFFFFF
    if value & 0x3:
        raise AssemblyError("c.addi4spn 的 uimm 必须按 4 字节对齐")
    if value >= 1 << 10:
        raise AssemblyError("c.addi4spn 的 uimm 超出 10 位范围")
    return _make(mnemonic, rd=rd, uimm=Uimm(value, 10))


def _jump(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 1, f"用法: {mnemonic} imm")
    if mnemonic == "c.jal" and xlen is not Xlen.X32:
        raise AssemblyError("c.jal 仅在 RV32 可用")
    bits = imm_signed_bits(parse_int(operands[0]), 12)
    return _make(mnemonic, imm=Imm(bits, 12))


def _branch(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, f"用法: {mnemonic} rs1, off")
    rs1 = parse_register(operands[0])
    bits = imm_signed_bits(parse_int(operands[1]), 9)
    return _make(mnemonic, rs1=rs1, imm=Imm(bits, 9))


def _signed_ci(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, f"用法: {mnemonic} rd, imm")
    if mnemonic == "c.addiw":
        _require_wide(xlen, "c.addiw 仅在 RV64/128 可用")
    rd = parse_register(operands[0])
    bits = imm_signed_bits(parse_int(operands[1]), 6)
    return _make(mnemonic, rd=rd, imm=Imm(bits, 6))


def _addi16sp(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 1, "用法: c.addi16sp imm")
    bits = imm_signed_bits(parse_int(operands[0]), 10)
    return _make(mnemonic, rd=_SP, imm=Imm(bits, 10))


def _shift(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, f"用法: {mnemonic} rd, shamt")
    rd = parse_register(operands[0])
    shamt = parse_int(operands[1]) & 0xFFFFFFFF
    return _make(mnemonic, rd=rd, imm=Imm(shamt, 6))


def _arith(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, "用法: c.{sub|xor|or|and} rd, rs2")
    rd = parse_register(operands[0])
    rs2 = parse_register(operands[1])
    return _make(mnemonic, rd=rd, rs2=rs2)


def _arith_word(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, "用法: c.{subw|addw} rd, rs2")
    _require_wide(xlen, "该宽度变体仅在 RV64/128 可用")
    rd = parse_register(operands[0])
    rs2 = parse_register(operands[1])
    return _make(mnemonic, rd=rd, rs2=rs2)


def _move(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, f"用法: {mnemonic} rd, rs2")
    rd = parse_register(operands[0])
    rs2 = parse_register(operands[1])
    return _make(mnemonic, rd=rd, rs2=rs2)


def _register_jump(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 1, f"用法: {mnemonic} rs1")
    rs1 = parse_register(operands[0])
    return _make(mnemonic, rd=rs1, rs2=0)


def _nop(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    return _make(mnemonic, rd=0, imm=Imm(0, 6))


_MEMORY_WIDTH = {"c.lw": 7, "c.sw": 7, "c.ld": 8, "c.sd": 8}
_LOADS = frozenset({"c.lw", "c.ld"})


def _memory(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    is_load = mnemonic in _LOADS
    usage = f"用法: {mnemonic} rd, imm(rs1)" if is_load else f"用法: {mnemonic} rs2, imm(rs1)"
    _expect(operands, 2, usage)
    if mnemonic in ("c.ld", "c.sd"):
        _require_wide(xlen, f"{mnemonic} 仅在 RV64/128 可用")
    register = parse_register(operands[0])
    bits, rs1 = parse_mem_operand(operands[1])
    imm = Imm(bits, _MEMORY_WIDTH[mnemonic])
    if is_load:
        return _make(mnemonic, rd=register, rs1=rs1, imm=imm)
    return _make(mnemonic, rs1=rs1, rs2=register, imm=imm)


_STACK_WIDTH = {"c.lwsp": 8, "c.swsp": 8, "c.ldsp": 9, "c.sdsp": 9}
_STACK_LOADS = frozenset({"c.lwsp", "c.ldsp"})


def _stack(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    is_load = mnemonic in _STACK_LOADS
    usage = f"用法: {mnemonic} rd, imm(sp)" if is_load else f"用法: {mnemonic} rs2, imm(sp)"
    _expect(operands, 2, usage)
    if mnemonic in ("c.ldsp", "c.sdsp"):
        _require_wide(xlen, f"{mnemonic} 仅在 RV64/128 可用")
    register = parse_register(operands[0])
    bits, base = parse_mem_operand(operands[1])
    # c.sdsp accepts any written base; the encoding always uses sp.
    if mnemonic != "c.sdsp" and base != _SP:
        raise AssemblyError(f"{mnemonic} 基址必须是 sp")
    imm = Imm(bits, _STACK_WIDTH[mnemonic])
    if is_load:
        return _make(mnemonic, rd=register, imm=imm)
    return _make(mnemonic, rs2=register, imm=imm)


_Handler = Callable[[str, Sequence[str], Xlen], Instruction]

_HANDLERS: dict[str, _Handler] = {
    "c.addi4spn": _addi4spn,
    "c.j": _jump,
    "c.jal": _jump,
    "c.beqz": _branch,
    "c.bnez": _branch,
    "c.addi": _signed_ci,
    "c.addiw": _signed_ci,
    "c.andi": _signed_ci,
    "c.li": _signed_ci,
    "c.addi16sp": _addi16sp,
    "c.slli": _shift,
    "c.srli": _shift,
    "c.srai": _shift,
    "c.sub": _arith,
    "c.xor": _arith,
    "c.or": _arith,
    "c.and": _arith,
    "c.subw": _arith_word,
    "c.addw": _arith_word,
    "c.mv": _move,
    "c.add": _move,
    "c.jr": _register_jump,
    "c.jalr": _register_jump,
    "c.nop": _nop,
    "c.lw": _memory,
    "c.sw": _memory,
    "c.ld": _memory,
    "c.sd": _memory,
    "c.lwsp": _stack,
    "c.swsp": _stack,
    "c.ldsp": _stack,
    "c.sdsp": _stack,
}


def parse_rvc(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction | None:
    """Parse a compressed instruction; None if the mnemonic is not one."""
    handler = _HANDLERS.get(mnemonic)
    if handler is None:
        return None
    return handler(mnemonic, operands, xlen)