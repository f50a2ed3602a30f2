"""Parsers for the base integer, system and Zicsr instructions."""

from __future__ import annotations

from collections.abc import Sequence

from .imm import Imm, Uimm, Xlen
from .instruction import Extension, Instruction
from .operands import (
    AssemblyError,
    imm_signed_bits,
    parse_int,
    parse_mem_operand,
    parse_register,
)

_UPPER = frozenset({"lui", "auipc"})
_BRANCHES = frozenset({"beq", "bne", "blt", "bge", "bltu", "bgeu"})
_LOADS = frozenset({"lb", "lh", "lw", "lbu", "lhu", "lwu", "ld"})
_STORES = frozenset({"sb", "sh", "sw", "sd"})
_WIDE_ONLY_MEMORY = frozenset({"lwu", "ld", "sd"})
_OP_IMM = frozenset({"addi", "slti", "sltiu", "xori", "ori", "andi"})
_SHIFT_IMM = frozenset({"slli", "srli", "srai"})
_OP = frozenset({"add", "sub", "sll", "slt", "sltu", "xor", "srl", "sra", "or", "and"})
_W_IMM = frozenset({"addiw", "slliw", "srliw", "sraiw"})
_W_REG = frozenset({"addw", "subw", "sllw", "srlw", "sraw"})

_SYSTEM = {
    "ecall": "ecall",
    "ebreak": "ebreak",
    "fence": "fence",
    "fence.i": "fence.i",
    "fencei": "fence.i",
}

_CSR_REG = frozenset({"csrrw", "csrrs", "csrrc"})
_CSR_IMM = frozenset({"csrrwi", "csrrsi", "csrrci"})


def _is_wide(xlen: Xlen) -> bool:
    return xlen in (Xlen.X64, Xlen.X128)


def _expect(operands: Sequence[str], count: int, usage: str) -> None:
    if len(operands) != count:
        raise AssemblyError(usage)


def _parse_upper(mnemonic: str, operands: Sequence[str]) -> Instruction:
    _expect(operands, 2, f"用法: {mnemonic} rd, imm20")
    rd = parse_register(operands[0])
    value = parse_int(operands[1])
    bits = ((value & 0xFFFFFFFF) << 12) & 0xFFFFFFFF
    return Instruction(Extension.RV32I, mnemonic, rd=rd, imm=Imm(bits, 32))


def _parse_jal(operands: Sequence[str]) -> Instruction:
    _expect(operands, 2, "用法: jal rd, imm")
    rd = parse_register(operands[0])
    bits = imm_signed_bits(parse_int(operands[1]), 21)
    # Only 12 bits are kept, matching the decoder's view of J-type immediates.
    return Instruction(Extension.RV32I, "jal", rd=rd, imm=Imm(bits, 12))


def _parse_jalr(operands: Sequence[str]) -> Instruction:
    if len(operands) == 2:
        rd = parse_register(operands[0])
        bits, rs1 = parse_mem_operand(operands[1])
    elif len(operands) == 3:
        rd = parse_register(operands[0])
        rs1 = parse_register(operands[1])
        bits = imm_signed_bits(parse_int(operands[2]), 12)
    else:
        raise AssemblyError("用法: jalr rd, imm(rs1) 或 jalr rd, rs1, imm")
    return Instruction(Extension.RV32I, "jalr", rd=rd, rs1=rs1, imm=Imm(bits, 12))


def _parse_branch(mnemonic: str, operands: Sequence[str]) -> Instruction:
    _expect(operands, 3, "用法: beq rs1, rs2, imm")
    rs1 = parse_register(operands[0])
    rs2 = parse_register(operands[1])
    offset = parse_int(operands[2])
    if offset & 1:
        raise AssemblyError("分支偏移必须是2字节对齐")
    bits = imm_signed_bits(offset, 13)
    return Instruction(Extension.RV32I, mnemonic, rs1=rs1, rs2=rs2, imm=Imm(bits, 12))


def _memory_extension(mnemonic: str, xlen: Xlen) -> Extension:
    if mnemonic not in _WIDE_ONLY_MEMORY:
        return Extension.RV32I
    if not _is_wide(xlen):
        raise AssemblyError(f"{mnemonic} 仅在 RV64/128 可用")
    return Extension.RV64I


def _parse_load(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, "用法: lw rd, imm(rs1)")
    rd = parse_register(operands[0])
    bits, rs1 = parse_mem_operand(operands[1])
    extension = _memory_extension(mnemonic, xlen)
    return Instruction(extension, mnemonic, rd=rd, rs1=rs1, imm=Imm(bits, 12))


def _parse_store(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 2, "用法: sw rs2, imm(rs1)")
    rs2 = parse_register(operands[0])
    bits, rs1 = parse_mem_operand(operands[1])
    extension = _memory_extension(mnemonic, xlen)
    return Instruction(extension, mnemonic, rs1=rs1, rs2=rs2, imm=Imm(bits, 12))


def _parse_reg_imm(
    mnemonic: str, operands: Sequence[str], extension: Extension, usage: str
) -> Instruction:
    _expect(operands, 3, usage)
    rd = parse_register(operands[0])
    rs1 = parse_register(operands[1])
    bits = imm_signed_bits(parse_int(operands[2]), 12)
    return Instruction(extension, mnemonic, rd=rd, rs1=rs1, imm=Imm(bits, 12))


def _parse_shift_imm(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction:
    _expect(operands, 3, "用法: slli rd, rs1, shamt")
    rd = parse_register(operands[0])
    rs1 = parse_register(operands[1])
    shamt = parse_int(operands[2]) & 0xFFFFFFFF
    bits = 6 if _is_wide(xlen) else 5
    if shamt >= 1 << bits:
        raise AssemblyError(f"shamt {shamt} 超出范围 ({bits} 位)")
    extension = Extension.RV64I if _is_wide(xlen) else Extension.RV32I
    return Instruction(extension, mnemonic, rd=rd, rs1=rs1, imm=Imm(shamt, bits))


def _parse_reg_reg(
    mnemonic: str, operands: Sequence[str], extension: Extension, usage: str
) -> Instruction:
    _expect(operands, 3, usage)
    rd = parse_register(operands[0])
    rs1 = parse_register(operands[1])
    rs2 = parse_register(operands[2])
    return Instruction(extension, mnemonic, rd=rd, rs1=rs1, rs2=rs2)


def parse_rv_i(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction | None:
    """Parse an RV32I/RV64I instruction; None if the mnemonic is not one of them."""
    if mnemonic in _UPPER:
        return _parse_upper(mnemonic, operands)
    if mnemonic == "jal":
        return _parse_jal(operands)
    if mnemonic == "jalr":
        return _parse_jalr(operands)
    if mnemonic in _BRANCHES:
        return _parse_branch(mnemonic, operands)
    if mnemonic in _LOADS:
        return _parse_load(mnemonic, operands, xlen)
    if mnemonic in _STORES:
        return _parse_store(mnemonic, operands, xlen)
    if mnemonic in _OP_IMM:
        return _parse_reg_imm(mnemonic, operands, Extension.RV32I, "用法: addi rd, rs1, imm")
    if mnemonic in _SHIFT_IMM:
        return _parse_shift_imm(mnemonic, operands, xlen)
    if mnemonic in _OP:
        return _parse_reg_reg(mnemonic, operands, Extension.RV32I, "用法: add rd, rs1, rs2")
    if mnemonic in _W_IMM or mnemonic in _W_REG:
        if not _is_wide(xlen):
            raise AssemblyError("该指令仅在 RV64/128 可用")
        if mnemonic in _W_IMM:
            return _parse_reg_imm(mnemonic, operands, Extension.RV64I, "用法: addiw rd, rs1, imm")
        return _parse_reg_reg(mnemonic, operands, Extension.RV64I, "用法: addw rd, rs1, rs2")
    return None


def parse_system(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction | None:
    """Parse ecall, ebreak, fence or fence.i; operands are ignored."""
    canonical = _SYSTEM.get(mnemonic)
    if canonical is None:
        return None
    return Instruction(Extension.RV32I, canonical)


def _parse_csr_number(text: str) -> int:
    value = parse_int(text)
    if not 0 <= value <= 0xFFF:
        raise AssemblyError("csr 编号应为 0..0xFFF")
    return value


def parse_zicsr(mnemonic: str, operands: Sequence[str], xlen: Xlen) -> Instruction | None:
    """Parse a CSR access instruction; None if the mnemonic is not one."""
    if mnemonic in _CSR_REG:
        _expect(operands, 3, "用法: csrr{w|s|c} rd, csr, rs1")
        rd = parse_register(operands[0])
        csr = _parse_csr_number(operands[1])
        rs1 = parse_register(operands[2])
        return Instruction(Extension.RVZICSR, mnemonic, rd=rd, rs1=rs1, csr=csr)
    if mnemonic in _CSR_IMM:
        _expect(operands, 3, "用法: csrr{x}i rd, csr, uimm")
        rd = parse_register(operands[0])
        csr = _parse_csr_number(operands[1])
        value = parse_int(operands[2])
        if not 0 <= value <= 31:
            raise AssemblyError("uimm 取值 0..31")
        return Instruction(Extension.RVZICSR, mnemonic, rd=rd, uimm=Uimm(value, 5), csr=csr)
    return None