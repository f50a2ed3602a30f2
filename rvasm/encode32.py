"""Encoding of parsed instructions into 32-bit machine words."""

from __future__ import annotations

from .imm import Xlen
from .instruction import Extension, Instruction
from .isa import (
    FUNCT3_BRANCH_BEQ,
    FUNCT3_BRANCH_BGE,
    FUNCT3_BRANCH_BGEU,
    FUNCT3_BRANCH_BLT,
    FUNCT3_BRANCH_BLTU,
    FUNCT3_BRANCH_BNE,
    FUNCT3_LOAD_LB,
    FUNCT3_LOAD_LBU,
    FUNCT3_LOAD_LD,
    FUNCT3_LOAD_LH,
    FUNCT3_LOAD_LHU,
    FUNCT3_LOAD_LW,
    FUNCT3_LOAD_LWU,
    FUNCT3_MISC_MEM_FENCE,
    FUNCT3_MISC_MEM_FENCE_I,
    FUNCT3_OP_ADD_SUB,
    FUNCT3_OP_AND,
    FUNCT3_OP_OR,
    FUNCT3_OP_SLL,
    FUNCT3_OP_SLT,
    FUNCT3_OP_SLTU,
    FUNCT3_OP_SRL_SRA,
    FUNCT3_OP_XOR,
    FUNCT3_STORE_SB,
    FUNCT3_STORE_SD,
    FUNCT3_STORE_SH,
    FUNCT3_STORE_SW,
    FUNCT3_SYSTEM_CSRRC,
    FUNCT3_SYSTEM_CSRRCI,
    FUNCT3_SYSTEM_CSRRS,
    FUNCT3_SYSTEM_CSRRSI,
    FUNCT3_SYSTEM_CSRRW,
    FUNCT3_SYSTEM_CSRRWI,
    FUNCT3_SYSTEM_PRIV,
    FUNCT7_OP_ADD,
    FUNCT7_OP_SRA,
    FUNCT7_OP_SRL,
    FUNCT7_OP_SUB,
    FUNCT12_SYSTEM_EBREAK,
    FUNCT12_SYSTEM_ECALL,
    OPCODE_AUIPC,
    OPCODE_BRANCH,
    OPCODE_JAL,
    OPCODE_JALR,
    OPCODE_LOAD,
    OPCODE_LUI,
    OPCODE_MISC_MEM,
    OPCODE_OP,
    OPCODE_OP_32,
    OPCODE_OP_IMM,
    OPCODE_OP_IMM32,
    OPCODE_STORE,
    OPCODE_SYSTEM,
)
from .operands import AssemblyError

_FUNCT7_M = 0b000_0001


def _r_type(opcode: int, rd: int, funct3: int, rs1: int, rs2: int, funct7: int) -> int:
    return (funct7 << 25) | (rs2 << 20) | (rs1 << 15) | (funct3 << 12) | (rd << 7) | opcode


def _i_type(opcode: int, rd: int, funct3: int, rs1: int, imm12: int) -> int:
    return ((imm12 & 0xFFF) << 20) | (rs1 << 15) | (funct3 << 12) | (rd << 7) | opcode


def _s_type(opcode: int, funct3: int, rs1: int, rs2: int, imm12: int) -> int:
    low = imm12 & 0x1F
    high = (imm12 >> 5) & 0x7F
    return (high << 25) | (rs2 << 20) | (rs1 << 15) | (funct3 << 12) | (low << 7) | opcode


def _b_type(opcode: int, funct3: int, rs1: int, rs2: int, imm: int) -> int:
    bit11 = (imm >> 11) & 0x1
    bits4_1 = (imm >> 1) & 0xF
    bits10_5 = (imm >> 5) & 0x3F
    bit12 = (imm >> 12) & 0x1
    return (
        (bit12 << 31)
        | (bits10_5 << 25)
        | (rs2 << 20)
        | (rs1 << 15)
        | (funct3 << 12)
        | (bits4_1 << 8)
        | (bit11 << 7)
        | opcode
    )


def _u_type(opcode: int, rd: int, imm_hi20: int) -> int:
    return (imm_hi20 & 0xFFFFF000) | (rd << 7) | opcode


def _j_type(opcode: int, rd: int, imm: int) -> int:
    # Only the bits the immediate actually carries are encoded.
    bit20 = (imm >> 20) & 0x1
    bits10_1 = (imm >> 1) & 0x3FF
    bit11 = (imm >> 11) & 0x1
    bits19_12 = (imm >> 12) & 0xFF
    return (bit20 << 31) | (bits19_12 << 12) | (bit11 << 20) | (bits10_1 << 21) | (rd << 7) | opcode


def _validate_shamt(shamt: int, max_bits: int) -> None:
    if shamt >= 1 << max_bits:
        raise AssemblyError(f"shamt {shamt} out of range for {max_bits}-bit")


def _reg(value: int | None) -> int:
    return value or 0


def _imm(inst: Instruction) -> int:
    return inst.imm.low_u32() if inst.imm is not None else 0


# mnemonic -> (opcode, funct3)
_I_FORMS = {
    Extension.RV32I: {
        "jalr": (OPCODE_JALR, 0),
        "lb": (OPCODE_LOAD, FUNCT3_LOAD_LB),
        "lh": (OPCODE_LOAD, FUNCT3_LOAD_LH),
        "lw": (OPCODE_LOAD, FUNCT3_LOAD_LW),
        "lbu": (OPCODE_LOAD, FUNCT3_LOAD_LBU),
        "lhu": (OPCODE_LOAD, FUNCT3_LOAD_LHU),
        "addi": (OPCODE_OP_IMM, FUNCT3_OP_ADD_SUB),
        "slti": (OPCODE_OP_IMM, FUNCT3_OP_SLT),
        "sltiu": (OPCODE_OP_IMM, FUNCT3_OP_SLTU),
        "xori": (OPCODE_OP_IMM, FUNCT3_OP_XOR),
        "ori": (OPCODE_OP_IMM, FUNCT3_OP_OR),
        "andi": (OPCODE_OP_IMM, FUNCT3_OP_AND),
    },
    Extension.RV64I: {
        "lwu": (OPCODE_LOAD, FUNCT3_LOAD_LWU),
        "ld": (OPCODE_LOAD, FUNCT3_LOAD_LD),
        "addiw": (OPCODE_OP_IMM32, FUNCT3_OP_ADD_SUB),
    },
}

# mnemonic -> (opcode, funct3)
_S_FORMS = {
    Extension.RV32I: {
        "sb": (OPCODE_STORE, FUNCT3_STORE_SB),
        "sh": (OPCODE_STORE, FUNCT3_STORE_SH),
        "sw": (OPCODE_STORE, FUNCT3_STORE_SW),
    },
    Extension.RV64I: {
        "sd": (OPCODE_STORE, FUNCT3_STORE_SD),
    },
}

_BRANCHES = {
    "beq": FUNCT3_BRANCH_BEQ,
    "bne": FUNCT3_BRANCH_BNE,
    "blt": FUNCT3_BRANCH_BLT,
    "bge": FUNCT3_BRANCH_BGE,
    "bltu": FUNCT3_BRANCH_BLTU,
    "bgeu": FUNCT3_BRANCH_BGEU,
}

# mnemonic -> (opcode, funct3, funct7)
_R_FORMS = {
    Extension.RV32I: {
        "add": (OPCODE_OP, FUNCT3_OP_ADD_SUB, FUNCT7_OP_ADD),
        "sub": (OPCODE_OP, FUNCT3_OP_ADD_SUB, FUNCT7_OP_SUB),
        "sll": (OPCODE_OP, FUNCT3_OP_SLL, 0),
        "slt": (OPCODE_OP, FUNCT3_OP_SLT, 0),
        "sltu": (OPCODE_OP, FUNCT3_OP_SLTU, 0),
        "xor": (OPCODE_OP, FUNCT3_OP_XOR, 0),
        "srl": (OPCODE_OP, FUNCT3_OP_SRL_SRA, 0),
        "sra": (OPCODE_OP, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRA),
        "or": (OPCODE_OP, FUNCT3_OP_OR, 0),
        "and": (OPCODE_OP, FUNCT3_OP_AND, 0),
        "mul": (OPCODE_OP, FUNCT3_OP_ADD_SUB, _FUNCT7_M),
        "mulh": (OPCODE_OP, FUNCT3_OP_SLL, _FUNCT7_M),
        "mulhsu": (OPCODE_OP, FUNCT3_OP_XOR, _FUNCT7_M),
        "mulhu": (OPCODE_OP, FUNCT3_OP_SLTU, _FUNCT7_M),
        "div": (OPCODE_OP, FUNCT3_OP_SRL_SRA, _FUNCT7_M),
        "divu": (OPCODE_OP, FUNCT3_OP_OR, _FUNCT7_M),
        "rem": (OPCODE_OP, FUNCT3_OP_AND, _FUNCT7_M),
        "remu": (OPCODE_OP, FUNCT3_OP_AND, _FUNCT7_M),
    },
    Extension.RV64I: {
        "sll": (OPCODE_OP, FUNCT3_OP_SLL, 0),
        "srl": (OPCODE_OP, FUNCT3_OP_SRL_SRA, 0),
        "sra": (OPCODE_OP, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRA),
        "addw": (OPCODE_OP_32, FUNCT3_OP_ADD_SUB, FUNCT7_OP_ADD),
        "subw": (OPCODE_OP_32, FUNCT3_OP_ADD_SUB, FUNCT7_OP_SUB),
        "sllw": (OPCODE_OP_32, FUNCT3_OP_SLL, 0),
        "srlw": (OPCODE_OP_32, FUNCT3_OP_SRL_SRA, 0),
        "sraw": (OPCODE_OP_32, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRA),
    },
}

# mnemonic -> (opcode, funct3, funct7, shamt bits)
_SHIFT_FORMS = {
    Extension.RV32I: {
        "slli": (OPCODE_OP_IMM, FUNCT3_OP_SLL, 0, 5),
        "srli": (OPCODE_OP_IMM, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRL, 5),
        "srai": (OPCODE_OP_IMM, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRA, 5),
    },
    Extension.RV64I: {
        "slli": (OPCODE_OP_IMM, FUNCT3_OP_SLL, 0, 6),
        "srli": (OPCODE_OP_IMM, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRL, 6),
        "srai": (OPCODE_OP_IMM, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRA, 6),
        "slliw": (OPCODE_OP_IMM32, FUNCT3_OP_SLL, 0, 5),
        "srliw": (OPCODE_OP_IMM32, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRL, 5),
        "sraiw": (OPCODE_OP_IMM32, FUNCT3_OP_SRL_SRA, FUNCT7_OP_SRA, 5),
    },
}

_FIXED = {
    "fence": _i_type(OPCODE_MISC_MEM, 0, FUNCT3_MISC_MEM_FENCE, 0, 0),
    "fence.i": _i_type(OPCODE_MISC_MEM, 0, FUNCT3_MISC_MEM_FENCE_I, 0, 0),
    "ecall": _i_type(OPCODE_SYSTEM, 0, FUNCT3_SYSTEM_PRIV, 0, FUNCT12_SYSTEM_ECALL),
    "ebreak": _i_type(OPCODE_SYSTEM, 0, FUNCT3_SYSTEM_PRIV, 0, FUNCT12_SYSTEM_EBREAK),
}

_CSR_REG = {
    "csrrw": FUNCT3_SYSTEM_CSRRW,
    "csrrs": FUNCT3_SYSTEM_CSRRS,
    "csrrc": FUNCT3_SYSTEM_CSRRC,
}
_CSR_IMM = {
    "csrrwi": FUNCT3_SYSTEM_CSRRWI,
    "csrrsi": FUNCT3_SYSTEM_CSRRSI,
    "csrrci": FUNCT3_SYSTEM_CSRRCI,
}


def _encode_integer(inst: Instruction) -> int:
    ext, name = inst.extension, inst.mnemonic
    rd, rs1, rs2 = _reg(inst.rd), _reg(inst.rs1), _reg(inst.rs2)

    if ext is Extension.RV32I:
        if name == "lui":
            return _u_type(OPCODE_LUI, rd, _imm(inst))
        if name == "auipc":
            return _u_type(OPCODE_AUIPC, rd, _imm(inst))
        if name == "jal":
            return _j_type(OPCODE_JAL, rd, _imm(inst))
        if name in _BRANCHES:
            return _b_type(OPCODE_BRANCH, _BRANCHES[name], rs1, rs2, _imm(inst))
        if name in _FIXED:
            return _FIXED[name]

    if name in _I_FORMS[ext]:
        opcode, funct3 = _I_FORMS[ext][name]
        return _i_type(opcode, rd, funct3, rs1, _imm(inst))
    if name in _S_FORMS[ext]:
        opcode, funct3 = _S_FORMS[ext][name]
        return _s_type(opcode, funct3, rs1, rs2, _imm(inst))
    if name in _R_FORMS[ext]:
        opcode, funct3, funct7 = _R_FORMS[ext][name]
        return _r_type(opcode, rd, funct3, rs1, rs2, funct7)
    if name in _SHIFT_FORMS[ext]:
        opcode, funct3, funct7, bits = _SHIFT_FORMS[ext][name]
        shamt = _imm(inst) & ((1 << bits) - 1)
        _validate_shamt(shamt, bits)
        # For 6-bit shamts, shamt[5] lands in the low bit of funct7.
        return _i_type(opcode, rd, funct3, rs1, shamt | (funct7 << 5))
    raise AssemblyError(f"unsupported {ext.value} instruction: {name}")


def _encode_zicsr(inst: Instruction) -> int:
    name = inst.mnemonic
    rd, csr = _reg(inst.rd), _reg(inst.csr)
    if name in _CSR_REG:
        return _i_type(OPCODE_SYSTEM, rd, _CSR_REG[name], _reg(inst.rs1), csr)
    if name in _CSR_IMM:
        # The rs1 field carries uimm[4:0].
        uimm = inst.uimm.low32() & 0xFF if inst.uimm is not None else 0
        return _i_type(OPCODE_SYSTEM, rd, _CSR_IMM[name], uimm, csr)
    raise AssemblyError(f"unsupported RVZicsr instruction: {name}")


def encode_u32(inst: Instruction, xlen: Xlen) -> int:
    """Encode a non-compressed instruction as a 32-bit word."""
    ext = inst.extension
    if ext in (Extension.RV32I, Extension.RV64I):
        return _encode_integer(inst)
    if ext is Extension.RVZICSR:
        return _encode_zicsr(inst)
    if ext is Extension.RVC:
        raise AssemblyError("RVC (compressed) encoding is not yet supported")
    if ext is Extension.RVF:
        raise AssemblyError("RVF encoding is not yet supported")
    raise AssemblyError("A-extension encoding is not yet supported")