import pytest

from rvasm import isa
from rvasm.encode32 import encode_u32
from rvasm.imm import Imm, Xlen
from rvasm.instruction import Extension, Instruction
from rvasm.operands import AssemblyError
from rvasm.parser import parse_line


def _encode(line, xlen=Xlen.X32):
    return encode_u32(parse_line(line, xlen), xlen)


def _opcode(word):
    return word & 0x7F


def _rd(word):
    return (word >> 7) & 0x1F


def _funct3(word):
    return (word >> 12) & 0x7


def _rs1(word):
    return (word >> 15) & 0x1F


def _rs2(word):
    return (word >> 20) & 0x1F


def _funct7(word):
    return word >> 25


def test_addi_known_word():
    assert _encode("addi x1, x0, 1") == 0x00100093


def test_ecall_and_ebreak_known_words():
    assert _encode("ecall") == 0x00000073
    assert _encode("ebreak") == 0x00100073


def test_r_type_fields():
    word = _encode("sub x3, x4, x5")
    assert _opcode(word) == isa.OPCODE_OP
    assert (_rd(word), _rs1(word), _rs2(word)) == (3, 4, 5)
    assert _funct3(word) == isa.FUNCT3_OP_ADD_SUB
    assert _funct7(word) == isa.FUNCT7_OP_SUB


def test_i_type_negative_immediate():
    word = _encode("addi x1, x2, -1")
    assert word >> 20 == 0xFFF
    assert _rs1(word) == 2


def test_load_and_store_fields():
    load = _encode("lw x5, 8(x6)")
    assert _opcode(load) == isa.OPCODE_LOAD
    assert _funct3(load) == isa.FUNCT3_LOAD_LW
    assert load >> 20 == 8
    store = _encode("sw x7, 40(x6)")
    assert _opcode(store) == isa.OPCODE_STORE
    offset = (_funct7(store) << 5) | _rd(store)
    assert offset == 40
    assert (_rs1(store), _rs2(store)) == (6, 7)


def test_branch_offset_layout():
    word = _encode("bne x1, x2, 8")
    assert _opcode(word) == isa.OPCODE_BRANCH
    assert _funct3(word) == isa.FUNCT3_BRANCH_BNE
    offset = (((word >> 8) & 0xF) << 1) | (((word >> 25) & 0x3F) << 5) | (((word >> 7) & 1) << 11)
    assert offset == 8


def test_lui_keeps_upper_bits():
    word = _encode("lui x5, 0x12345")
    assert word & 0xFFFFF000 == 0x12345 << 12
    assert _rd(word) == 5
    assert _opcode(word) == isa.OPCODE_LUI


def test_jal_offset_bits():
    word = _encode("jal x1, 8")
    assert _opcode(word) == isa.OPCODE_JAL
    assert ((word >> 21) & 0x3FF) << 1 == 8


def test_rv32_srai_sets_funct7():
    word = _encode("srai x1, x2, 3")
    assert _funct7(word) == isa.FUNCT7_OP_SRA
    assert _rs2(word) == 3


def test_rv64_slli_six_bit_shamt():
    word = _encode("slli x1, x2, 33", Xlen.X64)
    assert (word >> 20) & 0x3F == 33
    assert _opcode(word) == isa.OPCODE_OP_IMM


def test_rv64_srai_six_bit_shamt_keeps_funct():
    word = _encode("srai x1, x2, 40", Xlen.X64)
    assert (word >> 20) & 0x3F == 40
    assert (word >> 25) & 0x7E == isa.FUNCT7_OP_SRA


def test_word_variants_use_op32():
    word = _encode("addw x1, x2, x3", Xlen.X64)
    assert _opcode(word) == isa.OPCODE_OP_32
    imm_word = _encode("addiw x1, x2, 7", Xlen.X64)
    assert _opcode(imm_word) == isa.OPCODE_OP_IMM32
    assert imm_word >> 20 == 7


def test_m_extension_funct7():
    word = encode_u32(Instruction(Extension.RV32I, "mul", rd=1, rs1=2, rs2=3), Xlen.X32)
    assert _funct7(word) == 1
    assert _funct3(word) == isa.FUNCT3_OP_ADD_SUB


def test_csr_register_form():
    word = _encode("csrrs x1, 0x300, x2")
    assert _opcode(word) == isa.OPCODE_SYSTEM
    assert word >> 20 == 0x300
    assert _funct3(word) == isa.FUNCT3_SYSTEM_CSRRS
    assert _rs1(word) == 2


def test_csr_immediate_form_puts_uimm_in_rs1():
    word = _encode("csrrwi x1, 0x305, 17")
    assert _rs1(word) == 17
    assert _funct3(word) == isa.FUNCT3_SYSTEM_CSRRWI


def test_fence_i_uses_misc_mem():
    word = _encode("fence.i")
    assert _opcode(word) == isa.OPCODE_MISC_MEM
    assert _funct3(word) == isa.FUNCT3_MISC_MEM_FENCE_I


def test_compressed_instruction_rejected():
    with pytest.raises(AssemblyError, match="RVC"):
        encode_u32(parse_line("c.nop", Xlen.X32), Xlen.X32)


@pytest.mark.parametrize(
    "extension, message",
    [(Extension.RVF, "RVF"), (Extension.RV32A, "A-extension"), (Extension.RV128A, "A-extension")],
)
def test_unsupported_extensions(extension, message):
    with pytest.raises(AssemblyError, match=message):
        encode_u32(Instruction(extension, "x", imm=Imm(0, 12)), Xlen.X32)


def test_unknown_mnemonic_rejected():
    with pytest.raises(AssemblyError, match="unsupported"):
        encode_u32(Instruction(Extension.RV32I, "bogus"), Xlen.X32)