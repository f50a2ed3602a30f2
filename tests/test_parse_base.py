import pytest

from rvasm.imm import Xlen
from rvasm.instruction import Extension
from rvasm.operands import AssemblyError, register_number
from rvasm.parse_base import parse_rv_i, parse_system, parse_zicsr


def test_addi_fields():
    inst = parse_rv_i("addi", ["a0", "sp", "-5"], Xlen.X32)
    assert inst.extension is Extension.RV32I
    assert inst.mnemonic == "addi"
    assert inst.rd == register_number("a0")
    assert inst.rs1 == register_number("sp")
    assert inst.imm.sext(Xlen.X32).value == -5


def test_unknown_mnemonics_return_none():
    assert parse_rv_i("mul", ["a0", "a1", "a2"], Xlen.X32) is None
    assert parse_system("addi", [], Xlen.X32) is None
    assert parse_zicsr("ecall", [], Xlen.X32) is None


def test_register_given_as_immediate():
    with pytest.raises(AssemblyError, match="期望立即数"):
        parse_rv_i("addi", ["a0", "a0", "a1"], Xlen.X32)


def test_addi_out_of_range():
    with pytest.raises(AssemblyError, match="12 位"):
        parse_rv_i("addi", ["a0", "a0", "2048"], Xlen.X32)


def test_lui_shifts_immediate():
    inst = parse_rv_i("lui", ["t0", "0x12345"], Xlen.X32)
    assert inst.imm.low_u32() >> 12 == 0x12345
    assert inst.imm.low_u32() & 0xFFF == 0
    assert inst.rd == register_number("t0")


def test_auipc_wrong_count():
    with pytest.raises(AssemblyError, match="auipc"):
        parse_rv_i("auipc", ["t0"], Xlen.X32)


def test_jal_keeps_small_offset():
    inst = parse_rv_i("jal", ["ra", "100"], Xlen.X32)
    assert inst.imm.low_u32() == 100
    assert inst.rd == register_number("ra")


def test_jal_out_of_range():
    with pytest.raises(AssemblyError, match="21 位"):
        parse_rv_i("jal", ["ra", str(1 << 20)], Xlen.X32)


def test_jalr_forms_agree():
    mem_form = parse_rv_i("jalr", ["ra", "8(sp)"], Xlen.X32)
    reg_form = parse_rv_i("jalr", ["ra", "sp", "8"], Xlen.X32)
    assert mem_form == reg_form
    assert mem_form.imm.low_u32() == 8


def test_jalr_wrong_count():
    with pytest.raises(AssemblyError, match="jalr"):
        parse_rv_i("jalr", ["ra"], Xlen.X32)


@pytest.mark.parametrize("mnemonic", ["beq", "bne", "blt", "bge", "bltu", "bgeu"])
def test_branches(mnemonic):
    inst = parse_rv_i(mnemonic, ["a0", "a1", "-8"], Xlen.X32)
    assert inst.mnemonic == mnemonic
    assert inst.rs1 == register_number("a0")
    assert inst.rs2 == register_number("a1")
    assert inst.imm.sext(Xlen.X32).value == -8


def test_branch_odd_offset():
    with pytest.raises(AssemblyError, match="2字节对齐"):
        parse_rv_i("beq", ["a0", "a1", "3"], Xlen.X32)


def test_branch_out_of_range():
    with pytest.raises(AssemblyError, match="13 位"):
        parse_rv_i("beq", ["a0", "a1", "4096"], Xlen.X32)


def test_branch_wrong_count():
    with pytest.raises(AssemblyError, match="用法"):
        parse_rv_i("bne", ["a0", "a1"], Xlen.X32)


def test_load_word():
    inst = parse_rv_i("lw", ["a0", "-4(s0)"], Xlen.X32)
    assert inst.extension is Extension.RV32I
    assert inst.rs1 == register_number("s0")
    assert inst.imm.sext(Xlen.X32).value == -4


@pytest.mark.parametrize("mnemonic", ["ld", "lwu"])
def test_wide_loads_need_rv64(mnemonic):
    with pytest.raises(AssemblyError, match=f"{mnemonic} 仅在"):
        parse_rv_i(mnemonic, ["a0", "0(sp)"], Xlen.X32)
    assert parse_rv_i(mnemonic, ["a0", "0(sp)"], Xlen.X64).extension is Extension.RV64I


def test_store_fields():
    inst = parse_rv_i("sw", ["a1", "12(sp)"], Xlen.X32)
    assert inst.rd is None
    assert inst.rs2 == register_number("a1")
    assert inst.rs1 == register_number("sp")
    assert inst.imm.low_u32() == 12


def test_sd_needs_rv64():
    with pytest.raises(AssemblyError, match="sd 仅在"):
        parse_rv_i("sd", ["a0", "0(sp)"], Xlen.X32)
    assert parse_rv_i("sd", ["a0", "0(sp)"], Xlen.X128).extension is Extension.RV64I


def test_bad_memory_operand():
    with pytest.raises(AssemblyError, match="内存操作数格式错误"):
        parse_rv_i("lw", ["a0", "8"], Xlen.X32)


def test_shift_rv32_limits():
    inst = parse_rv_i("slli", ["a0", "a0", "31"], Xlen.X32)
    assert inst.extension is Extension.RV32I
    assert inst.imm.low_u32() == 31
    with pytest.raises(AssemblyError, match="shamt 32 超出范围 \\(5 位\\)"):
        parse_rv_i("slli", ["a0", "a0", "32"], Xlen.X32)


def test_shift_rv64_limits():
    inst = parse_rv_i("srai", ["a0", "a0", "63"], Xlen.X64)
    assert inst.extension is Extension.RV64I
    assert inst.imm.low_u32() == 63
    with pytest.raises(AssemblyError, match="6 位"):
        parse_rv_i("srli", ["a0", "a0", "64"], Xlen.X64)


def test_negative_shift_rejected():
    with pytest.raises(AssemblyError, match="超出范围"):
        parse_rv_i("slli", ["a0", "a0", "-1"], Xlen.X32)


@pytest.mark.parametrize(
    "mnemonic", ["add", "sub", "sll", "slt", "sltu", "xor", "srl", "sra", "or", "and"]
)
def test_register_ops(mnemonic):
    inst = parse_rv_i(mnemonic, ["t0", "t1", "t2"], Xlen.X32)
    assert inst.extension is Extension.RV32I
    assert (inst.rd, inst.rs1, inst.rs2) == (
        register_number("t0"),
        register_number("t1"),
        register_number("t2"),
    )


def test_register_op_unknown_register():
    with pytest.raises(AssemblyError, match="未知寄存器"):
        parse_rv_i("add", ["t0", "t1", "q9"], Xlen.X32)


@pytest.mark.parametrize("mnemonic", ["addiw", "slliw", "addw", "sraw"])
def test_word_ops_need_rv64_before_operand_check(mnemonic):
    with pytest.raises(AssemblyError, match="仅在 RV64/128"):
        parse_rv_i(mnemonic, [], Xlen.X32)


def test_word_ops_on_rv64():
    imm_form = parse_rv_i("addiw", ["a0", "a1", "-1"], Xlen.X64)
    assert imm_form.extension is Extension.RV64I
    assert imm_form.imm.sext(Xlen.X64).value == -1
    reg_form = parse_rv_i("subw", ["a0", "a1", "a2"], Xlen.X64)
    assert reg_form.rs2 == register_number("a2")
    with pytest.raises(AssemblyError, match="addw"):
        parse_rv_i("addw", ["a0", "a1"], Xlen.X64)


@pytest.mark.parametrize(
    ("mnemonic", "canonical"),
    [("ecall", "ecall"), ("ebreak", "ebreak"), ("fence", "fence"),
     ("fence.i", "fence.i"), ("fencei", "fence.i")],
)
def test_system(mnemonic, canonical):
    inst = parse_system(mnemonic, ["ignored"], Xlen.X32)
    assert inst.mnemonic == canonical
    assert inst.extension is Extension.RV32I


@pytest.mark.parametrize("mnemonic", ["csrrw", "csrrs", "csrrc"])
def test_csr_register_forms(mnemonic):
    inst = parse_zicsr(mnemonic, ["a0", "0x300", "a1"], Xlen.X32)
    assert inst.extension is Extension.RVZICSR
    assert inst.csr == 0x300
    assert inst.rs1 == register_number("a1")


@pytest.mark.parametrize("csr", ["0x1000", "-1"])
def test_csr_number_range(csr):
    with pytest.raises(AssemblyError, match="0..0xFFF"):
        parse_zicsr("csrrw", ["a0", csr, "a1"], Xlen.X32)


@pytest.mark.parametrize("mnemonic", ["csrrwi", "csrrsi", "csrrci"])
def test_csr_immediate_forms(mnemonic):
    inst = parse_zicsr(mnemonic, ["a0", "0xFFF", "31"], Xlen.X32)
    assert inst.uimm == 31
    assert inst.csr == 0xFFF
    assert inst.rs1 is None


def test_csr_immediate_range():
    with pytest.raises(AssemblyError, match="uimm 取值"):
        parse_zicsr("csrrwi", ["a0", "1", "32"], Xlen.X32)


def test_csr_wrong_count():
    with pytest.raises(AssemblyError, match="用法"):
        parse_zicsr("csrrs", ["a0", "1"], Xlen.X32)