"""Encoding of parsed compressed (RVC) instructions into 16-bit machine words."""

from __future__ import annotations

from collections.abc import Callable

from .imm import Xlen
from .instruction import Extension, Instruction
from .isa import OPCODE_C0, OPCODE_C1, OPCODE_C2
from .operands import AssemblyError

_SP = 2


def _pack(*fields: tuple[int, int, int]) -> int:
    """Apply (position, width, value) fields in order; later fields overwrite earlier bits."""
    word = 0
    for pos, width, value in fields:
        field_mask = (1 << width) - 1
        word = (word & ~(field_mask << pos)) | ((value & field_mask) << pos)
    return word & 0xFFFF


def _ensure_align(imm: int, align: int) -> None:
    if imm & (align - 1):
        raise AssemblyError(f"立即数未按 {align} 字节对齐")


def _c_reg_index(reg: int) -> int:
    if 8 <= reg <= 15:
        return reg - 8
    raise AssemblyError(f"寄存器 {reg} 不是压缩寄存器 (x8..x15)")


def _is_wide(xlen: Xlen) -> bool:
    return xlen in (Xlen.X64, Xlen.X128)


def _reg(value: int | None) -> int:
    return value or 0


def _imm(inst: Instruction) -> int:
    return inst.imm.low_u32() if inst.imm is not None else 0


def _encode_cj(imm: int, funct3: int) -> int:
    if imm & 0x1:
        raise AssemblyError("CJ 立即数必须是 2 字节对齐 (LSB=0)")
    imm &= 0x0FFF
    return _pack(
        (13, 3, funct3),
        (12, 1, imm >> 11),
        (11, 1, imm >> 4),
        (10, 1, imm >> 9),
        (9, 1, imm >> 8),
        (8, 1, imm >> 10),
        (7, 1, imm >> 6),
        (6, 1, imm >> 7),
        (5, 1, imm >> 3),
        (4, 1, imm >> 2),
        (3, 1, imm >> 1),
        (2, 1, imm >> 5),
        (0, 2, OPCODE_C1),
    )


def _encode_cb(rs1: int, offset: int, funct3: int) -> int:
    if offset & 0x1:
        raise AssemblyError("CB 立即数必须是 2 字节对齐 (LSB=0)")
    rs1_c = _c_reg_index(rs1)
    imm = offset & 0x01FF
    return _pack(
        (13, 3, funct3),
        (12, 1, imm >> 8),
        (10, 2, imm >> 3),
        (7, 3, rs1_c),
        (5, 2, imm >> 6),
        (3, 2, imm >> 1),
        (2, 1, imm >> 5),
        (0, 2, OPCODE_C1),
    )


def _encode_addi16sp(imm: int) -> int:
    if imm == 0:
        raise AssemblyError("c.addi16sp 的立即数不能为 0")
    return _pack(
        (13, 3, 0b011),
        (7, 5, _SP),
        (12, 1, imm >> 9),
        (6, 1, imm >> 4),
        (5, 1, imm >> 6),
        (3, 2, imm >> 7),
        (2, 1, imm >> 5),
        (0, 2, OPCODE_C1),
    )


def _encode_ci(rd: int, imm: int, funct3: int, opcode: int) -> int:
    imm &= 0x3F
    return _pack(
        (13, 3, funct3),
        (12, 1, imm >> 5),
        (7, 5, rd),
        (2, 5, imm),
        (0, 2, opcode),
    )


def _encode_addiw(rd: int, imm: int) -> int:
    if rd == 0:
        raise AssemblyError("c.addiw 目的寄存器不能为 x0")
    return _encode_ci(rd, imm, 0b001, OPCODE_C1)


def _encode_slli(rd: int, shamt: int) -> int:
    if rd == 0:
        raise AssemblyError("c.slli 目的寄存器不能为 x0")
    return _encode_ci(rd, shamt, 0b000, OPCODE_C2)


_SHIFT_LIKE_SELECT = {"c.srli": 0b00, "c.srai": 0b01, "c.andi": 0b10}


def _encode_shift_like(name: str, rd: int, shamt: int, xlen: Xlen) -> int:
    rd_c = _c_reg_index(rd)
    sh = shamt & 0x3F
    is_shift = name in ("c.srli", "c.srai")
    if is_shift and sh == 0:
        raise AssemblyError("c.srli/srai 的 shamt 不能为 0")
    if is_shift and xlen is Xlen.X32 and (sh >> 5) & 0x1:
        raise AssemblyError("c.srli/srai 在 RV32 中 shamt 最高位必须为 0")
    return _pack(
        (13, 3, 0b100),
        (10, 2, _SHIFT_LIKE_SELECT[name]),
        (12, 1, sh >> 5),
        (2, 5, sh),
        (7, 3, rd_c),
        (0, 2, OPCODE_C1),
    )


def _encode_ca(rd: int, rs2: int, funct2: int, wide: bool, xlen: Xlen) -> int:
    rd_c = _c_reg_index(rd)
    rs2_c = _c_reg_index(rs2)
    if wide and not _is_wide(xlen):
        raise AssemblyError("该宽度变体仅在 RV64/128 可用")
    return _pack(
        (13, 3, 0b100),
        (10, 2, 0b11),
        (12, 1, 1 if wide else 0),
        (5, 2, funct2),
        (7, 3, rd_c),
        (2, 3, rs2_c),
        (0, 2, OPCODE_C1),
    )


def _encode_cr(rd: int, rs2: int, link: bool) -> int:
    if rd == 0:
        raise AssemblyError("CR 组要求 rdrs1 != x0")
    return _pack(
        (13, 3, 0b100),
        (12, 1, 1 if link else 0),
        (7, 5, rd),
        (2, 5, rs2),
        (0, 2, OPCODE_C2),
    )


def _encode_addi4spn(rd: int, uimm: int) -> int:
    if uimm == 0:
        raise AssemblyError("c.addi4spn 的 uimm 不能为 0")
    if uimm >= 1 << 10:
        raise AssemblyError("c.addi4spn 的 uimm 超出 10 位范围")
    rd_c = _c_reg_index(rd)
    return _pack(
        (13, 3, 0b000),
        (11, 2, uimm >> 4),
        (7, 4, uimm >> 6),
        (5, 1, uimm >> 3),
        (6, 1, uimm >> 2),
        (2, 3, rd_c),
        (0, 2, OPCODE_C0),
    )


def _encode_word_memory(name: str, funct3: int, data_reg: int, rs1: int, imm: int) -> int:
    if imm >= 128:
        raise AssemblyError(f"{name} 偏移过大 (需 < 128)")
    _ensure_align(imm, 4)
    data_c = _c_reg_index(data_reg)
    rs1_c = _c_reg_index(rs1)
    # imm[5:3] overlaps bit 13 of funct3; the later field wins.
    return _pack(
        (13, 3, funct3),
        (11, 3, imm >> 3),
        (7, 3, rs1_c),
        (5, 1, imm >> 6),
        (6, 1, imm >> 2),
        (2, 3, data_c),
        (0, 2, OPCODE_C0),
    )


def _encode_double_memory(name: str, funct3: int, data_reg: int, rs1: int, imm: int) -> int:
    if imm >= 256:
        raise AssemblyError(f"{name} 偏移过大 (需 < 256)")
    _ensure_align(imm, 8)
    data_c = _c_reg_index(data_reg)
    rs1_c = _c_reg_index(rs1)
    return _pack(
        (13, 3, funct3),
        (10, 3, imm >> 3),
        (7, 3, rs1_c),
        (5, 2, imm >> 6),
        (2, 3, data_c),
        (0, 2, OPCODE_C0),
    )


def _encode_lwsp(rd: int, imm: int) -> int:
    if rd == 0:
        raise AssemblyError("c.lwsp 目的寄存器不能为 x0")
    if imm >= 256:
        raise AssemblyError("c.lwsp 偏移过大 (需 < 256)")
    _ensure_align(imm, 4)
    return _pack(
        (13, 3, 0b010),
        (12, 1, imm >> 5),
        (7, 5, rd),
        (4, 3, imm >> 2),
        (2, 2, imm >> 6),
        (0, 2, OPCODE_C2),
    )


def _encode_swsp(rs2: int, imm: int) -> int:
    if imm >= 256:
        raise AssemblyError("c.swsp 偏移过大 (需 < 256)")
    _ensure_align(imm, 4)
    return _pack(
        (13, 3, 0b110),
        (9, 4, imm >> 3),
        (7, 2, imm >> 6),
        (2, 5, rs2),
        (0, 2, OPCODE_C2),
    )


def _encode_ldsp(rd: int, imm: int) -> int:
    if rd == 0:
        raise AssemblyError("c.ldsp 目的寄存器不能为 x0")
    if imm >= 512:
        raise AssemblyError("c.ldsp 偏移过大")
    _ensure_align(imm, 8)
    return _pack(
        (13, 3, 0b011),
        (12, 1, imm >> 5),
        (7, 5, rd),
        (5, 2, imm >> 6),
        (3, 2, imm >> 3),
        (0, 2, OPCODE_C2),
    )


def _encode_sdsp(rs2: int, imm: int) -> int:
    if imm >= 512:
        raise AssemblyError("c.sdsp 偏移过大")
    _ensure_align(imm, 8)
    return _pack(
        (13, 3, 0b111),
        (10, 3, imm >> 3),
        (7, 3, imm >> 6),
        (2, 5, rs2),
        (0, 2, OPCODE_C2),
    )


def _uimm(inst: Instruction) -> int:
    return inst.uimm.low32() if inst.uimm is not None else 0


_Encoder = Callable[[Instruction, Xlen], int]

_ENCODERS: dict[str, _Encoder] = {
    "c.addi4spn": lambda i, x: _encode_addi4spn(_reg(i.rd), _uimm(i)),
    "c.nop": lambda i, x: _encode_ci(_reg(i.rd), _imm(i), 0b000, OPCODE_C1),
    "c.addi": lambda i, x: _encode_ci(_reg(i.rd), _imm(i), 0b000, OPCODE_C1),
    "c.li": lambda i, x: _encode_ci(_reg(i.rd), _imm(i), 0b010, OPCODE_C1),
    "c.addi16sp": lambda i, x: _encode_addi16sp(_imm(i)),
    "c.addiw": lambda i, x: _encode_addiw(_reg(i.rd), _imm(i)),
    "c.lw": lambda i, x: _encode_word_memory("c.lw", 0b010, _reg(i.rd), _reg(i.rs1), _imm(i)),
    "c.sw": lambda i, x: _encode_word_memory("c.sw", 0b110, _reg(i.rs2), _reg(i.rs1), _imm(i)),
    "c.lwsp": lambda i, x: _encode_lwsp(_reg(i.rd), _imm(i)),
    "c.swsp": lambda i, x: _encode_swsp(_reg(i.rs2), _imm(i)),
    "c.ld": lambda i, x: _encode_double_memory("c.ld", 0b011, _reg(i.rd), _reg(i.rs1), _imm(i)),
    "c.sd": lambda i, x: _encode_double_memory("c.sd", 0b111, _reg(i.rs2), _reg(i.rs1), _imm(i)),
    "c.ldsp": lambda i, x: _encode_ldsp(_reg(i.rd), _imm(i)),
    "c.sdsp": lambda i, x: _encode_sdsp(_reg(i.rs2), _imm(i)),
    "c.slli": lambda i, x: _encode_slli(_reg(i.rd), _imm(i)),
    "c.srli": lambda i, x: _encode_shift_like("c.srli", _reg(i.rd), _imm(i), x),
    "c.srai": lambda i, x: _encode_shift_like("c.srai", _reg(i.rd), _imm(i), x),
    "c.andi": lambda i, x: _encode_shift_like("c.andi", _reg(i.rd), _imm(i), x),
    "c.sub": lambda i, x: _encode_ca(_reg(i.rd), _reg(i.rs2), 0b00, False, x),
    "c.xor": lambda i, x: _encode_ca(_reg(i.rd), _reg(i.rs2), 0b01, False, x),
    "c.or": lambda i, x: _encode_ca(_reg(i.rd), _reg(i.rs2), 0b10, False, x),
    "c.and": lambda i, x: _encode_ca(_reg(i.rd), _reg(i.rs2), 0b11, False, x),
    "c.subw": lambda i, x: _encode_ca(_reg(i.rd), _reg(i.rs2), 0b00, True, x),
    "c.addw": lambda i, x: _encode_ca(_reg(i.rd), _reg(i.rs2), 0b01, True, x),
    "c.jr": lambda i, x: _encode_cr(_reg(i.rd), 0, False),
    "c.mv": lambda i, x: _encode_cr(_reg(i.rd), _reg(i.rs2), False),
    "c.jalr": lambda i, x: _encode_cr(_reg(i.rd), 0, True),
    "c.add": lambda i, x: _encode_cr(_reg(i.rd), _reg(i.rs2), True),
    "c.j": lambda i, x: _encode_cj(_imm(i), 0b101),
    "c.jal": lambda i, x: _encode_cj(_imm(i), 0b001),
    "c.beqz": lambda i, x: _encode_cb(_reg(i.rs1), _imm(i), 0b110),
    "c.bnez": lambda i, x: _encode_cb(_reg(i.rs1), _imm(i), 0b111),
}

_WIDE_ONLY = frozenset({"c.ld", "c.sd", "c.ldsp", "c.sdsp"})
_RV32_ONLY = frozenset({"c.jal"})


def _supported(name: str, xlen: Xlen) -> bool:
    if name not in _ENCODERS:
        return False
    if name in _WIDE_ONLY and not _is_wide(xlen):
        return False
    if name in _RV32_ONLY and xlen is not Xlen.X32:
        return False
    return True


def encode_u16(inst: Instruction, xlen: Xlen) -> int:
    """Encode a compressed instruction as a 16-bit word."""
    if not inst.is_compressed():
        raise AssemblyError("非压缩指令，不能使用 16 位编码")
    if not _supported(inst.mnemonic, xlen):
        raise AssemblyError("该 RVC 指令的编码暂未实现")
    return _ENCODERS[inst.mnemonic](inst, xlen)