import re

import pytest

from rvasm.assembler import (
    assemble_auto,
    assemble_line,
    assemble_with_xlen,
    is_16_bit_instruction,
    main,
    parse_hex_word,
)
from rvasm.imm import Xlen
from rvasm.operands import AssemblyError

_WORD32 = re.compile(r"0x[0-9a-f]{8}")
_WORD16 = re.compile(r"0x[0-9a-f]{4}")


def test_addi_known_encoding():
    assert assemble_with_xlen("addi x1, x2, 3", 32) == "0x00310093"


def test_ecall_known_encoding():
    assert assemble_line("ecall", Xlen.X32) == "0x00000073"


def test_c_nop_known_encoding():
    assert assemble_auto("c.nop") == "0x0001"


def test_parse_hex_word_accepts_prefix_and_plain():
    assert parse_hex_word("0x00310093") == 0x00310093
    assert parse_hex_word("0X1f") == 0x1F
    assert parse_hex_word("ff") == 0xFF


@pytest.mark.parametrize("text", ["", "0x", "0xzz", "-1", "1 2", "100000000"])
def test_parse_hex_word_rejects(text):
    with pytest.raises(AssemblyError):
        parse_hex_word(text)


def test_is_16_bit_instruction():
    assert is_16_bit_instruction(0x0001) is True
    assert is_16_bit_instruction(0x0002) is True
    assert is_16_bit_instruction(0x00000013) is False


def test_compressed_output_roundtrips_as_16_bit():
    word = assemble_auto("c.addi x8, 1")
    assert _WORD16.fullmatch(word)
    assert is_16_bit_instruction(parse_hex_word(word))


def test_base_output_roundtrips_as_32_bit():
    word = assemble_with_xlen("add x3, x4, x5", 32)
    assert _WORD32.fullmatch(word)
    assert not is_16_bit_instruction(parse_hex_word(word))


def test_invalid_xlen_message():
    assert assemble_with_xlen("addi x1, x2, 3", 16) == (
        "Error: invalid xlen 16, must be 32, 64, or 128"
    )


def test_blank_lines_skipped_and_order_kept():
    out = assemble_with_xlen("addi x1, x2, 3\n\n   \n  ecall  ", 32)
    lines = out.split("\n")
    assert lines == [assemble_line("addi x1, x2, 3", Xlen.X32), assemble_line("ecall", Xlen.X32)]


def test_errors_reported_per_line():
    out = assemble_with_xlen("ld x1, 0(x2)\necall", 32)
    lines = out.split("\n")
    assert lines[0] == "Error: ld 仅在 RV64/128 可用"
    assert lines[1] == assemble_line("ecall", Xlen.X32)


def test_assemble_line_raises():
    with pytest.raises(AssemblyError):
        assemble_line("bogus x1", Xlen.X32)


def test_auto_falls_back_to_wider_xlen():
    assert assemble_auto("ld x1, 8(x2)") == assemble_with_xlen("ld x1, 8(x2)", 64)


def test_auto_prefers_rv32():
    assert assemble_auto("slli x1, x2, 3") == assemble_with_xlen("slli x1, x2, 3", 32)


def test_auto_unsupported_reports_last_error():
    assert assemble_auto("foo x1") == "Error: 未支持的指令: foo"


def test_auto_encode_failure_reports_width():
    out = assemble_auto("c.srli x1, 1")
    assert out == "Error: 编码失败(X128): 寄存器 1 不是压缩寄存器 (x8..x15)"


def test_auto_empty_input():
    assert assemble_auto("\n  \n") == ""


def test_main_with_arguments(capsys):
    code = main(["--xlen", "32", "addi x1, x2, 3"])
    assert code == 0
    assert capsys.readouterr().out.strip() == assemble_with_xlen("addi x1, x2, 3", 32)


def test_main_reports_failure(capsys):
    code = main(["nope"])
    assert code == 1
    assert capsys.readouterr().out.startswith("Error:")


def test_main_reads_stdin(monkeypatch, capsys):
    import io

    monkeypatch.setattr("sys.stdin", io.StringIO("ecall\nc.nop\n"))
    code = main([])
    assert code == 0
    assert capsys.readouterr().out.strip() == assemble_auto("ecall\nc.nop")