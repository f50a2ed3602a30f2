"""Turn one line of assembly text into an Instruction."""

from __future__ import annotations

from .imm import Xlen
from .instruction import Instruction
from .operands import AssemblyError, split_operands, trim_comment
from .parse_base import parse_rv_i, parse_system, parse_zicsr
from .parse_compressed import parse_rvc

_PARSERS = (parse_rvc, parse_zicsr, parse_system, parse_rv_i)


def parse_line(line: str, xlen: Xlen) -> Instruction:
    """Parse one instruction, trying compressed, CSR, system and base forms in turn."""
    raw = trim_comment(line).strip()
    if not raw:
        raise AssemblyError("空行")
    mnemonic, *rest = raw.split()
    mnemonic = mnemonic.lower()
    operand_text = " ".join(rest)
    operands = split_operands(operand_text) if operand_text else []
    for parser in _PARSERS:
        instruction = parser(mnemonic, operands, xlen)
        if instruction is not None:
            return instruction
    raise AssemblyError(f"未支持的指令: {mnemonic}")