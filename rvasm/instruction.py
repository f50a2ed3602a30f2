"""The parsed form of one assembly instruction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .imm import Imm, Uimm


class Extension(Enum):
    """Instruction-set extension an instruction belongs to."""

    RV32I = "RV32I"
    RV64I = "RV64I"
    RVZICSR = "RVZicsr"
    RVC = "RVC"
    RVF = "RVF"
    RV32A = "RV32A"
    RV64A = "RV64A"
    RV128A = "RV128A"


@dataclass(frozen=True)
class Instruction:
    """An instruction: its extension, mnemonic and operand fields.

    Compressed forms whose destination is also a source keep that register in `rd`.
    """

    extension: Extension
    mnemonic: str
    rd: int | None = None
    rs1: int | None = None
    rs2: int | None = None
    imm: Imm | None = None
    uimm: Uimm | None = None
    csr: int | None = None

    def is_compressed(self) -> bool:
        return self.extension is Extension.RVC