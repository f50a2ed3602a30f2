"""Assemble RISC-V instructions, including compressed ones, into machine code."""

__version__ = "0.1.0"