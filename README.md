# rvasm

`rvasm` turns RISC-V assembly lines into machine-code words, one instruction
per line. It understands:

- the RV32I base set (`lui`, `auipc`, `jal`, `jalr`, branches, loads, stores,
  the register-immediate and register-register ALU instructions), plus the
  RV64I additions `ld`, `sd`, `lwu`, `addiw`, `slliw`, `srliw`, `sraiw`,
  `addw`, `subw`, `sllw`, `srlw`, `sraw` and 6-bit shift amounts for
  `slli`, `srli`, `srai`;
- the Zicsr instructions `csrrw`, `csrrs`, `csrrc` and their immediate forms
  `csrrwi`, `csrrsi`, `csrrci`;
- `ecall`, `ebreak`, `fence` and `fence.i` (also written `fencei`);
- compressed (RVC) instructions written with a `c.` prefix: `c.nop`, `c.li`,
  `c.addi`, `c.addiw`, `c.addi16sp`, `c.addi4spn`, `c.slli`, `c.srli`,
  `c.srai`, `c.andi`, `c.sub`, `c.xor`, `c.or`, `c.and`, `c.subw`, `c.addw`,
  `c.mv`, `c.add`, `c.jr`, `c.jalr`, `c.j`, `c.jal`, `c.beqz`, `c.bnez`,
  `c.lw`, `c.sw`, `c.lwsp`, `c.swsp`, `c.ld`, `c.sd`, `c.ldsp`, `c.sdsp`.

32-bit instructions come out as eight hex digits (`0x00150513`), compressed
ones as four (`0x4505`).

## Installing

```
pip install .
```

The package has no dependencies beyond the standard library.

## Using it from Python

```python
from rvasm.assembler import assemble_with_xlen, assemble_auto

print(assemble_with_xlen("addi a0, a0, 1", 32))   # 0x00150513
print(assemble_with_xlen("c.li a0, 1", 32))       # 0x4505

# Try RV32, then RV64, then RV128, and keep the first that works.
print(assemble_auto("ld a0, 8(sp)"))              # 0x00813503
```

Both functions take several lines at once and return one output line for
each non-blank input line, joined with newlines. A line that cannot be
assembled yields a line starting with `Error:` that says why; the other
lines are still assembled. Most error texts are in Chinese.

`assemble_with_xlen` takes the register width as 32, 64 or 128; any other
value gives a single `Error:` result. Some instructions depend on the width:
`ld`, `sd`, `lwu`, the `*w` forms, `c.ld`, `c.sd`, `c.ldsp`, `c.sdsp`,
`c.addiw`, `c.subw` and `c.addw` need 64 or 128, while `c.jal` needs 32.

Everything from `//` or `#` to the end of a line is ignored. Registers may be
written as `x0`..`x31` or by their ABI names (`zero`, `ra`, `sp`, `fp`,
`a0`, ...). Immediates may be decimal or hex (`0x...`) and may carry a sign.
Memory operands use the `offset(base)` form; `jalr` also accepts
`jalr rd, rs1, imm`.

Lower-level pieces are available too:

- `rvasm.assembler.assemble_line(line, xlen)` assembles one line and raises
  on failure instead of returning an `Error:` string;
- `rvasm.parser.parse_line(line, xlen)` turns one line into an
  `rvasm.instruction.Instruction`;
- `rvasm.encode32.encode_u32(inst, xlen)` and
  `rvasm.encode16.encode_u16(inst, xlen)` turn an `Instruction` into its
  32-bit or 16-bit encoding;
- `rvasm.imm.Xlen` names the register widths (`Xlen.X32`, `Xlen.X64`,
  `Xlen.X128`, or `Xlen.from_bits(64)`).

Parsing and encoding problems raise `rvasm.operands.AssemblyError`, a
subclass of `ValueError`.

## Command line

Installing the package provides an `rvasm` command. Give it instructions as
arguments, one per argument, or pipe them in on standard input:

```
rvasm "addi a0, a0, 1" "c.li a0, 1"
rvasm --xlen 64 "ld a0, 8(sp)"
printf 'lui t0, 0x12345\necall\n' | rvasm
```

`--xlen` is `32`, `64`, `128` or `auto` (the default, which tries each width
in turn). The command prints one result line per instruction and exits with
status 1 if any line produced an error, 0 otherwise.

## What it does not do

`rvasm` assembles single instructions only. It has no labels, symbols,
directives or pseudo-instructions (`li`, `mv`, `j`, `ret`, ...); branch and
jump targets are given as numeric offsets. It does not write object files,
and it has no disassembler. Floating-point, atomic and multiply/divide
instructions are not accepted by the parser.

## Running the tests

```
pip install ".[test]"
pytest
```