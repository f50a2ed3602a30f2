[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "rvasm"
version = "0.1.0"
description = "A small RISC-V assembler for RV32I/RV64I, Zicsr and compressed (RVC) instructions"
requires-python = ">=3.10"
dependencies = []
keywords = ["risc-v", "riscv", "assembler", "rvc", "instruction-encoding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rvasm = "rvasm.assembler:main"

[tool.setuptools.packages.find]
include = ["rvasm*"]

[tool.pytest.ini_options]
addopts = "-ra"
