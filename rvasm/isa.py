"""RISC-V opcode and function-field constants shared by the encoders."""

# 32-bit instruction opcodes
OPCODE_LOAD = 0b000_0011
OPCODE_LOAD_FP = 0b000_0111
OPCODE_MISC_MEM = 0b000_1111
OPCODE_OP_IMM = 0b001_0011
OPCODE_AUIPC = 0b001_0111
OPCODE_OP_IMM32 = 0b001_1011
OPCODE_STORE = 0b010_0011
OPCODE_STORE_FP = 0b010_0111
OPCODE_OP = 0b011_0011
OPCODE_LUI = 0b011_0111
OPCODE_OP_32 = 0b011_1011
OPCODE_FMADD = 0b100_0011
OPCODE_FMSUB = 0b100_0111
OPCODE_FNMSUB = 0b100_1011
OPCODE_FNMADD = 0b100_1111
OPCODE_FP = 0b101_0011
OPCODE_BRANCH = 0b110_0011
OPCODE_JALR = 0b110_0111
OPCODE_JAL = 0b110_1111
OPCODE_SYSTEM = 0b111_0011
OPCODE_A = 0b010_1111

# LOAD
FUNCT3_LOAD_LB = 0b000
FUNCT3_LOAD_LH = 0b001
FUNCT3_LOAD_LW = 0b010
FUNCT3_LOAD_LD = 0b011
FUNCT3_LOAD_LBU = 0b100
FUNCT3_LOAD_LHU = 0b101
FUNCT3_LOAD_LWU = 0b110

# STORE
FUNCT3_STORE_SB = 0b000
FUNCT3_STORE_SH = 0b001
FUNCT3_STORE_SW = 0b010
FUNCT3_STORE_SD = 0b011

# BRANCH
FUNCT3_BRANCH_BEQ = 0b000
FUNCT3_BRANCH_BNE = 0b001
FUNCT3_BRANCH_BLT = 0b100
FUNCT3_BRANCH_BGE = 0b101
FUNCT3_BRANCH_BLTU = 0b110
FUNCT3_BRANCH_BGEU = 0b111

# OP / OP-IMM
FUNCT3_OP_ADD_SUB = 0b000
FUNCT3_OP_SLL = 0b001
FUNCT3_OP_SLT = 0b010
FUNCT3_OP_SLTU = 0b011
FUNCT3_OP_XOR = 0b100
FUNCT3_OP_SRL_SRA = 0b101
FUNCT3_OP_OR = 0b110
FUNCT3_OP_AND = 0b111

# funct7
FUNCT7_OP_SRL = 0b000_0000
FUNCT7_OP_SRA = 0b010_0000
FUNCT7_OP_ADD = 0b000_0000
FUNCT7_OP_SUB = 0b010_0000

# SYSTEM
FUNCT3_SYSTEM_PRIV = 0b000
FUNCT3_SYSTEM_CSRRW = 0b001
FUNCT3_SYSTEM_CSRRS = 0b010
FUNCT3_SYSTEM_CSRRC = 0b011
FUNCT3_SYSTEM_CSRRWI = 0b101
FUNCT3_SYSTEM_CSRRSI = 0b110
FUNCT3_SYSTEM_CSRRCI = 0b111

FUNCT12_SYSTEM_ECALL = 0b000
FUNCT12_SYSTEM_EBREAK = 0b001

# MISC-MEM
FUNCT3_MISC_MEM_FENCE = 0b000
FUNCT3_MISC_MEM_FENCE_I = 0b001

# width
FUNCT3_WIDTH_W = 0b010

# Floating point (RVF)
FUNCT2_FMT_S = 0b00

FUNCT_RS3_FP_ADD = 0b00000
FUNCT_RS3_FP_SUB = 0b00001
FUNCT_RS3_FP_MUL = 0b00010
FUNCT_RS3_FP_DIV = 0b00011
FUNCT_RS3_FP_SGNJ = 0b00100
FUNCT_RS3_FP_MIN_MAX = 0b00101
FUNCT_RS3_FP_SQRT = 0b01011
FUNCT_RS3_FP_CMP = 0b10100
FUNCT_RS3_FP_FCVTX = 0b11000
FUNCT_RS3_FP_XCVTF = 0b11010
FUNCT_RS3_FP_FMVX_CLASS = 0b11100
FUNCT_RS3_FP_XMVF = 0b11110

FUNCT3_FP_MIN = 0b000
FUNCT3_FP_MAX = 0b001

FUNCT3_FP_SGNJ = 0b000
FUNCT3_FP_SGNJN = 0b001
FUNCT3_FP_SGNJX = 0b010

FUNCT3_FP_EQ = 0b010
FUNCT3_FP_LT = 0b001
FUNCT3_FP_LE = 0b000

FUNCT_RS2_CVT_W = 0b00000
FUNCT_RS2_CVT_WU = 0b00001
FUNCT_RS2_CVT_L = 0b00010
FUNCT_RS2_CVT_LU = 0b00011

# Atomics (A extension)
FUNCT5_A_AMOADD = 0b00000
FUNCT5_A_AMOSWAP = 0b00001
FUNCT5_A_LR = 0b00010
FUNCT5_A_SC = 0b00011
FUNCT5_A_AMOXOR = 0b00100
FUNCT5_A_AMOOR = 0b01000
FUNCT5_A_AMOAND = 0b01100
FUNCT5_A_AMOMIN = 0b10000
FUNCT5_A_AMOMAX = 0b10100
FUNCT5_A_AMOMINU = 0b11000
FUNCT5_A_AMOMAXU = 0b11100

FUNCT3_A_WIDTH_Q = 0b100

# Compressed (RVC) quadrant opcodes
OPCODE_C0 = 0b00
OPCODE_C1 = 0b01
OPCODE_C2 = 0b10