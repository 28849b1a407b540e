# Instruction word builders shared by the test modules

OP = 0x33
OP_IMM = 0x13
LOAD = 0x03
STORE = 0x23
BRANCH = 0x63
LUI = 0x37
AUIPC = 0x17
JAL = 0x6f
JALR = 0x67


def _pack(opcode, *fields):
    # fields are (value, lsb, width) triples
    word = opcode & 0x7f
    for value, lsb, width in fields:
        word |= (value & ((1 << width) - 1)) << lsb
    return word


def encode_r_type(funct7, rs2, rs1, funct3, rd, opcode=OP):
    return _pack(opcode, (rd, 7, 5), (funct3, 12, 3), (rs1, 15, 5), (rs2, 20, 5), (funct7, 25, 7))


def encode_i_type(imm, rs1, funct3, rd, opcode=OP_IMM):
    return _pack(opcode, (rd, 7, 5), (funct3, 12, 3), (rs1, 15, 5), (imm, 20, 12))


def encode_s_type(imm, rs2, rs1, funct3, opcode=STORE):
    return _pack(
        opcode, (imm, 7, 5), (funct3, 12, 3), (rs1, 15, 5), (rs2, 20, 5), (imm >> 5, 25, 7)
    )


def encode_b_type(imm, rs2, rs1, funct3, opcode=BRANCH):
    return _pack(
        opcode,
        (imm >> 11, 7, 1),
        (imm >> 1, 8, 4),
        (funct3, 12, 3),
        (rs1, 15, 5),
        (rs2, 20, 5),
        (imm >> 5, 25, 6),
        (imm >> 12, 31, 1),
    )


def encode_u_type(imm, rd, opcode=LUI):
    return _pack(opcode, (rd, 7, 5), (imm >> 12, 12, 20))


def encode_j_type(imm, rd, opcode=JAL):
    return _pack(
        opcode, (rd, 7, 5), (imm >> 12, 12, 8), (imm >> 11, 20, 1), (imm >> 1, 21, 10), (imm >> 20, 31, 1)
    )


def run_single(sim, instr, pc=0):
    """Load one instruction at ``pc`` and execute it."""
    sim.imem.load([instr], pc)
    sim.pc = pc
    sim.execute()
