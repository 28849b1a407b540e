# opcodes.py
# Operation catalog: opcode/funct3/funct7 tag sets and the RV32I operation lookup

from enum import Enum, IntEnum

from errors import DecodeError, UnimplementedOpcodeError, UnknownFunctError, UnknownOpcodeError
from formats import decode_b, decode_i, decode_j, decode_opcode, decode_r, decode_s, decode_u


class _BitPattern(IntEnum):
    @classmethod
    def from_bits(cls, bits):
        try:
            return cls(bits)
        except ValueError:
            raise cls._unknown(bits) from None

    @classmethod
    def _unknown(cls, bits):
        owner = _FUNCT3_OWNERS.get(cls)
        if owner is not None:
            return UnknownFunctError(owner, bits)
        return DecodeError(f"Unknown {cls.__name__} bit pattern 0x{bits:x}")


# RISC-V base opcode map (instr[6:0], the low two bits are always 11 for 32-bit encodings)
class Opcode(_BitPattern):
    LOAD = 0b0000011
    LOAD_FP = 0b0000111
    MISC_MEM = 0b0001111
    OP_IMM = 0b0010011
    AUIPC = 0b0010111
    OP_IMM_32 = 0b0011011
    STORE = 0b0100011
    STORE_FP = 0b0100111
    AMO = 0b0101111
    OP = 0b0110011
    LUI = 0b0110111
    OP_32 = 0b0111011
    MADD = 0b1000011
    MSUB = 0b1000111
    NMSUB = 0b1001011
    NMADD = 0b1001111
    OP_FP = 0b1010011
    BRANCH = 0b1100011
    JALR = 0b1100111
    JAL = 0b1101111
    SYSTEM = 0b1110011

    @classmethod
    def _unknown(cls, bits):
        return UnknownOpcodeError(bits)


class Funct3OpImm(_BitPattern):
    ADDI = 0b000
    SLLI = 0b001
    SLTI = 0b010
    SLTIU = 0b011
    XORI = 0b100
    SRLI_SRAI = 0b101
    ORI = 0b110
    ANDI = 0b111


class Funct3Op(_BitPattern):
    ADD_SUB = 0b000
    SLL = 0b001
    SLT = 0b010
    SLTU = 0b011
    XOR = 0b100
    SRL_SRA = 0b101
    OR = 0b110
    AND = 0b111


class Funct3Load(_BitPattern):
    LB = 0b000
    LH = 0b001
    LW = 0b010
    LBU = 0b100
    LHU = 0b101


class Funct3Store(_BitPattern):
    SB = 0b000
    SH = 0b001
    SW = 0b010


class Funct3Branch(_BitPattern):
    BEQ = 0b000
    BNE = 0b001
    BLT = 0b100
    BGE = 0b101
    BLTU = 0b110
    BGEU = 0b111


class Funct3Jalr(_BitPattern):
    JALR = 0b000


class Funct3MiscMem(_BitPattern):
    FENCE = 0b000
    FENCE_I = 0b001


class Funct3System(_BitPattern):
    PRIV = 0b000
    CSRRW = 0b001
    CSRRS = 0b010
    CSRRC = 0b011
    CSRRWI = 0b101
    CSRRSI = 0b110
    CSRRCI = 0b111


# funct7 under OP, and imm[11:5] under the OP_IMM shifts
class Funct7(_BitPattern):
    NORMAL = 0b0000000
    ALT = 0b0100000


_FUNCT3_OWNERS = {
    Funct3OpImm: Opcode.OP_IMM,
    Funct3Op: Opcode.OP,
    Funct3Load: Opcode.LOAD,
    Funct3Store: Opcode.STORE,
    Funct3Branch: Opcode.BRANCH,
    Funct3Jalr: Opcode.JALR,
    Funct3MiscMem: Opcode.MISC_MEM,
    Funct3System: Opcode.SYSTEM,
}


class Operation(Enum):
    LUI = "lui"
    AUIPC = "auipc"
    JAL = "jal"
    JALR = "jalr"
    BEQ = "beq"
    BNE = "bne"
    BLT = "blt"
    BGE = "bge"
    BLTU = "bltu"
    BGEU = "bgeu"
    LB = "lb"
    LH = "lh"
    LW = "lw"
    LBU = "lbu"
    LHU = "lhu"
    SB = "sb"
    SH = "sh"
    SW = "sw"
    ADDI = "addi"
    SLTI = "slti"
    SLTIU = "sltiu"
    XORI = "xori"
    ORI = "ori"
    ANDI = "andi"
    SLLI = "slli"
    SRLI = "srli"
    SRAI = "srai"
    ADD = "add"
    SUB = "sub"
    SLL = "sll"
    SLT = "slt"
    SLTU = "sltu"
    XOR = "xor"
    SRL = "srl"
    SRA = "sra"
    OR = "or"
    AND = "and"
    FENCE = "fence"
    FENCE_I = "fence.i"
    ECALL = "ecall"
    EBREAK = "ebreak"

    @property
    def mnemonic(self):
        return self.value


FORMAT_DECODERS = {
    Opcode.LUI: decode_u,
    Opcode.AUIPC: decode_u,
    Opcode.JAL: decode_j,
    Opcode.JALR: decode_i,
    Opcode.BRANCH: decode_b,
    Opcode.LOAD: decode_i,
    Opcode.STORE: decode_s,
    Opcode.OP_IMM: decode_i,
    Opcode.OP: decode_r,
    Opcode.MISC_MEM: decode_i,
    Opcode.SYSTEM: decode_i,
}

_UNIT_OPERATIONS = {
    Opcode.LUI: Operation.LUI,
    Opcode.AUIPC: Operation.AUIPC,
    Opcode.JAL: Operation.JAL,
}

_JALR_OPERATIONS = {Funct3Jalr.JALR: Operation.JALR}

_BRANCH_OPERATIONS = {
    Funct3Branch.BEQ: Operation.BEQ,
    Funct3Branch.BNE: Operation.BNE,
    Funct3Branch.BLT: Operation.BLT,
    Funct3Branch.BGE: Operation.BGE,
    Funct3Branch.BLTU: Operation.BLTU,
    Funct3Branch.BGEU: Operation.BGEU,
}

_LOAD_OPERATIONS = {
    Funct3Load.LB: Operation.LB,
    Funct3Load.LH: Operation.LH,
    Funct3Load.LW: Operation.LW,
    Funct3Load.LBU: Operation.LBU,
    Funct3Load.LHU: Operation.LHU,
}

_STORE_OPERATIONS = {
    Funct3Store.SB: Operation.SB,
    Funct3Store.SH: Operation.SH,
    Funct3Store.SW: Operation.SW,
}

_OP_IMM_OPERATIONS = {
    Funct3OpImm.ADDI: Operation.ADDI,
    Funct3OpImm.SLTI: Operation.SLTI,
    Funct3OpImm.SLTIU: Operation.SLTIU,
    Funct3OpImm.XORI: Operation.XORI,
    Funct3OpImm.ORI: Operation.ORI,
    Funct3OpImm.ANDI: Operation.ANDI,
}

_OP_IMM_SHIFT_OPERATIONS = {
    (Funct3OpImm.SLLI, Funct7.NORMAL): Operation.SLLI,
    (Funct3OpImm.SRLI_SRAI, Funct7.NORMAL): Operation.SRLI,
    (Funct3OpImm.SRLI_SRAI, Funct7.ALT): Operation.SRAI,
}

_OP_OPERATIONS = {
    (Funct3Op.ADD_SUB, Funct7.NORMAL): Operation.ADD,
    (Funct3Op.ADD_SUB, Funct7.ALT): Operation.SUB,
    (Funct3Op.SLL, Funct7.NORMAL): Operation.SLL,
    (Funct3Op.SLT, Funct7.NORMAL): Operation.SLT,
    (Funct3Op.SLTU, Funct7.NORMAL): Operation.SLTU,
    (Funct3Op.XOR, Funct7.NORMAL): Operation.XOR,
    (Funct3Op.SRL_SRA, Funct7.NORMAL): Operation.SRL,
    (Funct3Op.SRL_SRA, Funct7.ALT): Operation.SRA,
    (Funct3Op.OR, Funct7.NORMAL): Operation.OR,
    (Funct3Op.AND, Funct7.NORMAL): Operation.AND,
}

_MISC_MEM_OPERATIONS = {
    Funct3MiscMem.FENCE: Operation.FENCE,
    Funct3MiscMem.FENCE_I: Operation.FENCE_I,
}

_SYSTEM_OPERATIONS = {
    0x000: Operation.ECALL,
    0x001: Operation.EBREAK,
}


def decode_fields(opcode, instr):
    decoder = FORMAT_DECODERS.get(opcode)
    if decoder is None:
        raise UnimplementedOpcodeError(opcode)
    return decoder(instr)


def _with_funct7(opcode, funct3, bits, table):
    try:
        funct7 = Funct7.from_bits(bits)
    except DecodeError:
        raise UnknownFunctError(opcode, funct3, bits) from None
    operation = table.get((funct3, funct7))
    if operation is None:
        raise UnknownFunctError(opcode, funct3, bits)
    return operation


def lookup_operation(opcode, fields):
    """Resolve a decoded instruction to its RV32I operation tag.

    ``fields`` is the record produced by the format decoder registered for ``opcode``.
    Raises a DecodeError subclass when the funct bits match no operation.
    """
    if opcode in _UNIT_OPERATIONS:
        return _UNIT_OPERATIONS[opcode]
    if opcode == Opcode.JALR:
        return _JALR_OPERATIONS[Funct3Jalr.from_bits(fields.funct3)]
    if opcode == Opcode.BRANCH:
        return _BRANCH_OPERATIONS[Funct3Branch.from_bits(fields.funct3)]
    if opcode == Opcode.LOAD:
        return _LOAD_OPERATIONS[Funct3Load.from_bits(fields.funct3)]
    if opcode == Opcode.STORE:
        return _STORE_OPERATIONS[Funct3Store.from_bits(fields.funct3)]
    if opcode == Opcode.OP_IMM:
        funct3 = Funct3OpImm.from_bits(fields.funct3)
        if funct3 in _OP_IMM_OPERATIONS:
            return _OP_IMM_OPERATIONS[funct3]
        return _with_funct7(opcode, funct3, fields.imm_11_5, _OP_IMM_SHIFT_OPERATIONS)
    if opcode == Opcode.OP:
        funct3 = Funct3Op.from_bits(fields.funct3)
        return _with_funct7(opcode, funct3, fields.funct7, _OP_OPERATIONS)
    if opcode == Opcode.MISC_MEM:
        return _MISC_MEM_OPERATIONS[Funct3MiscMem.from_bits(fields.funct3)]
    if opcode == Opcode.SYSTEM:
        funct3 = Funct3System.from_bits(fields.funct3)
        if funct3 != Funct3System.PRIV:
            raise UnimplementedOpcodeError(opcode, f"CSR access {funct3.name}")
        operation = _SYSTEM_OPERATIONS.get(fields.imm_11_0)
        if operation is None:
            raise UnimplementedOpcodeError(opcode, f"privileged function 0x{fields.imm_11_0:03x}")
        if fields.rd or fields.rs1:
            raise UnknownFunctError(opcode, funct3)
        return operation
    raise UnimplementedOpcodeError(opcode)


def resolve(instr):
    """Decode a raw instruction word into (opcode, fields, operation)."""
    opcode = Opcode.from_bits(decode_opcode(instr).opcode)
    fields = decode_fields(opcode, instr)
    return opcode, fields, lookup_operation(opcode, fields)
