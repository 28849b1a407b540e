# formats.py
# Field extraction for the RV32I instruction formats (Opcode, R, I, S, B, U, J)

from dataclasses import dataclass

from bittools import sign_extend


def _bits(instr, lsb, width):
    return (instr >> lsb) & ((1 << width) - 1)


@dataclass(frozen=True)
class OpcodeFields:
    opcode: int


@dataclass(frozen=True)
class RType:
    rd: int
    funct3: int
    rs1: int
    rs2: int
    funct7: int


@dataclass(frozen=True)
class IType:
    rd: int
    funct3: int
    rs1: int
    imm_11_0: int
    # Split views of imm_11_0, used by the shift-immediate instructions
    imm_4_0: int
    imm_11_5: int

    @property
    def imm(self):
        return sign_extend(self.imm_11_0, 12)

    @property
    def shamt(self):
        return self.imm_4_0


@dataclass(frozen=True)
class SType:
    imm_4_0: int
    funct3: int
    rs1: int
    rs2: int
    imm_11_5: int

    @property
    def imm(self):
        return sign_extend((self.imm_11_5 << 5) | self.imm_4_0, 12)


@dataclass(frozen=True)
class BType:
    imm_11: int
    imm_4_1: int
    funct3: int
    rs1: int
    rs2: int
    imm_10_5: int
    imm_12: int

    @property
    def offset(self):
        """Branch offset in bytes, sign-extended to 32 bits (bit 0 is always zero)."""
        raw = (
            (self.imm_12 << 12)
            | (self.imm_11 << 11)
            | (self.imm_10_5 << 5)
            | (self.imm_4_1 << 1)
        )
        return sign_extend(raw, 13)


@dataclass(frozen=True)
class UType:
    rd: int
    imm_31_12: int

    @property
    def imm(self):
        return (self.imm_31_12 << 12) & 0xffffffff


@dataclass(frozen=True)
class JType:
    rd: int
    imm_19_12: int
    imm_11: int
    imm_10_1: int
    imm_20: int

    @property
    def offset(self):
        """Jump offset in bytes, sign-extended to 32 bits (bit 0 is always zero)."""
        raw = (
            (self.imm_20 << 20)
            | (self.imm_19_12 << 12)
            | (self.imm_11 << 11)
            | (self.imm_10_1 << 1)
        )
        return sign_extend(raw, 21)


def decode_opcode(instr):
    return OpcodeFields(opcode=_bits(instr, 0, 7))


def decode_r(instr):
    return RType(
        rd=_bits(instr, 7, 5),
        funct3=_bits(instr, 12, 3),
        rs1=_bits(instr, 15, 5),
        rs2=_bits(instr, 20, 5),
        funct7=_bits(instr, 25, 7),
    )


def decode_i(instr):
    return IType(
        rd=_bits(instr, 7, 5),
        funct3=_bits(instr, 12, 3),
        rs1=_bits(instr, 15, 5),
        imm_11_0=_bits(instr, 20, 12),
        imm_4_0=_bits(instr, 20, 5),
        imm_11_5=_bits(instr, 25, 7),
    )


def decode_s(instr):
    return SType(
        imm_4_0=_bits(instr, 7, 5),
        funct3=_bits(instr, 12, 3),
        rs1=_bits(instr, 15, 5),
        rs2=_bits(instr, 20, 5),
        imm_11_5=_bits(instr, 25, 7),
    )


def decode_b(instr):
    return BType(
        imm_11=_bits(instr, 7, 1),
        imm_4_1=_bits(instr, 8, 4),
        funct3=_bits(instr, 12, 3),
        rs1=_bits(instr, 15, 5),
        rs2=_bits(instr, 20, 5),
        imm_10_5=_bits(instr, 25, 6),
        imm_12=_bits(instr, 31, 1),
    )


def decode_u(instr):
    return UType(
        rd=_bits(instr, 7, 5),
        imm_31_12=_bits(instr, 12, 20),
    )


def decode_j(instr):
    return JType(
        rd=_bits(instr, 7, 5),
        imm_19_12=_bits(instr, 12, 8),
        imm_11=_bits(instr, 20, 1),
        imm_10_1=_bits(instr, 21, 10),
        imm_20=_bits(instr, 31, 1),
    )
