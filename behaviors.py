# behaviors.py
# RV32I instruction semantics. Each behavior takes (fields, regs, mem), applies its register and
# memory writes, and returns the redirected next pc or None to fall through to pc + 4.

from bittools import sign_extend, to_signed, zero_extend
from errors import HaltException, MemoryAccessError
from opcodes import Operation

# R-type: OP


def add(f, regs, mem):
    regs[f.rd] = regs[f.rs1] + regs[f.rs2]


def sub(f, regs, mem):
    regs[f.rd] = regs[f.rs1] - regs[f.rs2]


def sll(f, regs, mem):
    regs[f.rd] = regs[f.rs1] << (regs[f.rs2] & 0x1f)


def slt(f, regs, mem):
    regs[f.rd] = 1 if to_signed(regs[f.rs1]) < to_signed(regs[f.rs2]) else 0


def sltu(f, regs, mem):
    regs[f.rd] = 1 if regs[f.rs1] < regs[f.rs2] else 0


def xor(f, regs, mem):
    regs[f.rd] = regs[f.rs1] ^ regs[f.rs2]


def srl(f, regs, mem):
    regs[f.rd] = regs[f.rs1] >> (regs[f.rs2] & 0x1f)


def sra(f, regs, mem):
    regs[f.rd] = to_signed(regs[f.rs1]) >> (regs[f.rs2] & 0x1f)


def or_(f, regs, mem):
    regs[f.rd] = regs[f.rs1] | regs[f.rs2]


def and_(f, regs, mem):
    regs[f.rd] = regs[f.rs1] & regs[f.rs2]


# I-type: OP_IMM


def addi(f, regs, mem):
    regs[f.rd] = regs[f.rs1] + f.imm


def slti(f, regs, mem):
    regs[f.rd] = 1 if to_signed(regs[f.rs1]) < to_signed(f.imm) else 0


def sltiu(f, regs, mem):
    # immediate is sign-extended to 32 bits first, then compared unsigned
    regs[f.rd] = 1 if regs[f.rs1] < f.imm else 0


def xori(f, regs, mem):
    regs[f.rd] = regs[f.rs1] ^ f.imm


def ori(f, regs, mem):
    regs[f.rd] = regs[f.rs1] | f.imm


def andi(f, regs, mem):
    regs[f.rd] = regs[f.rs1] & f.imm


def slli(f, regs, mem):
    regs[f.rd] = regs[f.rs1] << f.shamt


def srli(f, regs, mem):
    regs[f.rd] = regs[f.rs1] >> f.shamt


def srai(f, regs, mem):
    regs[f.rd] = to_signed(regs[f.rs1]) >> f.shamt


# U-type


def lui(f, regs, mem):
    regs[f.rd] = f.imm


def auipc(f, regs, mem):
    regs[f.rd] = regs.pc + f.imm


# Jumps


def _jump_target(target):
    # callers check the target before writing rd
    target &= 0xffffffff
    if target & 0x3:
        raise MemoryAccessError(target, 4, "jump", f"Misaligned jump target 0x{target:08x}")
    return target


def jal(f, regs, mem):
    target = _jump_target(regs.pc + f.offset)
    regs[f.rd] = regs.pc + 4
    return target


def jalr(f, regs, mem):
    # target uses rs1 before rd is written (rd may equal rs1)
    target = _jump_target((regs[f.rs1] + f.imm) & 0xfffffffe)
    regs[f.rd] = regs.pc + 4
    return target


# Branches


def _branch(f, regs, taken):
    if taken:
        return _jump_target(regs.pc + f.offset)
    return None


def beq(f, regs, mem):
    return _branch(f, regs, regs[f.rs1] == regs[f.rs2])


def bne(f, regs, mem):
    return _branch(f, regs, regs[f.rs1] != regs[f.rs2])


def blt(f, regs, mem):
    return _branch(f, regs, to_signed(regs[f.rs1]) < to_signed(regs[f.rs2]))


def bge(f, regs, mem):
    return _branch(f, regs, to_signed(regs[f.rs1]) >= to_signed(regs[f.rs2]))


def bltu(f, regs, mem):
    return _branch(f, regs, regs[f.rs1] < regs[f.rs2])


def bgeu(f, regs, mem):
    return _branch(f, regs, regs[f.rs1] >= regs[f.rs2])


# Loads and stores


def effective_address(f, regs):
    return (regs[f.rs1] + f.imm) & 0xffffffff


def lb(f, regs, mem):
    regs[f.rd] = sign_extend(mem.load_byte(effective_address(f, regs)), 8)


def lh(f, regs, mem):
    regs[f.rd] = sign_extend(mem.load_half(effective_address(f, regs)), 16)


def lw(f, regs, mem):
    regs[f.rd] = mem.load_word(effective_address(f, regs))


def lbu(f, regs, mem):
    regs[f.rd] = zero_extend(mem.load_byte(effective_address(f, regs)), 8)


def lhu(f, regs, mem):
    regs[f.rd] = zero_extend(mem.load_half(effective_address(f, regs)), 16)


def sb(f, regs, mem):
    mem.store_byte(effective_address(f, regs), regs[f.rs2] & 0xff)


def sh(f, regs, mem):
    mem.store_half(effective_address(f, regs), regs[f.rs2] & 0xffff)


def sw(f, regs, mem):
    mem.store_word(effective_address(f, regs), regs[f.rs2])


# MISC_MEM / SYSTEM


def fence(f, regs, mem):
    # no-op on a single in-order hart
    pass


def ecall(f, regs, mem):
    raise HaltException("ecall", regs[10])


def ebreak(f, regs, mem):
    raise HaltException("ebreak")


BEHAVIORS = {
    Operation.ADD: add,
    Operation.SUB: sub,
    Operation.SLL: sll,
    Operation.SLT: slt,
    Operation.SLTU: sltu,
    Operation.XOR: xor,
    Operation.SRL: srl,
    Operation.SRA: sra,
    Operation.OR: or_,
    Operation.AND: and_,
    Operation.ADDI: addi,
    Operation.SLTI: slti,
    Operation.SLTIU: sltiu,
    Operation.XORI: xori,
    Operation.ORI: ori,
    Operation.ANDI: andi,
    Operation.SLLI: slli,
    Operation.SRLI: srli,
    Operation.SRAI: srai,
    Operation.LUI: lui,
    Operation.AUIPC: auipc,
    Operation.JAL: jal,
    Operation.JALR: jalr,
    Operation.BEQ: beq,
    Operation.BNE: bne,
    Operation.BLT: blt,
    Operation.BGE: bge,
    Operation.BLTU: bltu,
    Operation.BGEU: bgeu,
    Operation.LB: lb,
    Operation.LH: lh,
    Operation.LW: lw,
    Operation.LBU: lbu,
    Operation.LHU: lhu,
    Operation.SB: sb,
    Operation.SH: sh,
    Operation.SW: sw,
    Operation.FENCE: fence,
    Operation.FENCE_I: fence,
    Operation.ECALL: ecall,
    Operation.EBREAK: ebreak,
}
