# disasm.py
# Assembly text for decoded instructions, used by the trace log and the CLI

from bittools import to_signed
from errors import DecodeError
from formats import BType, IType, JType, RType, SType, UType
from opcodes import Operation, resolve
from register_file import ABI_NAMES

_LOADS = {Operation.LB, Operation.LH, Operation.LW, Operation.LBU, Operation.LHU}
_SHIFTS = {Operation.SLLI, Operation.SRLI, Operation.SRAI}
_NO_ARGS = {Operation.ECALL, Operation.EBREAK, Operation.FENCE, Operation.FENCE_I}


def format_operation(operation, fields, addr=0):
    name = operation.mnemonic
    if operation in _NO_ARGS:
        return name
    if isinstance(fields, RType):
        args = [ABI_NAMES[fields.rd], ABI_NAMES[fields.rs1], ABI_NAMES[fields.rs2]]
    elif isinstance(fields, SType):
        args = [ABI_NAMES[fields.rs2], f"{to_signed(fields.imm)}({ABI_NAMES[fields.rs1]})"]
    elif isinstance(fields, BType):
        target = (addr + fields.offset) & 0xffffffff
        args = [ABI_NAMES[fields.rs1], ABI_NAMES[fields.rs2], f"0x{target:x}"]
    elif isinstance(fields, JType):
        target = (addr + fields.offset) & 0xffffffff
        args = [ABI_NAMES[fields.rd], f"0x{target:x}"]
    elif isinstance(fields, UType):
        args = [ABI_NAMES[fields.rd], f"0x{fields.imm_31_12:x}"]
    elif operation in _LOADS or operation == Operation.JALR:
        args = [ABI_NAMES[fields.rd], f"{to_signed(fields.imm)}({ABI_NAMES[fields.rs1]})"]
    elif operation in _SHIFTS:
        args = [ABI_NAMES[fields.rd], ABI_NAMES[fields.rs1], str(fields.shamt)]
    elif isinstance(fields, IType):
        args = [ABI_NAMES[fields.rd], ABI_NAMES[fields.rs1], str(to_signed(fields.imm))]
    else:
        args = []
    return f"{name:7} {', '.join(args)}".rstrip()


def disassemble(instr, addr=0):
    try:
        _, fields, operation = resolve(instr)
    except DecodeError:
        return f".word   0x{instr & 0xffffffff:08x}"
    return format_operation(operation, fields, addr)
