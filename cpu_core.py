# cpu_core.py
# Fetch / decode / dispatch / execute / advance for one RV32I instruction

from behaviors import BEHAVIORS
from disasm import format_operation
from errors import (
    AddressFaultError,
    DecodeError,
    IllegalInstructionError,
    MemoryAccessError,
    SimulationError,
    UnimplementedOpcodeError,
)
from formats import decode_opcode
from opcodes import Opcode, decode_fields, lookup_operation


class _DecodedInstruction:
    __slots__ = (
        "pc",
        "instr",
        "opcode",
        "fields",
        "operation",
    )

    def __init__(self, pc, instr, opcode, fields, operation):
        self.pc = pc
        self.instr = instr
        self.opcode = opcode
        self.fields = fields
        self.operation = operation


class CPUCore:
    def __init__(self, sim):
        self.sim = sim

    def fetch(self):
        pc = self.sim.regs.pc
        if pc & 0x3:
            raise AddressFaultError(pc, None, pc, f"Misaligned fetch at 0x{pc:08x}")
        try:
            return self.sim.imem.fetch(pc)
        except MemoryAccessError as exc:
            raise AddressFaultError(pc, None, exc.addr, str(exc)) from exc

    def decode(self, pc, instr):
        try:
            opcode = Opcode.from_bits(decode_opcode(instr).opcode)
            fields = decode_fields(opcode, instr)
        except DecodeError as exc:
            raise IllegalInstructionError(pc, instr, exc.kind, str(exc)) from exc
        return opcode, fields

    def dispatch(self, pc, instr, opcode, fields):
        try:
            operation = lookup_operation(opcode, fields)
        except DecodeError as exc:
            raise IllegalInstructionError(pc, instr, exc.kind, str(exc)) from exc
        if operation not in BEHAVIORS:
            raise IllegalInstructionError(
                pc, instr, UnimplementedOpcodeError.kind, f"no behavior for {operation.mnemonic}"
            )
        return _DecodedInstruction(pc, instr, opcode, fields, operation)

    def execute_decoded(self, decoded):
        behavior = BEHAVIORS[decoded.operation]
        try:
            return behavior(decoded.fields, self.sim.regs, self.sim.dmem)
        except MemoryAccessError as exc:
            raise AddressFaultError(decoded.pc, decoded.instr, exc.addr, str(exc)) from exc

    def _commit_step(self, decoded, next_pc):
        regs = self.sim.regs
        if regs[0] != 0:
            raise SimulationError("x0 was modified", decoded.pc, decoded.instr)
        regs.pc = next_pc
        self.sim.instr_count += 1

    def execute(self):
        pc = self.sim.regs.pc
        instr = self.fetch()
        self.sim.last_instr = instr
        opcode, fields = self.decode(pc, instr)
        decoded = self.dispatch(pc, instr, opcode, fields)

        trace_log = self.sim.trace_log
        if trace_log is not None:
            trace_log.append(f"{pc:08x}: {format_operation(decoded.operation, fields, pc)}")

        redirect = self.execute_decoded(decoded)
        next_pc = pc + 4 if redirect is None else redirect
        self._commit_step(decoded, next_pc)
        return decoded
