# errors.py
# Exception types raised by the catalog, the memories and the simulator loop


class DecodeError(ValueError):
    kind = "illegal"


class UnknownOpcodeError(DecodeError):
    kind = "unknown-opcode"

    def __init__(self, opcode):
        super().__init__(f"Unknown opcode 0b{opcode:07b}")
        self.opcode = opcode


class UnknownFunctError(DecodeError):
    kind = "unknown-funct"

    def __init__(self, opcode, funct3, funct7=None):
        detail = f"funct3=0b{funct3:03b}"
        if funct7 is not None:
            detail += f" funct7=0b{funct7:07b}"
        super().__init__(f"Unknown {opcode.name} encoding: {detail}")
        self.opcode = opcode
        self.funct3 = funct3
        self.funct7 = funct7


class UnimplementedOpcodeError(DecodeError):
    kind = "unimplemented"

    def __init__(self, opcode, detail=None):
        message = f"{opcode.name} is not implemented by RV32I"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.opcode = opcode


class MemoryAccessError(ValueError):
    def __init__(self, addr, size, op, message=None):
        if message is None:
            message = f"Memory {op} out of range at 0x{addr & 0xffffffff:08x} (size {size})"
        super().__init__(message)
        self.addr = addr
        self.size = size
        self.op = op


class SimulationError(Exception):
    def __init__(self, message, pc, instr=None):
        if instr is None:
            context = f"pc=0x{pc:08x}"
        else:
            context = f"pc=0x{pc:08x} instr=0x{instr:08x}"
        super().__init__(f"{message} [{context}]")
        self.pc = pc
        self.instr = instr


class IllegalInstructionError(SimulationError):
    def __init__(self, pc, instr, kind="illegal", reason=None):
        super().__init__(f"Illegal instruction ({reason or kind})", pc, instr)
        self.kind = kind
        self.reason = reason


class AddressFaultError(SimulationError):
    def __init__(self, pc, instr, addr, reason=None):
        super().__init__(reason or f"Address fault at 0x{addr & 0xffffffff:08x}", pc, instr)
        self.addr = addr


class HaltException(Exception):
    def __init__(self, reason, code=None):
        message = f"{reason}: {code}" if code is not None else reason
        super().__init__(message)
        self.reason = reason
        self.code = code
