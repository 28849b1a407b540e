# rv32i.py
# RV32I instruction-set simulator: owns the register file and memories, drives the core loop

import argparse
import struct
import sys

from cpu_core import CPUCore
from errors import HaltException, SimulationError
from memory import DataMemory, InstructionStore
from register_file import RegisterFile, register_index
from sim_config import SimConfig, load_config


class RV32ISim:
    def __init__(self, config=None):
        self.config = (config or SimConfig()).validate()
        self.trace_log = [] if self.config.trace else None
        self.regs = RegisterFile(trace_log=self.trace_log)
        self.imem = InstructionStore(self.config.imem_words, base=self.config.imem_base)
        self.dmem = DataMemory(self.config.dmem_bytes, base=self.config.dmem_base, trace_log=self.trace_log)
        self.core = CPUCore(self)
        self.instr_count = 0
        self.last_instr = None
        self.halt_reason = None
        self.exit_code = None
        self.regs.pc = self.config.reset_pc

    @property
    def pc(self):
        return self.regs.pc

    @pc.setter
    def pc(self, value):
        self.regs.pc = value

    def load_program(self, words, base=None):
        count = self.imem.load(words, base)
        print(f"[SIM] Loaded {count} instruction words at 0x{self.imem.base if base is None else base:08x}")
        return count

    def load_data(self, addr, data):
        self.dmem.write_memory(addr, bytes(data))

    def read_reg(self, idx):
        return self.regs[register_index(idx)]

    def read_word(self, addr):
        return self.dmem.load_word(addr)

    def read_instruction(self, index):
        return self.imem.word_at(index)

    def execute(self):
        return self.core.execute()

    def step(self):
        try:
            self.execute()
            return True
        except HaltException as e:
            self._record_halt(e)
            return False
        except SimulationError as e:
            print(f"[SIM] Execution stopped: {e}")
            return False

    def _record_halt(self, exc):
        self.halt_reason = exc.reason
        self.exit_code = exc.code
        print(f"[SIM] Halted: {exc}")

    def run(self, max_steps=None):
        """Execute until ECALL/EBREAK or until ``max_steps`` instructions have retired.

        Simulation errors propagate to the caller; the run is not resumable after one.
        Returns the number of instructions retired by this call.
        """
        if max_steps is None:
            max_steps = self.config.max_steps
        start = self.instr_count
        try:
            while max_steps is None or self.instr_count - start < max_steps:
                self.execute()
            self.halt_reason = "max_steps"
        except HaltException as e:
            self._record_halt(e)
        return self.instr_count - start

    def drain_trace(self):
        if self.trace_log is None:
            return []
        lines = list(self.trace_log)
        self.trace_log.clear()
        return lines

    def dump_regs(self):
        for line in self.regs.format_dump():
            print(line)


def parse_program_text(text):
    words = []
    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.split("#", 1)[0].strip()
        for token in line.split():
            try:
                words.append(int(token, 16) & 0xffffffff)
            except ValueError:
                raise ValueError(f"Line {lineno}: invalid instruction word {token!r}") from None
    return words


def read_program_file(filename):
    if filename.endswith(".bin"):
        with open(filename, "rb") as f:
            data = f.read()
        if len(data) % 4:
            data += b"\x00" * (4 - len(data) % 4)
        return [word for (word,) in struct.iter_unpack("<I", data)]
    with open(filename, "r") as f:
        return parse_program_text(f.read())


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Run an RV32I program on the instruction-set simulator")
    parser.add_argument("program", help="Program image: .bin (little-endian words) or text of hex words")
    parser.add_argument("--config", help="JSON simulator config")
    parser.add_argument("--max-steps", type=int, help="Stop after N instructions")
    parser.add_argument("--reset-pc", type=lambda s: int(s, 0), help="Initial program counter")
    parser.add_argument("--trace", action="store_true", default=None, help="Print each executed instruction")
    parser.add_argument("--dump-regs", action="store_true", help="Print the register file when the run ends")
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    try:
        config = load_config(args.config) if args.config else SimConfig()
        config = config.merged(max_steps=args.max_steps, reset_pc=args.reset_pc, trace=args.trace)
        words = read_program_file(args.program)
    except (OSError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1

    sim = RV32ISim(config)
    try:
        sim.load_program(words)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 1

    status = 0
    try:
        sim.run()
    except SimulationError as e:
        print(f"[SIM] Execution stopped: {e}")
        status = 1
    finally:
        for line in sim.drain_trace():
            print(f"[TRACE] {line}")

    if sim.halt_reason == "max_steps":
        print(f"[SIM] Step limit reached after {sim.instr_count} instructions")
    elif status == 0 and sim.exit_code is not None:
        status = sim.exit_code & 0xff
    if args.dump_regs:
        sim.dump_regs()
    return status


if __name__ == "__main__":
    sys.exit(main())
