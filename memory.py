# memory.py
# Instruction store (word array, read-only to the core) and byte-addressed data store

from errors import MemoryAccessError

DEFAULT_IMEM_WORDS = 256
DEFAULT_DMEM_BYTES = 1024


class InstructionStore:
    def __init__(self, size_words=DEFAULT_IMEM_WORDS, base=0):
        if size_words <= 0:
            raise ValueError(f"Invalid instruction store size: {size_words}")
        self.base = base & 0xffffffff
        self.size_words = size_words
        self.words = [0] * size_words

    @property
    def end(self):
        return self.base + self.size_words * 4

    def contains(self, addr):
        return self.base <= addr < self.end

    def load(self, words, base=None):
        start = self.base if base is None else base & 0xffffffff
        if start % 4:
            raise ValueError(f"Program base must be word aligned: 0x{start:08x}")
        words = list(words)
        index = (start - self.base) // 4
        if start < self.base or index + len(words) > self.size_words:
            raise MemoryAccessError(start, len(words) * 4, "load")
        for offset, word in enumerate(words):
            self.words[index + offset] = word & 0xffffffff
        return len(words)

    def word_at(self, index):
        if not 0 <= index < self.size_words:
            raise MemoryAccessError(self.base + index * 4, 4, "read")
        return self.words[index]

    def fetch(self, pc):
        pc &= 0xffffffff
        if not self.contains(pc):
            raise MemoryAccessError(pc, 4, "fetch")
        return self.words[(pc - self.base) // 4]


class DataMemory:
    def __init__(self, size=DEFAULT_DMEM_BYTES, base=0, trace_log=None):
        if size <= 0:
            raise ValueError(f"Invalid data memory size: {size}")
        self.base = base & 0xffffffff
        self.size = size
        self.data = bytearray(size)
        self.trace_log = trace_log

    @property
    def end(self):
        return self.base + self.size

    def _offset(self, addr, size, op):
        addr &= 0xffffffff
        if addr < self.base or addr + size > self.end:
            raise MemoryAccessError(addr, size, op)
        return addr - self.base

    def read_memory(self, addr, size):
        offset = self._offset(addr, size, "read")
        return int.from_bytes(self.data[offset:offset + size], "little")

    def read_bytes(self, addr, size):
        offset = self._offset(addr, size, "read")
        return bytes(self.data[offset:offset + size])

    def write_memory(self, addr, data):
        offset = self._offset(addr, len(data), "write")
        self.data[offset:offset + len(data)] = data

    def _store(self, addr, size, value):
        value &= (1 << (size * 8)) - 1
        self.write_memory(addr, value.to_bytes(size, "little"))
        if self.trace_log is not None:
            self.trace_log.append(f"{value:0{size * 2}x}->mem[{addr & 0xffffffff:08x}]")

    def load_byte(self, addr):
        return self.read_memory(addr, 1)

    def load_half(self, addr):
        return self.read_memory(addr, 2)

    def load_word(self, addr):
        return self.read_memory(addr, 4)

    def store_byte(self, addr, val):
        self._store(addr, 1, val)

    def store_half(self, addr, val):
        self._store(addr, 2, val)

    def store_word(self, addr, val):
        self._store(addr, 4, val)

    def word_at(self, index):
        return self.load_word(self.base + index * 4)

    def reset(self):
        self.data = bytearray(self.size)
