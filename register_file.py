# register_file.py
# 32 general purpose registers plus the program counter; x0 is hardwired to zero

ABI_NAMES = [
    "zero", "ra", "sp", "gp", "tp", "t0", "t1", "t2", "fp", "s1",
    "a0", "a1", "a2", "a3", "a4", "a5", "a6", "a7",
    "s2", "s3", "s4", "s5", "s6", "s7", "s8", "s9", "s10", "s11",
    "t3", "t4", "t5", "t6",
]

_ALIASES = {name: idx for idx, name in enumerate(ABI_NAMES)}
_ALIASES["s0"] = 8
_ALIASES.update({f"x{idx}": idx for idx in range(32)})


def register_index(name):
    if isinstance(name, int):
        if not 0 <= name < 32:
            raise IndexError(f"Register index out of range: {name}")
        return name
    try:
        return _ALIASES[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown register name: {name!r}") from None


class RegisterFile:
    def __init__(self, trace_log=None):
        self._x = [0] * 32
        self._pc = 0
        self.trace_log = trace_log

    @property
    def pc(self):
        return self._pc

    @pc.setter
    def pc(self, value):
        self._pc = value & 0xffffffff

    def __getitem__(self, idx):
        return self._x[register_index(idx)]

    def __setitem__(self, idx, value):
        idx = register_index(idx)
        if idx == 0:
            return
        value &= 0xffffffff
        if self.trace_log is not None and value != self._x[idx]:
            self.trace_log.append(f"{ABI_NAMES[idx]}={value:08x}")
        self._x[idx] = value

    def __len__(self):
        return len(self._x)

    def read(self, idx):
        return self[idx]

    def write(self, idx, value):
        self[idx] = value

    def snapshot(self):
        return list(self._x)

    def reset(self):
        self._x = [0] * 32
        self._pc = 0

    def format_dump(self):
        lines = [
            f"x{i:<2} ({ABI_NAMES[i]:>4}) = 0x{self._x[i]:08x}"
            for i in range(32)
        ]
        lines.append(f"pc        = 0x{self._pc:08x}")
        return lines
