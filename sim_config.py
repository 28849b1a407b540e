# sim_config.py
# Simulator configuration: defaults, JSON config files and CLI overrides

import json
from dataclasses import dataclass, fields, replace
from typing import Optional

from memory import DEFAULT_DMEM_BYTES, DEFAULT_IMEM_WORDS


def _parse_int(value, default=0):
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        return int(value, 0)
    return int(value)


def _parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
    return bool(value)


@dataclass
class SimConfig:
    imem_words: int = DEFAULT_IMEM_WORDS
    imem_base: int = 0
    dmem_bytes: int = DEFAULT_DMEM_BYTES
    dmem_base: int = 0
    reset_pc: int = 0
    max_steps: Optional[int] = None
    trace: bool = False

    def validate(self):
        if self.imem_words <= 0:
            raise ValueError(f"imem_words must be positive, got {self.imem_words}")
        if self.dmem_bytes <= 0:
            raise ValueError(f"dmem_bytes must be positive, got {self.dmem_bytes}")
        if self.imem_base % 4 or self.reset_pc % 4:
            raise ValueError("imem_base and reset_pc must be word aligned")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must not be negative, got {self.max_steps}")
        return self

    def merged(self, **overrides):
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes).validate()


_INT_KEYS = ("imem_words", "imem_base", "dmem_bytes", "dmem_base", "reset_pc")


def config_from_dict(data):
    known = {f.name for f in fields(SimConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    defaults = SimConfig()
    values = {}
    try:
        for key in _INT_KEYS:
            values[key] = _parse_int(data.get(key), getattr(defaults, key))
        if data.get("max_steps") is not None:
            values["max_steps"] = _parse_int(data["max_steps"])
    except TypeError as e:
        raise ValueError(f"Invalid config value: {e}") from e
    values["trace"] = _parse_bool(data.get("trace"), defaults.trace)
    return SimConfig(**values).validate()


def load_config(filename):
    with open(filename, "r") as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f"Config file {filename} must contain a JSON object")
    return config_from_dict(config)
