import json

import pytest

from sim_config import SimConfig, _parse_bool, _parse_int, config_from_dict, load_config


def test_parse_helpers():
    assert _parse_int("0x10") == 16
    assert _parse_int(True) == 1
    assert _parse_int(None, default=3) == 3
    assert _parse_bool("yes") is True
    assert _parse_bool("0") is False
    assert _parse_bool("maybe") is True
    assert _parse_bool(None, default=True) is True
    assert _parse_bool(0) is False


def test_defaults():
    config = SimConfig()
    assert config.imem_words == 256
    assert config.dmem_bytes == 1024
    assert config.reset_pc == 0
    assert config.max_steps is None
    assert config.trace is False


def test_config_from_dict():
    config = config_from_dict({"dmem_bytes": "0x2000", "reset_pc": 16, "max_steps": "100", "trace": "on"})
    assert config.dmem_bytes == 0x2000
    assert config.reset_pc == 16
    assert config.max_steps == 100
    assert config.trace is True
    assert config.imem_words == 256


def test_config_errors():
    with pytest.raises(ValueError):
        config_from_dict({"memory": 1})
    with pytest.raises(ValueError):
        config_from_dict({"reset_pc": 2})
    with pytest.raises(ValueError):
        config_from_dict({"imem_words": 0})
    with pytest.raises(ValueError):
        SimConfig(max_steps=-1).validate()


def test_merged_ignores_none():
    config = SimConfig(max_steps=10)
    merged = config.merged(max_steps=None, trace=True)
    assert merged.max_steps == 10
    assert merged.trace is True
    assert config.trace is False


def test_load_config_file(tmp_path):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"imem_words": 64, "trace": False}))
    config = load_config(str(path))
    assert config.imem_words == 64

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_config(str(bad))


def test_wrong_value_types_are_value_errors():
    with pytest.raises(ValueError):
        config_from_dict({"imem_words": [1]})
    with pytest.raises(ValueError):
        config_from_dict({"max_steps": {"n": 1}})
