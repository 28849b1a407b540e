import struct

import pytest

from errors import AddressFaultError, IllegalInstructionError
from rv32i import RV32ISim, main, parse_program_text, read_program_file
from rv_encode import LOAD, encode_b_type, encode_i_type, encode_r_type, encode_s_type
from sim_config import SimConfig

# Sum 1..10 into a0, store it to 0x100, read it back into a1, exit via ecall.
#   addi t0, zero, 10
#   addi a0, zero, 0
# loop:
#   add  a0, a0, t0
#   addi t0, t0, -1
#   bne  t0, zero, loop
#   sw   a0, 0x100(zero)
#   lw   a1, 0x100(zero)
#   addi a0, a0, -55
#   ecall
SUM_PROGRAM = [
    encode_i_type(10, 0, 0x0, 5),
    encode_i_type(0, 0, 0x0, 10),
    encode_r_type(0x00, 5, 10, 0x0, 10),
    encode_i_type(-1, 5, 0x0, 5),
    encode_b_type(-8, 0, 5, 0x1),
    encode_s_type(0x100, 10, 0, 0x2),
    encode_i_type(0x100, 0, 0x2, 11, opcode=LOAD),
    encode_i_type(-55, 10, 0x0, 10),
    0x00000073,
]


def test_run_to_ecall():
    sim = RV32ISim()
    sim.load_program(SUM_PROGRAM)
    retired = sim.run()
    assert sim.halt_reason == "ecall"
    assert sim.exit_code == 0
    assert sim.read_reg("a1") == 55
    assert sim.read_word(0x100) == 55
    assert sim.pc == 0x20
    # 2 setup + 10 * 3 loop + 3 tail; the halting ecall does not retire
    assert retired == 35
    assert sim.instr_count == 35


def test_run_step_limit():
    sim = RV32ISim(SimConfig(max_steps=5))
    sim.load_program(SUM_PROGRAM)
    assert sim.run() == 5
    assert sim.halt_reason == "max_steps"
    assert sim.read_reg("t0") == 9
    assert sim.run(max_steps=3) == 3
    assert sim.instr_count == 8


def test_run_propagates_illegal_instruction():
    sim = RV32ISim()
    sim.load_program([0x00c00293, 0xffffffff])
    with pytest.raises(IllegalInstructionError) as exc_info:
        sim.run()
    assert exc_info.value.pc == 4
    assert exc_info.value.instr == 0xffffffff
    assert sim.read_reg(5) == 12
    assert sim.instr_count == 1


def test_step_reports_errors(capsys):
    sim = RV32ISim()
    sim.load_program([0x00c00293, 0x00000000])
    assert sim.step() is True
    assert sim.step() is False
    out = capsys.readouterr().out
    assert "[SIM] Execution stopped" in out
    assert "pc=0x00000004" in out


def test_step_records_halt():
    sim = RV32ISim()
    sim.load_program([0x00100073])
    assert sim.step() is False
    assert sim.halt_reason == "ebreak"


def test_running_off_the_program_faults():
    sim = RV32ISim(SimConfig(imem_words=2))
    sim.load_program([0x00000013, 0x00000013])  # nop, nop
    with pytest.raises(AddressFaultError):
        sim.run()
    assert sim.instr_count == 2


def test_reset_pc_and_inspection():
    sim = RV32ISim(SimConfig(reset_pc=0x10, imem_base=0x10, imem_words=4))
    sim.load_program([0x123452b7])  # lui t0, 0x12345
    sim.load_data(0x20, b"\x78\x56\x34\x12")
    assert sim.pc == 0x10
    assert sim.read_instruction(0) == 0x123452b7
    assert sim.read_word(0x20) == 0x12345678
    sim.execute()
    assert sim.read_reg("t0") == 0x12345000
    assert sim.pc == 0x14


def test_trace_log():
    sim = RV32ISim(SimConfig(trace=True))
    sim.load_program([0x00c00293, 0x10502023])  # addi t0, zero, 12; sw t0, 0x100(zero)
    sim.step()
    sim.step()
    lines = sim.drain_trace()
    assert " ".join(lines[0].split()) == "00000000: addi t0, zero, 12"
    assert lines[1] == "t0=0000000c"
    assert " ".join(lines[2].split()) == "00000004: sw t0, 256(zero)"
    assert lines[3] == "0000000c->mem[00000100]"
    assert sim.drain_trace() == []

    assert RV32ISim().drain_trace() == []


def test_parse_program_text():
    text = """
    # comment line
    00c00293  # addi t0, zero, 12
    0x00000073
    deadbeef cafef00d
    """
    assert parse_program_text(text) == [0x00c00293, 0x00000073, 0xdeadbeef, 0xcafef00d]
    with pytest.raises(ValueError):
        parse_program_text("00c00293\nxyz\n")


def test_read_program_file(tmp_path):
    binary = tmp_path / "prog.bin"
    binary.write_bytes(struct.pack("<2I", 0x00c00293, 0x00000073) + b"\x13")
    assert read_program_file(str(binary)) == [0x00c00293, 0x00000073, 0x13]

    text = tmp_path / "prog.hex"
    text.write_text("00c00293\n00000073\n")
    assert read_program_file(str(text)) == [0x00c00293, 0x00000073]


def test_main_exit_code(tmp_path, capsys):
    prog = tmp_path / "sum.hex"
    prog.write_text("\n".join(f"{w:08x}" for w in SUM_PROGRAM))
    assert main([str(prog), "--dump-regs"]) == 0
    out = capsys.readouterr().out
    assert "[SIM] Halted: ecall: 0" in out
    assert "x11 (  a1) = 0x00000037" in out

    prog.write_text("00700513\n00000073\n")  # addi a0, zero, 7; ecall
    assert main([str(prog)]) == 7


def test_main_errors_and_limits(tmp_path, capsys):
    assert main([str(tmp_path / "missing.hex")]) == 1
    assert "[ERROR]" in capsys.readouterr().out

    prog = tmp_path / "bad.hex"
    prog.write_text("00c00293\n00000000\n")
    assert main([str(prog), "--trace"]) == 1
    out = capsys.readouterr().out
    assert "Illegal instruction" in out
    assert "[TRACE] 00000000: addi" in out

    loop = tmp_path / "loop.hex"
    loop.write_text("0000006f\n")  # jal zero, 0
    assert main([str(loop), "--max-steps", "10"]) == 0
    assert "Step limit reached after 10 instructions" in capsys.readouterr().out

    config = tmp_path / "sim.json"
    config.write_text('{"imem_words": 1}')
    prog.write_text("00000013\n00000013\n")
    assert main([str(prog), "--config", str(config)]) == 1


def test_main_rejects_badly_typed_config(tmp_path, capsys):
    prog = tmp_path / "prog.hex"
    prog.write_text("00000073\n")
    config = tmp_path / "sim.json"
    config.write_text('{"imem_words": [1]}')
    assert main([str(prog), "--config", str(config)]) == 1
    assert "[ERROR] Invalid config value" in capsys.readouterr().out


def test_sum_program_words():
    assert SUM_PROGRAM[:8] == [
        0x00a00293,
        0x00000513,
        0x00550533,
        0xfff28293,
        0xfe029ce3,
        0x10a02023,
        0x10002583,
        0xfc950513,
    ]
