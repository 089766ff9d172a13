"""
bittape Runtime Test Suite

Tests program execution end to end:
1. Constant-output program (hello world)
2. Echo programs
3. The reverse program
4. Input exhaustion
5. Unmatched brackets
6. Runtime harness: results, provenance, step limit
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bittape import (
    ExecutionResult,
    Interpreter,
    MalformedProgram,
    Runtime,
    StepLimitExceeded,
    compile_program,
    encode,
    run,
)


HELLO_WORLD = (
    ";;;+;+;;+;+;"
    "+;+;+;+;;+;;+;"
    ";;+;;+;+;;+;"
    ";;+;;+;+;;+;"
    "+;;;;+;+;;+;"
    ";;+;;+;+;+;;"
    ";;;;;+;+;;"
    "+;;;+;+;;;+;"
    "+;;;;+;+;;+;"
    ";+;+;;+;;;+;"
    ";;+;;+;+;;+;"
    ";;+;+;;+;;+;"
    "+;+;;;;+;+;;"
    ";+;+;+;"
)

# One marker cell per 8-bit group detects end of input
REVERSE = (
    ">,>,>,>,>,>,>,>,>+<<<<<<<<+[>+]<[<]>>>>>>>>>[+<<<<<<<<[>]+"
    "<[+<]>>>>>>>>>>,>,>,>,>,>,>,>,>+<<<<<<<<+[>+]<[<]>>>>>>>>>]<[+<]+<<<<<<<<+[>+]"
    "<[<]>>>>>>>>>[+<<<<<<<<[>]+<[+<]>;>;>;>;>;>;>;>;<<<<<<<<+<<<<<<<<+[>+]"
    "<[<]>>>>>>>>>]<[+<]"
)


# --- Constant output ---

@pytest.mark.parametrize("data", [b"", b"x", b"ignored input"])
def test_hello_world_ignores_input(data):
    assert run(HELLO_WORLD, data) == b"Hello, world!\n"


# --- Echo ---

def test_echo_one_byte():
    assert run(",;,;,;,;,;,;,;,;", b"A") == b"A"


def test_echo_two_bytes_with_noop_separator():
    assert run(",;,;,;,;,;,;,;,; ,;,;,;,;,;,;,;,;", b"AB") == b"AB"


def test_echo_through_the_tape():
    program = ",>,>,>,>,>,>,>,> <<<<<<<< ;>;>;>;>;>;>;>;>"
    assert run(program, b"Z") == b"Z"


def test_write_without_input_outputs_zero_bits():
    assert run(";", b"") == b"\x00"
    assert run("", b"anything") == b""


# --- Reverse ---

@pytest.mark.parametrize(
    "data,expected",
    [
        (b"1", b"1"),
        (b"12", b"21"),
        (b"123", b"321"),
        (b"abcdefghijklmnopqrstuvwxyz", b"zyxwvutsrqponmlkjihgfedcba"),
    ],
)
def test_reverse(data, expected):
    assert run(REVERSE, data) == expected


def test_reverse_with_small_tape_matches_default():
    data = b"abcdefghijklmnopqrstuvwxyz"
    program = compile_program(REVERSE)
    small = Interpreter(program, encode(data), capacity=1).execute()
    default = Interpreter(program, encode(data)).execute()
    assert small == default


# --- Input exhaustion ---

def test_reads_after_eof_are_zero():
    # 8 real bits, then 12 reads past the end
    assert run(",;" * 20, b"\xff") == b"\xff\x00\x00"


def test_read_overwrites_cell_with_zero_after_eof():
    assert run("+,;", b"") == b"\x00"


# --- Control flow ---

def test_loop_skipped_when_cell_is_zero():
    # body would emit a 1 bit
    assert run("[+;]", b"") == b""


def test_loop_runs_until_cell_clears():
    # echoes input bits up to and including the first 0
    assert run("+[,;]", b"\x07") == b"\x07"


def test_no_ops_are_ignored():
    assert run("a,b;c", b"\x01") == b"\x01"


# --- Malformed programs ---

def test_unmatched_open_bracket_raises():
    with pytest.raises(MalformedProgram) as excinfo:
        run("[", b"")
    assert excinfo.value.pc == 0


def test_unmatched_close_bracket_raises_when_taken():
    with pytest.raises(MalformedProgram):
        run("+]", b"")


def test_unmatched_bracket_not_taken_is_harmless():
    assert run("]", b"") == b""
    assert run("+[;", b"") == b"\x01"


# --- Runtime harness ---

def test_runtime_success():
    result = Runtime().run(REVERSE, b"123")
    assert isinstance(result, ExecutionResult)
    assert result.success
    assert result.output == b"321"
    assert result.errors == []
    assert result.steps > 0
    assert result.provenance[0]["operation"] == "START"
    assert result.provenance[-1]["operation"] == "HALT"
    assert "SUCCESS" in result.summary()


def test_runtime_trace_logs_every_instruction():
    result = Runtime(trace=True).run(",;,;,;,;,;,;,;,;", b"A")
    operations = [entry["operation"] for entry in result.provenance]
    assert operations == ["START"] + ["READ", "WRITE"] * 8 + ["HALT"]
    assert result.steps == 16
    assert [entry["pc"] for entry in result.provenance[1:4]] == [0, 1, 2]


def test_runtime_logs_tape_growth():
    result = Runtime(capacity=2).run("<>>>", b"")
    grows = [e for e in result.provenance if e["operation"].startswith("GROW_")]
    assert [(e["operation"], e["capacity"], e["offset"]) for e in grows] == [
        ("GROW_LEFT", 4, 2),
        ("GROW_RIGHT", 8, 2),
    ]


def test_runtime_reports_malformed_program():
    result = Runtime().run("[", b"")
    assert not result.success
    assert len(result.errors) == 1
    assert "Unmatched" in result.errors[0]
    assert result.provenance[-1]["operation"] == "ERROR"
    assert "FAILED" in result.summary()


def test_runtime_step_limit():
    result = Runtime(max_steps=100).run("+[]", b"")
    assert not result.success
    assert result.steps == 100
    assert "Step limit" in result.errors[0]


def test_interpreter_step_limit_raises():
    interpreter = Interpreter(compile_program("+[]"), encode(b""))
    with pytest.raises(StepLimitExceeded) as excinfo:
        interpreter.execute(max_steps=50)
    assert excinfo.value.steps == 50
    assert excinfo.value.pc in (1, 2)


def test_step_limit_not_hit_by_finishing_program():
    result = Runtime(max_steps=16).run(",;,;,;,;,;,;,;,;", b"A")
    assert result.success
    assert result.output == b"A"


def test_interpreter_step_by_step():
    interpreter = Interpreter(compile_program("+;"), encode(b""))
    assert interpreter.step()
    assert interpreter.state.tape.read() is True
    assert interpreter.step()
    assert interpreter.halted
    assert not interpreter.step()
    assert interpreter.state.output == [True]


def test_runs_are_independent():
    program = compile_program(REVERSE)
    assert run(program, b"ab") == b"ba"
    assert run(program, b"xyz") == b"zyx"
