"""
bittape - a virtual machine for a Brainfuck-style language on a bit tape.

Programs are strings of single-character instructions (+ , ; < > [ ]) that
operate on an unbounded tape of bits. Input and output are byte strings,
streamed through the machine one bit at a time, least-significant bit first.

Components:
- bits:     BitCodec (bytes <-> LSB-first bit sequences)
- tape:     growable bidirectional bit tape
- compiler: Program compilation and bracket matching
- runtime:  instruction-dispatch loop, Runtime harness, run()
"""

__version__ = "0.1.0"

from bittape.bits import BitStream, BitReader, encode, decode
from bittape.tape import Tape, DEFAULT_CAPACITY
from bittape.compiler import (
    Opcode,
    Instruction,
    Program,
    BracketMatcher,
    MalformedProgram,
    compile_program,
)
from bittape.runtime import (
    Interpreter,
    Runtime,
    ExecutionState,
    ExecutionResult,
    StepLimitExceeded,
    run,
)

__all__ = [
    "BitStream",
    "BitReader",
    "encode",
    "decode",
    "Tape",
    "DEFAULT_CAPACITY",
    "Opcode",
    "Instruction",
    "Program",
    "BracketMatcher",
    "MalformedProgram",
    "compile_program",
    "Interpreter",
    "Runtime",
    "ExecutionState",
    "ExecutionResult",
    "StepLimitExceeded",
    "run",
]
