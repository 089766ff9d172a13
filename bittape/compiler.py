"""
bittape Program Compiler

Turns program text into an immutable Program and resolves loop jumps.

The language has seven instructions; every other character is a no-op:

    +   flip the bit under the cursor
    ,   read the next input bit into the cell under the cursor
    ;   write the cell under the cursor to the output
    <   move the cursor left
    >   move the cursor right
    [   if the cell is 0, jump to the matching ]
    ]   if the cell is 1, jump back to the matching [

Programs are NOT validated before execution. Brackets are matched lazily by
a balanced-counter scan the first time a jump needs them; an unmatched
bracket is only an error if execution actually tries to jump from it.

Usage:
    program = compile_program(",;,;,;,;,;,;,;,;")
    matcher = BracketMatcher(program)
    matcher.forward(pc)     # pc of the matching ]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


# ============================================================================
# Opcodes
# ============================================================================

class Opcode(Enum):
    FLIP = "+"
    READ = ","
    WRITE = ";"
    LEFT = "<"
    RIGHT = ">"
    JUMP_FORWARD = "["
    JUMP_BACKWARD = "]"
    NOP = ""


OPCODES = {op.value: op for op in Opcode if op is not Opcode.NOP}


@dataclass(frozen=True)
class Instruction:
    """One program character and where it came from."""
    opcode: Opcode
    char: str
    pc: int
    line: int
    col: int

    def __repr__(self) -> str:
        return f"<{self.opcode.name}:{self.char!r} pc={self.pc}>"


class MalformedProgram(Exception):
    """A [ or ] with no reachable matching partner."""

    def __init__(self, message: str, instruction: Instruction):
        super().__init__(
            f"Line {instruction.line}, Col {instruction.col}: {message} "
            f"(pc={instruction.pc})"
        )
        self.pc = instruction.pc
        self.line = instruction.line
        self.col = instruction.col


# ============================================================================
# Program
# ============================================================================

@dataclass(frozen=True)
class Program:
    """An immutable sequence of instructions compiled from source text."""
    source: str
    instructions: tuple[Instruction, ...] = field(repr=False)

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, pc: int) -> Instruction:
        return self.instructions[pc]

    @property
    def operation_count(self) -> int:
        """Number of instructions that are not no-ops."""
        return sum(1 for ins in self.instructions if ins.opcode is not Opcode.NOP)


def tokenize(source: str) -> tuple[Instruction, ...]:
    """Map every character of ``source`` to an Instruction."""
    instructions = []
    line, col = 1, 0
    for pc, char in enumerate(source):
        instructions.append(
            Instruction(OPCODES.get(char, Opcode.NOP), char, pc, line, col)
        )
        if char == "\n":
            line += 1
            col = 0
        else:
            col += 1
    return tuple(instructions)


def compile_program(source: Union[str, Program]) -> Program:
    """Compile program text. A Program passes through unchanged."""
    if isinstance(source, Program):
        return source
    if not isinstance(source, str):
        raise TypeError(f"Cannot compile program from {type(source).__name__}")
    return Program(source=source, instructions=tokenize(source))


# ============================================================================
# Bracket matching
# ============================================================================

class BracketMatcher:
    """Resolves [ and ] partners by balanced-counter scans.

    Each scan result is cached, so the first jump from a bracket costs a
    linear scan and every later jump from it is a dictionary lookup.
    """

    def __init__(self, program: Program) -> None:
        self._program = program
        self._jumps: dict[int, int] = {}

    def forward(self, pc: int) -> int:
        """pc of the ] matching the [ at ``pc``."""
        self._require(pc, Opcode.JUMP_FORWARD)
        if pc not in self._jumps:
            self._remember(pc, self._scan(pc, 1))
        return self._jumps[pc]

    def backward(self, pc: int) -> int:
        """pc of the [ matching the ] at ``pc``."""
        self._require(pc, Opcode.JUMP_BACKWARD)
        if pc not in self._jumps:
            self._remember(pc, self._scan(pc, -1))
        return self._jumps[pc]

    def _scan(self, start: int, step: int) -> int:
        opening = Opcode.JUMP_FORWARD if step > 0 else Opcode.JUMP_BACKWARD
        closing = Opcode.JUMP_BACKWARD if step > 0 else Opcode.JUMP_FORWARD
        counter = 1
        pc = start + step
        while 0 <= pc < len(self._program):
            opcode = self._program[pc].opcode
            if opcode is opening:
                counter += 1
            elif opcode is closing:
                counter -= 1
                if counter == 0:
                    return pc
            pc += step
        raise MalformedProgram(
            f"Unmatched {self._program[start].char!r}", self._program[start]
        )

    def _remember(self, pc: int, partner: int) -> None:
        self._jumps[pc] = partner
        self._jumps[partner] = pc

    def _require(self, pc: int, opcode: Opcode) -> None:
        if not 0 <= pc < len(self._program):
            raise ValueError(f"pc {pc} is outside the program (length {len(self._program)})")
        found = self._program[pc].opcode
        if found is not opcode:
            raise ValueError(f"Expected {opcode.value!r} at pc {pc}, found {self._program[pc].char!r}")
