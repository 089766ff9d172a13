"""
bittape Runtime Engine

Executes compiled programs against a fresh Tape.

The Interpreter is the instruction-dispatch loop:
1. Read the instruction at pc
2. Dispatch to its handler (flip, read, write, move, jump, no-op)
3. Advance pc by one unless a jump set it
4. Halt once pc runs off the end of the program

The Runtime wraps the Interpreter the way a harness would: it holds the
configuration (tape capacity, optional step limit, tracing), records a
provenance trail, and reports failures inside an ExecutionResult instead
of raising.

Usage:
    run(",;,;,;,;,;,;,;,;", b"A")                 # b"A"

    runtime = Runtime(max_steps=10_000, trace=True)
    result = runtime.run("+[]", b"")
    result.success                                # False
    print(result.summary())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from bittape.bits import BitReader, BitStream, decode, encode
from bittape.compiler import BracketMatcher, MalformedProgram, Opcode, Program, compile_program
from bittape.tape import DEFAULT_CAPACITY, Tape


class StepLimitExceeded(Exception):
    """The caller-imposed step limit ran out before the program halted."""

    def __init__(self, steps: int, pc: int):
        super().__init__(f"Step limit of {steps} exceeded at pc={pc}")
        self.steps = steps
        self.pc = pc


@dataclass
class ExecutionState:
    """Everything one execution owns. Built fresh per run."""
    tape: Tape
    reader: BitReader
    output: BitStream = field(default_factory=BitStream)
    pc: int = 0
    steps: int = 0
    # Provenance log (audit trail); filled only when something asks for it
    provenance: list[dict[str, Any]] = field(default_factory=list)

    def log(self, operation: str, details: Optional[dict[str, Any]] = None) -> None:
        """Add to provenance trail."""
        entry = {
            "step": self.steps,
            "operation": operation,
            "pc": self.pc,
            "position": self.tape.position,
            "cell": int(self.tape.read()),
        }
        if details:
            entry.update(details)
        self.provenance.append(entry)


class Interpreter:
    """The dispatch loop for one program and one input.

    An Interpreter is single-use: construct it, call execute(), read the
    output. Stepping manually with step() is also supported.
    """

    def __init__(
        self,
        program: Program,
        input_bits: BitStream,
        capacity: int = DEFAULT_CAPACITY,
        on_dispatch: Optional[Callable[[ExecutionState, Opcode], None]] = None,
    ) -> None:
        self.program = program
        self._matcher = BracketMatcher(program)
        self._on_dispatch = on_dispatch
        self.state = ExecutionState(
            tape=Tape(capacity, on_grow=self._log_growth),
            reader=BitReader(input_bits),
        )
        self._handlers = {
            Opcode.FLIP: self._exec_flip,
            Opcode.READ: self._exec_read,
            Opcode.WRITE: self._exec_write,
            Opcode.LEFT: self._exec_left,
            Opcode.RIGHT: self._exec_right,
            Opcode.JUMP_FORWARD: self._exec_jump_forward,
            Opcode.JUMP_BACKWARD: self._exec_jump_backward,
            Opcode.NOP: self._exec_nop,
        }

    @property
    def halted(self) -> bool:
        return self.state.pc >= len(self.program)

    def step(self) -> bool:
        """Execute one instruction. Returns False once the program has halted."""
        if self.halted:
            return False
        opcode = self.program[self.state.pc].opcode
        if self._on_dispatch is not None:
            self._on_dispatch(self.state, opcode)
        self._handlers[opcode]()
        self.state.steps += 1
        return True

    def execute(self, max_steps: Optional[int] = None) -> BitStream:
        """Run to completion and return the output bits.

        ``max_steps`` is an optional runaway guard; by default there is none.
        """
        state = self.state
        while not self.halted:
            if max_steps is not None and state.steps >= max_steps:
                raise StepLimitExceeded(max_steps, state.pc)
            self.step()
        return state.output

    # ------------------------------------------------------------------
    # Instruction handlers
    # ------------------------------------------------------------------

    def _exec_flip(self) -> None:
        self.state.tape.flip()
        self.state.pc += 1

    def _exec_read(self) -> None:
        self.state.tape.write(self.state.reader.read())
        self.state.pc += 1

    def _exec_write(self) -> None:
        self.state.output.append(self.state.tape.read())
        self.state.pc += 1

    def _exec_left(self) -> None:
        self.state.tape.move_left()
        self.state.pc += 1

    def _exec_right(self) -> None:
        self.state.tape.move_right()
        self.state.pc += 1

    def _exec_jump_forward(self) -> None:
        # Lands ON the matching ], which then falls through since the cell is 0
        if not self.state.tape.read():
            self.state.pc = self._matcher.forward(self.state.pc)
        else:
            self.state.pc += 1

    def _exec_jump_backward(self) -> None:
        if self.state.tape.read():
            self.state.pc = self._matcher.backward(self.state.pc)
        else:
            self.state.pc += 1

    def _exec_nop(self) -> None:
        self.state.pc += 1

    def _log_growth(self, direction: str, capacity: int, offset: int) -> None:
        self.state.log(
            f"GROW_{direction.upper()}",
            {"capacity": capacity, "offset": offset},
        )


# ============================================================================
# Runtime
# ============================================================================

@dataclass
class ExecutionResult:
    """The result of executing a program through the Runtime."""
    success: bool
    state: ExecutionState
    errors: list[str] = field(default_factory=list)

    @property
    def output_bits(self) -> BitStream:
        return self.state.output

    @property
    def output(self) -> bytes:
        return decode(self.state.output)

    @property
    def steps(self) -> int:
        return self.state.steps

    @property
    def provenance(self) -> list[dict[str, Any]]:
        return self.state.provenance

    def summary(self) -> str:
        tape = self.state.tape
        lines = [
            f"bittape Execution {'SUCCESS' if self.success else 'FAILED'}",
            f"  Steps: {self.state.steps}",
            f"  Output: {self.output!r} ({len(self.state.output)} bits)",
            f"  Input consumed: {self.state.reader.position} bits",
            f"  Tape: capacity={tape.capacity} offset={tape.offset} position={tape.position}",
        ]
        if self.errors:
            lines.append(f"  Errors: {self.errors}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<ExecutionResult: {'OK' if self.success else 'FAIL'} steps={self.state.steps}>"


class Runtime:
    """Configured program execution engine.

    Usage:
        runtime = Runtime(capacity=64, max_steps=1_000_000)
        result = runtime.run(source, b"hello")
        if result.success:
            print(result.output)
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        max_steps: Optional[int] = None,
        trace: bool = False,
    ) -> None:
        self.capacity = capacity
        self.max_steps = max_steps
        self.trace = trace

    def execute(self, program: Program, data: bytes) -> ExecutionResult:
        """Execute a compiled program against ``data``."""
        interpreter = Interpreter(
            program,
            encode(data),
            capacity=self.capacity,
            on_dispatch=_trace_dispatch if self.trace else None,
        )
        state = interpreter.state
        state.log("START", {"program_length": len(program), "input_bits": len(state.reader)})

        try:
            interpreter.execute(self.max_steps)
        except (MalformedProgram, StepLimitExceeded) as e:
            state.log("ERROR", {"error": str(e)})
            return ExecutionResult(success=False, state=state, errors=[str(e)])

        state.log("HALT", {"output_bits": len(state.output)})
        return ExecutionResult(success=True, state=state)

    def run(self, source: Union[str, Program], data: bytes) -> ExecutionResult:
        """Compile and execute program text."""
        return self.execute(compile_program(source), data)


def _trace_dispatch(state: ExecutionState, opcode: Opcode) -> None:
    state.log(opcode.name)


def run(program: Union[str, Program], data: bytes) -> bytes:
    """Execute ``program`` on ``data`` and return the output bytes.

    Pure: every call owns its own tape, input cursor and output. Raises
    MalformedProgram if execution jumps from an unmatched bracket.
    """
    output = Interpreter(compile_program(program), encode(data)).execute()
    return decode(output)
