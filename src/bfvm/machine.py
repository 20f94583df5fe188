from __future__ import annotations

import logging
import sys
from typing import BinaryIO, List, Optional, Sequence

import numpy as np

from . import jit
from .compiler import (
    Decrement,
    Increment,
    Input,
    Instruction,
    Loop,
    LoopBegin,
    LoopEnd,
    MoveLeft,
    MoveRight,
    Output,
    is_flat,
)
from .errors import out_of_bounds, step_limit
from .state import BoundsPolicy, MachineConfig, MachineState

logger = logging.getLogger(__name__)


class Machine:
    """Tape machine executing compiled programs.

    Owns one tape and one data pointer for its whole lifetime. Structured
    programs (with ``Loop`` nodes) run on the recursive engine; flat programs
    run on the program-counter engine, or on the numba kernel when the
    configured engine is ``"jit"``.

    Pointer moves that leave the tape follow ``config.bounds``: ``FAIL``
    raises ``PointerOutOfBounds`` with the pointer unchanged, ``WRAP`` wraps
    modulo the tape length, ``GROW`` extends the tape to the right (moving
    below cell 0 still fails).
    """

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        *,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
    ):
        self.config = config or MachineConfig()
        self.state = MachineState.fresh(self.config.tape_size)
        self._stdin = stdin
        self._stdout = stdout

    # ---------------- Inspection ----------------
    @property
    def tape(self) -> np.ndarray:
        return self.state.tape

    @property
    def pointer(self) -> int:
        return self.state.pointer

    @property
    def steps(self) -> int:
        return self.state.steps

    @property
    def cell(self) -> int:
        return int(self.state.tape[self.state.pointer])

    def dump(self, start: int = 0, count: int = 16) -> List[int]:
        return [int(b) for b in self.state.tape[start:start + count]]

    # ---------------- I/O ----------------
    @property
    def stdin(self) -> BinaryIO:
        return self._stdin if self._stdin is not None else sys.stdin.buffer

    @property
    def stdout(self) -> BinaryIO:
        return self._stdout if self._stdout is not None else sys.stdout.buffer

    def _output(self) -> None:
        self.stdout.write(bytes((int(self.state.tape[self.state.pointer]),)))

    def _input(self) -> None:
        data = self.stdin.read(1)
        if data:
            self.state.tape[self.state.pointer] = data[0]

    # ---------------- Tape ----------------
    def _tick(self) -> None:
        limit = self.config.max_steps
        if limit is not None and self.state.steps >= limit:
            raise step_limit(self.state.steps)
        self.state.steps += 1

    def _move(self, offset: int) -> None:
        state = self.state
        target = state.pointer + offset
        size = len(state.tape)
        if 0 <= target < size:
            state.pointer = target
            return
        policy = self.config.bounds
        if policy is BoundsPolicy.WRAP:
            state.pointer = target % size
        elif policy is BoundsPolicy.GROW and target >= size:
            self._grow(target + 1)
            state.pointer = target
        else:
            raise out_of_bounds(target, size)

    def _grow(self, min_size: int) -> None:
        old = self.state.tape
        new = np.zeros(max(min_size, 2 * len(old)), dtype=np.uint8)
        new[:len(old)] = old
        self.state.tape = new
        logger.debug("tape grown from %d to %d cells", len(old), len(new))

    def _add(self, delta: int) -> None:
        tape, p = self.state.tape, self.state.pointer
        tape[p] = (int(tape[p]) + delta) & 0xFF

    # ---------------- Engines ----------------
    def run(self, program: Sequence[Instruction]) -> int:
        """Execute ``program`` to completion; return the steps dispatched by this run."""
        start = self.state.steps
        if any(isinstance(n, Loop) for n in program):
            engine = "structured"
        elif self.config.engine == "jit":
            engine = "jit"
        elif self.config.engine == "flat" or is_flat(program):
            engine = "flat"
        else:
            engine = "structured"

        logger.debug("run: engine=%s, %d instructions", engine, len(program))
        try:
            if engine == "structured":
                self._run_block(program)
            elif engine == "flat":
                self._run_flat(program)
            else:
                self._run_jit(program)
        finally:
            flush = getattr(self.stdout, "flush", None)
            if flush is not None:
                flush()
            logger.debug("run finished: steps=%d pointer=%d", self.state.steps - start, self.state.pointer)
        return self.state.steps - start

    def _run_block(self, body: Sequence[Instruction]) -> None:
        for node in body:
            self.exec(node)

    def exec(self, node: Instruction) -> None:
        """Execute one structured instruction (a whole loop for ``Loop``)."""
        if isinstance(node, Loop):
            while True:
                self._tick()
                # re-read the tape each pass, GROW may have replaced it
                if self.state.tape[self.state.pointer] == 0:
                    break
                self._run_block(node.body)
            return
        self._tick()
        if isinstance(node, MoveRight):
            self._move(node.count)
        elif isinstance(node, MoveLeft):
            self._move(-node.count)
        elif isinstance(node, Increment):
            self._add(node.delta)
        elif isinstance(node, Decrement):
            self._add(-node.delta)
        elif isinstance(node, Output):
            self._output()
        elif isinstance(node, Input):
            self._input()
        else:
            raise TypeError(f"{node!r} is not a structured instruction")

    def _run_flat(self, program: Sequence[Instruction]) -> None:
        state = self.state
        pc = 0
        n = len(program)
        while pc < n:
            self._tick()
            node = program[pc]
            if isinstance(node, MoveRight):
                self._move(node.count)
            elif isinstance(node, MoveLeft):
                self._move(-node.count)
            elif isinstance(node, Increment):
                self._add(node.delta)
            elif isinstance(node, Decrement):
                self._add(-node.delta)
            elif isinstance(node, Output):
                self._output()
            elif isinstance(node, Input):
                self._input()
            elif isinstance(node, LoopBegin):
                if state.tape[state.pointer] == 0:
                    pc = node.match
            elif isinstance(node, LoopEnd):
                if state.tape[state.pointer] != 0:
                    pc = node.match
            else:
                raise TypeError(f"{node!r} is not a flat instruction")
            pc += 1

    def _run_jit(self, program: Sequence[Instruction]) -> None:
        state = self.state
        ops, args = jit.encode(program)
        wrap = self.config.bounds is BoundsPolicy.WRAP
        limit = self.config.max_steps
        pc = 0

        while True:
            budget = jit.UNLIMITED if limit is None else max(limit - state.steps, 0)
            pc, pointer, stop_reason, steps = jit.run_kernel(
                ops, args, state.tape, pc, state.pointer, wrap, budget
            )
            pc = int(pc)
            state.pointer = int(pointer)
            state.steps += int(steps)

            if stop_reason == jit.STOP_HALT:
                return
            if stop_reason == jit.STOP_LIMIT:
                raise step_limit(state.steps)

            self._tick()
            if stop_reason == jit.STOP_OUTPUT:
                self._output()
            elif stop_reason == jit.STOP_INPUT:
                self._input()
            else:
                offset = int(args[pc]) if ops[pc] == jit.OP_RIGHT else -int(args[pc])
                self._move(offset)
            pc += 1
