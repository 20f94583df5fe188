"""numba-compiled execution of flat programs.

The flat program is encoded into two parallel ``int64`` arrays (opcode and
argument) so the dispatch loop can run inside ``@njit``. The kernel never
does I/O and never resizes the tape: it stops and reports why, and the caller
services the request and resumes at the returned program counter.
"""
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
from numba import njit

from .compiler import (
    Decrement,
    Increment,
    Input,
    Instruction,
    LoopBegin,
    LoopEnd,
    MoveLeft,
    MoveRight,
    Output,
)

OP_RIGHT = 0
OP_LEFT = 1
OP_ADD = 2
OP_SUB = 3
OP_OUT = 4
OP_IN = 5
OP_OPEN = 6
OP_CLOSE = 7

STOP_HALT = 0  # ran off the end of the program
STOP_OUTPUT = 1  # pc is at an Output
STOP_INPUT = 2  # pc is at an Input
STOP_BOUNDS = 3  # pc is at a move that leaves the tape; pointer unchanged
STOP_LIMIT = 4  # step budget used up

UNLIMITED = np.iinfo(np.int64).max


def encode(program: Sequence[Instruction]) -> Tuple[np.ndarray, np.ndarray]:
    n = len(program)
    ops = np.empty(n, dtype=np.int64)
    args = np.zeros(n, dtype=np.int64)
    for i, node in enumerate(program):
        if isinstance(node, MoveRight):
            ops[i], args[i] = OP_RIGHT, node.count
        elif isinstance(node, MoveLeft):
            ops[i], args[i] = OP_LEFT, node.count
        elif isinstance(node, Increment):
            ops[i], args[i] = OP_ADD, node.delta
        elif isinstance(node, Decrement):
            ops[i], args[i] = OP_SUB, node.delta
        elif isinstance(node, Output):
            ops[i] = OP_OUT
        elif isinstance(node, Input):
            ops[i] = OP_IN
        elif isinstance(node, LoopBegin):
            ops[i], args[i] = OP_OPEN, node.match
        elif isinstance(node, LoopEnd):
            ops[i], args[i] = OP_CLOSE, node.match
        else:
            raise TypeError(f"cannot encode {node!r} for the flat kernel")
    return ops, args


@njit(cache=True)
def run_kernel(ops, args, memory, pc, pointer, wrap, max_steps):
    """Execute from ``pc`` until a stop condition.

    Returns ``(pc, pointer, stop_reason, steps)``.
    """
    mem_len = len(memory)
    prog_len = len(ops)
    steps = 0
    stop_reason = STOP_HALT

    while pc < prog_len:
        if steps >= max_steps:
            stop_reason = STOP_LIMIT
            break
        op = ops[pc]

        if op == OP_RIGHT or op == OP_LEFT:
            if op == OP_RIGHT:
                target = pointer + args[pc]
            else:
                target = pointer - args[pc]
            if target < 0 or target >= mem_len:
                if wrap:
                    target = target % mem_len
                else:
                    stop_reason = STOP_BOUNDS
                    break
            pointer = target
        elif op == OP_ADD:
            memory[pointer] = (memory[pointer] + args[pc]) & 255
        elif op == OP_SUB:
            memory[pointer] = (memory[pointer] - args[pc]) & 255
        elif op == OP_OUT:
            stop_reason = STOP_OUTPUT
            break
        elif op == OP_IN:
            stop_reason = STOP_INPUT
            break
        elif op == OP_OPEN:
            if memory[pointer] == 0:
                pc = args[pc]
        elif op == OP_CLOSE:
            if memory[pointer] != 0:
                pc = args[pc]

        pc += 1
        steps += 1

    return pc, pointer, stop_reason, steps
