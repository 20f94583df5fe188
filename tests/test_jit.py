#!/usr/bin/env python3
"""
Tests for the numba flat-program kernel in isolation.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import numpy as np
import pytest

from bfvm import jit
from bfvm.compiler import compile_flat, compile_structured
from bfvm.lexer import tokenize


def encoded(code):
    return jit.encode(compile_flat(tokenize(code)))


def test_encode_layout():
    ops, args = encoded("+[->+<].")
    assert ops.tolist() == [
        jit.OP_ADD, jit.OP_OPEN, jit.OP_SUB, jit.OP_RIGHT,
        jit.OP_ADD, jit.OP_LEFT, jit.OP_CLOSE, jit.OP_OUT,
    ]
    assert args.tolist() == [1, 6, 1, 1, 1, 1, 1, 0]


def test_encode_rejects_structured_loops():
    with pytest.raises(TypeError):
        jit.encode(compile_structured(tokenize("[-]")))


def test_kernel_stops_before_output():
    ops, args = encoded("+[->+<].")
    memory = np.zeros(8, dtype=np.uint8)
    pc, pointer, stop_reason, steps = jit.run_kernel(ops, args, memory, 0, 0, False, jit.UNLIMITED)
    assert stop_reason == jit.STOP_OUTPUT
    assert pc == 7
    assert pointer == 0
    assert steps == 7
    assert memory[:2].tolist() == [0, 1]


def test_kernel_halts_at_end():
    ops, args = encoded("++>-")
    memory = np.zeros(4, dtype=np.uint8)
    pc, pointer, stop_reason, steps = jit.run_kernel(ops, args, memory, 0, 0, False, jit.UNLIMITED)
    assert stop_reason == jit.STOP_HALT
    assert (pc, pointer, steps) == (4, 1, 4)
    assert memory.tolist() == [2, 255, 0, 0]


def test_kernel_bounds():
    ops, args = encoded("<")
    memory = np.zeros(8, dtype=np.uint8)
    pc, pointer, stop_reason, _ = jit.run_kernel(ops, args, memory, 0, 0, False, jit.UNLIMITED)
    assert (pc, pointer, stop_reason) == (0, 0, jit.STOP_BOUNDS)

    pc, pointer, stop_reason, _ = jit.run_kernel(ops, args, memory, 0, 0, True, jit.UNLIMITED)
    assert (pc, pointer, stop_reason) == (1, 7, jit.STOP_HALT)


def test_kernel_step_budget():
    ops, args = encoded("+[]")
    memory = np.zeros(4, dtype=np.uint8)
    _, _, stop_reason, steps = jit.run_kernel(ops, args, memory, 0, 0, False, 50)
    assert stop_reason == jit.STOP_LIMIT
    assert steps == 50
