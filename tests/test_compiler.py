#!/usr/bin/env python3
"""
Tests for both compile strategies, the emitter and bracket errors.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from bfvm.compiler import (
    Decrement,
    Increment,
    Input,
    Loop,
    LoopBegin,
    LoopEnd,
    MoveLeft,
    MoveRight,
    Output,
    compile_flat,
    compile_structured,
    compile_tokens,
    count_tokens,
    emit,
    is_flat,
    max_depth,
)
from bfvm.errors import BFVMError, CompileError, UnmatchedLoopBegin, UnmatchedLoopEnd
from bfvm.lexer import strip, tokenize

HELLO = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)

PROGRAMS = [
    "",
    "+++>>--<.,",
    "+[->+<]",
    "[[][[]]]",
    ",[.[-],]",
    ">,[>,]<[.<]",
    HELLO,
    "comments [ are + fine ] -- here",
]


def structured(code):
    return compile_structured(tokenize(code))


def flat(code):
    return compile_flat(tokenize(code))


def test_structured_folds_runs():
    assert structured("+++>>--<.,") == [
        Increment(3),
        MoveRight(2),
        Decrement(2),
        MoveLeft(1),
        Output(),
        Input(),
    ]


def test_structured_fold_stops_at_different_command():
    assert structured("+-+") == [Increment(1), Decrement(1), Increment(1)]
    assert structured("+[+]+") == [Increment(1), Loop((Increment(1),)), Increment(1)]


def test_structured_loops_nest():
    assert structured("+[->+<]") == [
        Increment(1),
        Loop((Decrement(1), MoveRight(1), Increment(1), MoveLeft(1))),
    ]
    assert structured("[[]]") == [Loop((Loop(()),))]


def test_long_runs_keep_count_and_wrap_delta():
    program = structured("+" * 300)
    assert program == [Increment(300)]
    assert program[0].delta == 44
    assert Increment(256).delta == 0
    assert Decrement(257).delta == 1


def test_flat_keeps_one_instruction_per_token():
    assert flat("+++") == [Increment(1), Increment(1), Increment(1)]


def test_flat_resolves_matches():
    assert flat("+[-[>]]") == [
        Increment(1),
        LoopBegin(6),
        Decrement(1),
        LoopBegin(5),
        MoveRight(1),
        LoopEnd(3),
        LoopEnd(1),
    ]


@pytest.mark.parametrize("code", PROGRAMS)
def test_flat_matches_are_a_nesting_bijection(code):
    program = flat(code)
    pairs = []
    for i, node in enumerate(program):
        if isinstance(node, LoopBegin):
            partner = program[node.match]
            assert isinstance(partner, LoopEnd)
            assert partner.match == i
            assert node.match > i
            pairs.append((i, node.match))
        elif isinstance(node, LoopEnd):
            partner = program[node.match]
            assert isinstance(partner, LoopBegin)
            assert partner.match == i
    for a, b in pairs:
        for c, d in pairs:
            if a < c < b:
                assert d < b


@pytest.mark.parametrize("code", PROGRAMS)
def test_emit_recovers_commands(code):
    assert emit(structured(code)) == strip(code)
    assert emit(flat(code)) == strip(code)
    assert count_tokens(structured(code)) == len(strip(code))
    assert count_tokens(flat(code)) == len(strip(code))


def test_max_depth():
    assert max_depth(structured("[[][[]]]")) == 3
    assert max_depth(flat("[[][[]]]")) == 3
    assert max_depth(structured("+-")) == 0


def test_is_flat():
    assert is_flat(flat("[-]"))
    assert not is_flat(structured("[-]"))
    assert not is_flat(flat("+>"))


@pytest.mark.parametrize("compile_fn", [compile_structured, compile_flat])
@pytest.mark.parametrize(
    "code, error, index",
    [
        ("[", UnmatchedLoopBegin, 0),
        ("+[[", UnmatchedLoopBegin, 2),
        ("[[]", UnmatchedLoopBegin, 0),
        ("]", UnmatchedLoopEnd, 0),
        ("[]]", UnmatchedLoopEnd, 2),
        ("+]+[", UnmatchedLoopEnd, 1),
    ],
)
def test_unmatched_brackets(compile_fn, code, error, index):
    with pytest.raises(error) as excinfo:
        compile_fn(tokenize(code))
    assert excinfo.value.index == index
    assert isinstance(excinfo.value, CompileError)
    assert isinstance(excinfo.value, BFVMError)


def test_compile_tokens_dispatches_on_strategy():
    assert compile_tokens(tokenize("++"), "structured") == [Increment(2)]
    assert compile_tokens(tokenize("++"), "flat") == [Increment(1), Increment(1)]
    with pytest.raises(ValueError):
        compile_tokens(tokenize("++"), "tree")
