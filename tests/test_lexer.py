#!/usr/bin/env python3
"""
Tests for the command lexer.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfvm.lexer import Token, scan, strip, tokenize


def test_every_command_character():
    """Each of the eight characters maps to its own token, in order."""
    assert list(tokenize("><+-.,[]")) == [
        Token.MOVE_RIGHT,
        Token.MOVE_LEFT,
        Token.INCREMENT,
        Token.DECREMENT,
        Token.OUTPUT,
        Token.INPUT,
        Token.LOOP_BEGIN,
        Token.LOOP_END,
    ]


def test_comments_are_dropped():
    assert list(tokenize("add one + then take one - # done")) == [Token.INCREMENT, Token.DECREMENT]
    assert list(tokenize("no commands here\n\tat all ✓")) == []


def test_tokenize_is_lazy_and_restartable():
    source = "+[>]"
    first = tokenize(source)
    assert iter(first) is first
    assert list(first) == list(tokenize(source))


def test_scan_reports_offsets():
    assert list(scan("x[ ]\n.")) == [(1, Token.LOOP_BEGIN), (3, Token.LOOP_END), (5, Token.OUTPUT)]


def test_strip():
    assert strip("Hello, World! [-]") == ",![-]"
    assert strip("") == ""
