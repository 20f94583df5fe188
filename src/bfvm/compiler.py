from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .errors import unmatched_begin, unmatched_end
from .lexer import Token

logger = logging.getLogger(__name__)

CELL_SIZE = 256

STRUCTURED = "structured"
FLAT = "flat"
STRATEGIES = (STRUCTURED, FLAT)


# ---------------- Instructions ----------------
@dataclass(frozen=True)
class MoveRight:
    count: int = 1


@dataclass(frozen=True)
class MoveLeft:
    count: int = 1


@dataclass(frozen=True)
class Increment:
    count: int = 1  # raw run length; the cell only sees ``delta``

    @property
    def delta(self) -> int:
        return self.count % CELL_SIZE


@dataclass(frozen=True)
class Decrement:
    count: int = 1

    @property
    def delta(self) -> int:
        return self.count % CELL_SIZE


@dataclass(frozen=True)
class Output:
    pass


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class Loop:
    body: Tuple["Instruction", ...]


@dataclass(frozen=True)
class LoopBegin:
    match: int  # index of the paired LoopEnd


@dataclass(frozen=True)
class LoopEnd:
    match: int  # index of the paired LoopBegin


Instruction = Union[MoveRight, MoveLeft, Increment, Decrement, Output, Input, Loop, LoopBegin, LoopEnd]

_FOLDABLE = {
    Token.MOVE_RIGHT: MoveRight,
    Token.MOVE_LEFT: MoveLeft,
    Token.INCREMENT: Increment,
    Token.DECREMENT: Decrement,
}

_SIMPLE = {
    Token.OUTPUT: Output,
    Token.INPUT: Input,
}


# ---------------- Structured form ----------------
class _Cursor:
    def __init__(self, tokens: Iterable[Token]):
        self.tokens: List[Token] = list(tokens)
        self.pos = 0

    def next(self) -> Optional[Token]:
        if self.pos >= len(self.tokens):
            return None
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def take_run(self, target: Token) -> int:
        """Consume the tokens equal to ``target`` that follow; return how many."""
        start = self.pos
        while self.pos < len(self.tokens) and self.tokens[self.pos] is target:
            self.pos += 1
        return self.pos - start


def _pass(cursor: _Cursor, open_index: Optional[int]) -> List[Instruction]:
    out: List[Instruction] = []
    while True:
        tok = cursor.next()
        if tok is None:
            if open_index is not None:
                raise unmatched_begin(open_index)
            return out
        if tok in _FOLDABLE:
            out.append(_FOLDABLE[tok](1 + cursor.take_run(tok)))
        elif tok in _SIMPLE:
            out.append(_SIMPLE[tok]())
        elif tok is Token.LOOP_BEGIN:
            out.append(Loop(tuple(_pass(cursor, cursor.pos - 1))))
        else:
            if open_index is None:
                raise unmatched_end(cursor.pos - 1)
            return out


def compile_structured(tokens: Iterable[Token]) -> List[Instruction]:
    """Compile tokens into a tree of run-length folded instructions.

    Consecutive ``> < + -`` collapse into one instruction carrying the run
    length, and each bracketed region becomes a ``Loop`` owning its body.
    Raises ``UnmatchedLoopBegin``/``UnmatchedLoopEnd`` for bad nesting.
    """
    program = _pass(_Cursor(tokens), None)
    logger.debug("structured compile: %d top-level instructions, depth %d", len(program), max_depth(program))
    return program


# ---------------- Flat form ----------------
def compile_flat(tokens: Iterable[Token]) -> List[Instruction]:
    """Compile tokens one-to-one, resolving every bracket to its partner's index."""
    out: List[Instruction] = []
    stack: List[int] = []

    for pos, tok in enumerate(tokens):
        if tok in _FOLDABLE:
            out.append(_FOLDABLE[tok](1))
        elif tok in _SIMPLE:
            out.append(_SIMPLE[tok]())
        elif tok is Token.LOOP_BEGIN:
            stack.append(pos)
            out.append(LoopBegin(-1))
        else:
            if not stack:
                raise unmatched_end(pos)
            start = stack.pop()
            out[start] = LoopBegin(pos)
            out.append(LoopEnd(start))

    if stack:
        raise unmatched_begin(stack[-1])
    logger.debug("flat compile: %d instructions", len(out))
    return out


def compile_tokens(tokens: Iterable[Token], strategy: str = STRUCTURED) -> List[Instruction]:
    if strategy == STRUCTURED:
        return compile_structured(tokens)
    if strategy == FLAT:
        return compile_flat(tokens)
    raise ValueError(f"unknown compile strategy: {strategy!r}")


def is_flat(program: Sequence[Instruction]) -> bool:
    """True when ``program`` contains flat bracket instructions.

    Bracket-free programs are valid in both forms and report False.
    """
    return any(isinstance(n, (LoopBegin, LoopEnd)) for n in program)


# ---------------- Emit + counts ----------------
def emit(program: Sequence[Instruction]) -> str:
    """Render either form back to command text."""
    out: List[str] = []
    for n in program:
        if isinstance(n, MoveRight):
            out.append(">" * n.count)
        elif isinstance(n, MoveLeft):
            out.append("<" * n.count)
        elif isinstance(n, Increment):
            out.append("+" * n.count)
        elif isinstance(n, Decrement):
            out.append("-" * n.count)
        elif isinstance(n, Output):
            out.append(".")
        elif isinstance(n, Input):
            out.append(",")
        elif isinstance(n, Loop):
            out.append("[" + emit(n.body) + "]")
        elif isinstance(n, LoopBegin):
            out.append("[")
        elif isinstance(n, LoopEnd):
            out.append("]")
    return "".join(out)


def count_tokens(program: Sequence[Instruction]) -> int:
    """Number of source commands the program was compiled from."""
    c = 0
    for n in program:
        if isinstance(n, (MoveRight, MoveLeft, Increment, Decrement)):
            c += n.count
        elif isinstance(n, Loop):
            c += 2 + count_tokens(n.body)
        else:
            c += 1
    return c


def max_depth(program: Sequence[Instruction]) -> int:
    deepest = 0
    depth = 0
    for n in program:
        if isinstance(n, Loop):
            deepest = max(deepest, 1 + max_depth(n.body))
        elif isinstance(n, LoopBegin):
            depth += 1
            deepest = max(deepest, depth)
        elif isinstance(n, LoopEnd):
            depth -= 1
    return deepest
