from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, Tuple


class Token(Enum):
    MOVE_RIGHT = '>'
    MOVE_LEFT = '<'
    INCREMENT = '+'
    DECREMENT = '-'
    OUTPUT = '.'
    INPUT = ','
    LOOP_BEGIN = '['
    LOOP_END = ']'


COMMANDS: Dict[str, Token] = {t.value: t for t in Token}


def scan(source: Iterable[str]) -> Iterator[Tuple[int, Token]]:
    """Yield ``(offset, token)`` for every command character in ``source``."""
    for offset, ch in enumerate(source):
        tok = COMMANDS.get(ch)
        if tok is not None:
            yield offset, tok


def tokenize(source: Iterable[str]) -> Iterator[Token]:
    """Lazily yield the commands of ``source`` in order.

    Anything that is not one of the eight command characters is a comment
    and is dropped. Never raises.
    """
    for _, tok in scan(source):
        yield tok


def strip(source: Iterable[str]) -> str:
    return ''.join(tok.value for tok in tokenize(source))
