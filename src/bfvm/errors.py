from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


def _build_context(lines: List[str], line_no_1: int, column_1: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"       | {' ' * (column_1 - 1)}^")
    return "\n".join(out)


def _hint_for(kind: str) -> Optional[str]:
    if kind == 'begin':
        return 'Every "[" needs a matching "]" later in the program.'
    if kind == 'end':
        return 'This "]" closes a loop that was never opened; check for a missing "[" or an extra "]".'
    return None


def locate(source: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of a character offset."""
    line = source.count('\n', 0, offset) + 1
    column = offset - (source.rfind('\n', 0, offset) + 1) + 1
    return line, column


@dataclass
class BFVMError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(BFVMError, ValueError):
    pass


@dataclass
class CompileError(BFVMError):
    index: int
    offset: Optional[int] = None
    line: Optional[int] = None
    column: Optional[int] = None
    context: str = ""


@dataclass
class UnmatchedLoopBegin(CompileError):
    pass


@dataclass
class UnmatchedLoopEnd(CompileError):
    pass


@dataclass
class MachineError(BFVMError):
    # bytes the program wrote before the fault, filled in by run_string
    output = b""


@dataclass
class PointerOutOfBounds(MachineError):
    pointer: int
    tape_size: int


@dataclass
class StepLimitExceeded(MachineError):
    steps: int


def unmatched_begin(index: int) -> UnmatchedLoopBegin:
    return UnmatchedLoopBegin(message=f"CompileError: unmatched '[' (command {index})", index=index)


def unmatched_end(index: int) -> UnmatchedLoopEnd:
    return UnmatchedLoopEnd(message=f"CompileError: unmatched ']' (command {index})", index=index)


def make_compile_error(err: CompileError, *, source: str, offset: int) -> CompileError:
    """Rebuild a compile error with the source position of its command."""
    line, column = locate(source, offset)
    ctx = _build_context(source.split('\n'), line, column)
    kind = 'begin' if isinstance(err, UnmatchedLoopBegin) else 'end'
    bracket = '[' if kind == 'begin' else ']'
    hint = _hint_for(kind)
    hint_block = f"\nHint: {hint}" if hint else ""
    return type(err)(
        message=f"CompileError: unmatched '{bracket}' (line {line}, column {column})\n{ctx}{hint_block}",
        index=err.index,
        offset=offset,
        line=line,
        column=column,
        context=ctx,
    )


def out_of_bounds(pointer: int, tape_size: int) -> PointerOutOfBounds:
    return PointerOutOfBounds(
        message=f"PointerOutOfBounds: pointer moved to {pointer}, tape holds cells 0..{tape_size - 1}",
        pointer=pointer,
        tape_size=tape_size,
    )


def step_limit(steps: int) -> StepLimitExceeded:
    return StepLimitExceeded(message=f"StepLimitExceeded: stopped after {steps} steps", steps=steps)
