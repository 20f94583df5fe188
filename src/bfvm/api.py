from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .compiler import STRATEGIES, STRUCTURED, Instruction, compile_tokens
from .errors import CompileError, ConfigError, MachineError, make_compile_error
from .lexer import scan
from .machine import Machine
from .state import MachineConfig


@dataclass(frozen=True)
class CompileOptions:
    strategy: str = STRUCTURED

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ConfigError(message=f"unknown compile strategy: {self.strategy!r}")


@dataclass(frozen=True)
class CompileResult:
    instructions: List[Instruction]
    strategy: str
    token_count: int


@dataclass(frozen=True)
class RunResult:
    output: bytes
    pointer: int
    steps: int
    machine: Machine


def compile_string(source: str, *, options: Optional[CompileOptions] = None) -> CompileResult:
    strategy = STRUCTURED if options is None else options.strategy
    located = list(scan(source))
    try:
        program = compile_tokens((tok for _, tok in located), strategy)
    except CompileError as e:
        raise make_compile_error(e, source=source, offset=located[e.index][0]) from None
    return CompileResult(instructions=program, strategy=strategy, token_count=len(located))


def compile_file(path: str | Path, *, options: Optional[CompileOptions] = None, encoding: str = "utf-8") -> CompileResult:
    p = Path(path)
    return compile_string(p.read_text(encoding=encoding, errors="replace"), options=options)


def run_string(source: str, *, stdin: bytes = b"", config: Optional[MachineConfig] = None) -> RunResult:
    """Compile and run ``source`` with in-memory I/O.

    Compile errors are raised before anything executes. Machine errors
    propagate with the output written so far attached as ``output``.
    """
    config = config or MachineConfig()
    compiled = compile_string(source, options=CompileOptions(strategy=config.strategy))
    out = io.BytesIO()
    machine = Machine(config, stdin=io.BytesIO(stdin), stdout=out)
    try:
        steps = machine.run(compiled.instructions)
    except MachineError as e:
        e.output = out.getvalue()
        raise
    return RunResult(output=out.getvalue(), pointer=machine.pointer, steps=steps, machine=machine)


def run_file(
    path: str | Path,
    *,
    stdin: bytes = b"",
    config: Optional[MachineConfig] = None,
    encoding: str = "utf-8",
) -> RunResult:
    p = Path(path)
    return run_string(p.read_text(encoding=encoding, errors="replace"), stdin=stdin, config=config)
