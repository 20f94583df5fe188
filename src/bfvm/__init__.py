
from .api import CompileOptions, CompileResult, RunResult, compile_file, compile_string, run_file, run_string
from .compiler import compile_flat, compile_structured, emit
from .errors import (
    BFVMError,
    CompileError,
    ConfigError,
    MachineError,
    PointerOutOfBounds,
    StepLimitExceeded,
    UnmatchedLoopBegin,
    UnmatchedLoopEnd,
)
from .lexer import Token, tokenize
from .machine import Machine
from .state import BoundsPolicy, MachineConfig

__all__ = [
    'Token',
    'tokenize',
    'compile_structured',
    'compile_flat',
    'emit',
    'Machine',
    'MachineConfig',
    'BoundsPolicy',
    'CompileOptions',
    'CompileResult',
    'RunResult',
    'compile_string',
    'compile_file',
    'run_string',
    'run_file',
    'BFVMError',
    'CompileError',
    'ConfigError',
    'MachineError',
    'PointerOutOfBounds',
    'StepLimitExceeded',
    'UnmatchedLoopBegin',
    'UnmatchedLoopEnd',
]
