from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .errors import ConfigError

DEFAULT_TAPE_SIZE = 300000

ENGINES = ("structured", "flat", "jit")


class BoundsPolicy(Enum):
    FAIL = "fail"
    WRAP = "wrap"
    GROW = "grow"


@dataclass(frozen=True)
class MachineConfig:
    tape_size: int = DEFAULT_TAPE_SIZE
    bounds: BoundsPolicy = BoundsPolicy.FAIL
    engine: str = "structured"
    max_steps: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.bounds, str):
            try:
                object.__setattr__(self, "bounds", BoundsPolicy(self.bounds))
            except ValueError:
                raise ConfigError(message=f"unknown bounds policy: {self.bounds!r}") from None
        if not isinstance(self.bounds, BoundsPolicy):
            raise ConfigError(message=f"bounds must be a BoundsPolicy, got {self.bounds!r}")
        if self.tape_size < 1:
            raise ConfigError(message=f"tape_size must be positive, got {self.tape_size}")
        if self.engine not in ENGINES:
            raise ConfigError(message=f"unknown engine: {self.engine!r} (expected one of {', '.join(ENGINES)})")
        if self.max_steps is not None and self.max_steps < 0:
            raise ConfigError(message=f"max_steps must be >= 0, got {self.max_steps}")

    @property
    def strategy(self) -> str:
        return "structured" if self.engine == "structured" else "flat"


@dataclass
class MachineState:
    tape: np.ndarray
    pointer: int = 0
    steps: int = 0

    @classmethod
    def fresh(cls, tape_size: int) -> "MachineState":
        return cls(tape=np.zeros(tape_size, dtype=np.uint8))
