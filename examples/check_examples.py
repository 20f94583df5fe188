#!/usr/bin/env python3

import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfvm.api import run_file
from bfvm.state import ENGINES, MachineConfig

HERE = os.path.abspath(os.path.dirname(__file__))

# name -> (stdin, expected stdout)
EXPECTED = {
    "hello.b": (b"", b"Hello World!\n"),
    "cat.b": (b"meow\n", b"meow\n"),
    "reverse.b": (b"stressed", b"desserts"),
}


def main() -> int:
    failures = 0
    for name, (stdin, expected) in sorted(EXPECTED.items()):
        for engine in ENGINES:
            result = run_file(os.path.join(HERE, name), stdin=stdin, config=MachineConfig(engine=engine))
            ok = result.output == expected
            failures += not ok
            mark = "✓" if ok else "✗"
            print(f"{mark} {name} [{engine}] {result.steps} steps")
            if not ok:
                print(f"    expected {expected!r}, got {result.output!r}")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
