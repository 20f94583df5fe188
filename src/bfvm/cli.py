from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional

from .api import CompileOptions, compile_string
from .compiler import emit
from .errors import BFVMError
from .machine import Machine
from .state import DEFAULT_TAPE_SIZE, ENGINES, BoundsPolicy, MachineConfig

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfvm",
        description="Compile and run tape-machine programs (the eight-command language).",
    )
    parser.add_argument("file", nargs="?", help="program file (default: built-in Hello World)")
    parser.add_argument("-e", "--execute", metavar="CODE", help="program text given on the command line")
    parser.add_argument("--engine", choices=ENGINES, default="structured", help="execution engine (default structured)")
    parser.add_argument("--tape-size", type=int, default=DEFAULT_TAPE_SIZE, help=f"cells on the tape (default {DEFAULT_TAPE_SIZE})")
    parser.add_argument(
        "--bounds",
        choices=[p.value for p in BoundsPolicy],
        default=BoundsPolicy.FAIL.value,
        help="what a pointer move off the tape does (default fail)",
    )
    parser.add_argument("--max-steps", type=int, default=None, help="abort after this many steps")
    parser.add_argument("--emit", action="store_true", help="print the compiled program as command text and exit")
    parser.add_argument("--time", action="store_true", help="report compile and execution time on stderr")
    parser.add_argument("--dump", type=int, default=0, metavar="N", help="print the first N cells after the run")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)5s %(name)s: %(message)s",
    )

    if args.execute is not None:
        source = args.execute
    elif args.file is not None:
        try:
            with open(args.file, "r", encoding="utf-8", errors="replace") as f:
                source = f.read()
        except OSError as e:
            print(f"bfvm: cannot read {args.file}: {e.strerror}", file=sys.stderr)
            return 1
    else:
        source = HELLO_WORLD

    try:
        config = MachineConfig(
            tape_size=args.tape_size,
            bounds=BoundsPolicy(args.bounds),
            engine=args.engine,
            max_steps=args.max_steps,
        )
        start = time.perf_counter()
        compiled = compile_string(source, options=CompileOptions(strategy=config.strategy))
        compile_ms = (time.perf_counter() - start) * 1000

        if args.emit:
            sys.stdout.write(emit(compiled.instructions) + "\n")
            return 0

        machine = Machine(config, stdin=sys.stdin.buffer, stdout=sys.stdout.buffer)
        start = time.perf_counter()
        try:
            machine.run(compiled.instructions)
        finally:
            run_ms = (time.perf_counter() - start) * 1000
            if args.time:
                print(f"Compilation took {compile_ms:.2f} ms", file=sys.stderr)
                print(f"Execution took {run_ms:.2f} ms ({machine.steps} steps)", file=sys.stderr)
    except BFVMError as e:
        print(e, file=sys.stderr)
        return 1
    except RecursionError:
        print("bfvm: loops nested too deeply for the structured engine; use --engine flat", file=sys.stderr)
        return 1

    if args.dump > 0:
        cells = machine.dump(0, args.dump)
        sys.stdout.write("\n")
        for i in range(0, len(cells), 8):
            sys.stdout.write(" ".join(f"{c:3d}" for c in cells[i:i + 8]) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
