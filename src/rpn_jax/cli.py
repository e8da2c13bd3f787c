"""Command-line front end: an interactive REPL or a one-shot file runner."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from .errors import SourceError
from .interpreter import Interpreter
from .values import IntegerPrecision

BANNER = "rpn-jax REPL\nType 'exit' or press Ctrl+D to quit."


def _read_line(prompt: str, stdin: TextIO, stdout: TextIO) -> str:
    stdout.write(prompt)
    stdout.flush()
    line = stdin.readline()
    if line == "":
        raise EOFError
    return line


def run_file(interpreter: Interpreter, path: str, *, stdout: TextIO, stderr: TextIO) -> int:
    """Run a whole file once; returns the process exit status."""
    try:
        source = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: cannot read {path}: {exc}", file=stderr)
        return 2
    outcome = interpreter.run_with_errors(source)
    if not outcome.ok:
        print(outcome.format_error(), file=stderr)
        return 1
    if outcome.stack:
        print(outcome.format_stack(), file=stdout)
    return 0


def repl(interpreter: Interpreter, *, stdin: TextIO, stdout: TextIO, stderr: TextIO) -> int:
    """Feed lines to the interpreter until EOF or ``exit``.

    Stack and dictionary persist across failed lines. Input that ends inside
    a block, string or comment is held and continued on the next line.
    """
    print(BANNER, file=stdout)
    failed = False
    pending = ""
    while True:
        try:
            line = _read_line(".. " if pending else ">> ", stdin, stdout)
        except EOFError:
            print(file=stdout)
            break
        if not pending and line.strip() == "exit":
            break
        if not pending and not line.strip():
            continue

        source = pending + line
        outcome = interpreter.run_with_errors(source)
        if isinstance(outcome.error, SourceError) and outcome.error.incomplete:
            pending = source
            continue
        pending = ""

        if not outcome.ok:
            failed = True
            print(outcome.format_error(), file=stderr)
            continue
        print(outcome.format_stack(), file=stdout)

    if pending:
        # EOF inside an unfinished block still counts as a failed run.
        outcome = interpreter.run_with_errors(pending)
        print(outcome.format_error(), file=stderr)
        failed = True
    return 1 if failed else 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rpn-jax", description=__doc__)
    parser.add_argument("file", nargs="?", help="script to run; starts the REPL when omitted")
    parser.add_argument(
        "--precision",
        choices=[p.value for p in IntegerPrecision],
        default=None,
        help="integer precision for this interpreter (default: RPN_JAX_INTEGER_PRECISION or arbitrary)",
    )
    parser.add_argument("--max-depth", type=int, default=None, help="maximum nested block invocations")
    parser.add_argument("-v", "--verbose", action="store_true", help="log interpreter debug records to stderr")
    return parser


def main(
    argv: list[str] | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    args = build_arg_parser().parse_args(argv)
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=stderr, format="%(levelname)s %(name)s: %(message)s")

    try:
        interpreter = Interpreter(args.precision, max_depth=args.max_depth)
    except ValueError as exc:
        print(f"Error: {exc}", file=stderr)
        return 2

    if args.file is not None:
        return run_file(interpreter, args.file, stdout=stdout, stderr=stderr)
    try:
        return repl(interpreter, stdin=stdin, stdout=stdout, stderr=stderr)
    except KeyboardInterrupt:
        print("\nExiting.", file=stdout)
        return 0
