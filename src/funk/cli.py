"""Funk CLI — parse, check and run .funk files."""

from __future__ import annotations

import logging
import sys

from .check import check
from .errors import FunkRuntimeError, FunkTypeError, LexError, ParseError
from .parse import Parser
from .printer import to_source
from .runtime import Interpreter
from .tokens import tokenize

logger = logging.getLogger(__name__)


USAGE: str = """\
funk [OPTIONS] FILE

Run a Funk program.

Options:
  --dump-ast    Print the parsed AST before running
  --no-check    Skip the type checker
  --check-only  Type-check the program and stop
  --verbose     Log pass progress to stderr
  --help        Show this help message
"""


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    dump_ast = False
    no_check = False
    check_only = False
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--dump-ast":
            dump_ast = True
            i += 1
        elif arg == "--no-check":
            no_check = True
            i += 1
        elif arg == "--check-only":
            check_only = True
            i += 1
        elif arg == "--verbose":
            verbose = True
            i += 1
        elif arg.startswith("-"):
            print("funk: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("funk: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if filepath == "":
        print("funk: missing file argument", file=sys.stderr)
        return 2
    if no_check and check_only:
        print("funk: --no-check and --check-only are exclusive", file=sys.stderr)
        return 2

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(name)s: %(message)s",
        )

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("funk: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except OSError as e:
        print("funk: " + filepath + ": " + str(e), file=sys.stderr)
        return 1
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("funk: " + filepath + ": invalid utf-8", file=sys.stderr)
        return 1

    try:
        statements = Parser(tokenize(source)).parse_program()
    except LexError as e:
        print("funk: lex error: " + str(e), file=sys.stderr)
        return 1
    except ParseError as e:
        print("funk: parse error: " + str(e), file=sys.stderr)
        return 1
    logger.debug("parsed %s: %d statements", filepath, len(statements))

    if dump_ast:
        sys.stdout.write(to_source(statements))

    if not no_check:
        try:
            check(statements)
        except FunkTypeError as e:
            print("funk: type error: " + str(e), file=sys.stderr)
            return 1
    if check_only:
        return 0

    try:
        Interpreter(sys.stdout, sys.stdin).evaluate(statements)
    except FunkRuntimeError as e:
        print("funk: runtime error: " + str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
