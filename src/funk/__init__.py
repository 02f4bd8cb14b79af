"""Funk parser, type checker and interpreter — public API."""

from __future__ import annotations

import logging
from typing import TextIO

from .ast import Stmt
from .check import check as check_statements
from .errors import FunkError as FunkError
from .parse import ParseError as ParseError, Parser
from .printer import to_source
from .runtime import Interpreter
from .tokens import tokenize

logging.getLogger(__name__).addHandler(logging.NullHandler())


def parse(source: str) -> list[Stmt]:
    """Parse Funk source code into a list of statements."""
    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse_program()


def check(source: str) -> list[Stmt]:
    """Parse and type-check Funk source. Returns the checked statements."""
    statements = parse(source)
    check_statements(statements)
    return statements


def run(
    source: str,
    out: TextIO | None = None,
    inp: TextIO | None = None,
    typecheck: bool = True,
) -> None:
    """Parse, optionally type-check, and evaluate Funk source."""
    statements = check(source) if typecheck else parse(source)
    Interpreter(out, inp).evaluate(statements)


def dump(source: str) -> str:
    """Parse Funk source and render its AST."""
    return to_source(parse(source))
