"""Funk diagnostics — one exception family for every pass."""

from __future__ import annotations


class FunkError(Exception):
    """Base error for scanning, parsing, checking and evaluation."""

    def __init__(self, msg: str, line: int | None = None):
        if line is None:
            super().__init__(msg)
        else:
            super().__init__(msg + " at line " + str(line))
        self.msg: str = msg
        self.line: int | None = line


class LexError(FunkError):
    """Bad character or unterminated string literal."""


class ParseError(FunkError):
    """Unexpected or missing token. Aborts the whole parse."""

    def __init__(self, msg: str, line: int | None = None, lexeme: str | None = None):
        super().__init__(msg, line)
        self.lexeme: str | None = lexeme


class FunkTypeError(FunkError):
    """Static type error reported by the checker."""


class FunkRuntimeError(FunkError):
    """Runtime fault. Fatal to evaluation."""


class UndefinedVariable(FunkRuntimeError):
    """Lookup or assignment of a name bound nowhere in the scope chain."""

    def __init__(self, name: str, line: int | None = None):
        super().__init__("undefined variable '" + name + "'", line)
        self.name: str = name


class TypeMismatch(FunkRuntimeError):
    """Operand kinds not accepted by an operator or built-in."""


class ArityMismatch(FunkRuntimeError):
    """Call with the wrong number of arguments."""


class IndexOutOfRange(FunkRuntimeError):
    """List or string index outside the valid range."""


class InvalidKey(FunkRuntimeError):
    """Record field read that does not exist."""


class InvalidArgument(FunkRuntimeError):
    """Built-in argument of the right kind but an unusable value."""
