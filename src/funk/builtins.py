"""Funk built-in functions, seeded into the global scope of both passes."""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING

from .errors import InvalidArgument, TypeMismatch
from .values import (
    VBuiltIn,
    VIter,
    VList,
    VNumber,
    VString,
    Value,
    NIL,
)

if TYPE_CHECKING:
    from .runtime import Interpreter


NUMBER_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?")


# ============================================================
# Argument helpers
# ============================================================


def _expect_number(name: str, v: Value, line: int) -> float:
    if not isinstance(v, VNumber):
        raise TypeMismatch(name + " expects a number, got " + v.type_name(), line)
    return v.value


def _expect_bound(name: str, v: Value, line: int) -> int:
    """Non-negative integral number, as used by the range built-ins."""
    n = _expect_number(name, v, line)
    if not n.is_integer() or n < 0:
        raise InvalidArgument(
            name + " expects a non-negative integer, got " + v.to_string(), line
        )
    return int(n)


def _numbers(values: range) -> VIter:
    return VIter([VNumber(float(i)) for i in values])


# ============================================================
# Built-ins
# ============================================================


def _clock(interp: Interpreter, args: list[Value], line: int) -> Value:
    return VNumber(float(time.time_ns() // 1_000_000))


def _println(interp: Interpreter, args: list[Value], line: int) -> Value:
    interp.write("".join(a.to_string() for a in args) + "\n")
    return NIL


def _input(interp: Interpreter, args: list[Value], line: int) -> Value:
    text = interp.inp.readline()
    if text.endswith("\n"):
        text = text[:-1]
    if text.endswith("\r"):
        text = text[:-1]
    return VString(text)


def _iter(interp: Interpreter, args: list[Value], line: int) -> Value:
    v = args[0]
    if isinstance(v, (VList, VIter)):
        return VIter(list(v.elements))
    if isinstance(v, VString):
        return VIter([VString(c) for c in v.value])
    raise TypeMismatch("iter expects a list or string, got " + v.type_name(), line)


def _range_to(interp: Interpreter, args: list[Value], line: int) -> Value:
    return _numbers(range(_expect_bound("range_to", args[0], line)))


def _range(interp: Interpreter, args: list[Value], line: int) -> Value:
    lo = _expect_bound("range", args[0], line)
    hi = _expect_bound("range", args[1], line)
    if lo > hi:
        raise InvalidArgument("range expects min <= max", line)
    return _numbers(range(lo, hi))


def _range_skip(interp: Interpreter, args: list[Value], line: int) -> Value:
    lo = _expect_bound("range_skip", args[0], line)
    hi = _expect_bound("range_skip", args[1], line)
    step = _expect_bound("range_skip", args[2], line)
    if lo > hi:
        raise InvalidArgument("range_skip expects min <= max", line)
    if step == 0:
        raise InvalidArgument("range_skip expects a positive step", line)
    return _numbers(range(lo, hi, step))


def _len(interp: Interpreter, args: list[Value], line: int) -> Value:
    v = args[0]
    if isinstance(v, (VList, VIter)):
        return VNumber(float(len(v.elements)))
    if isinstance(v, VString):
        return VNumber(float(len(v.value)))
    raise TypeMismatch("len expects a list, string or iter, got " + v.type_name(), line)


def _push(interp: Interpreter, args: list[Value], line: int) -> Value:
    target = args[0]
    if not isinstance(target, VList):
        raise TypeMismatch("push expects a list, got " + target.type_name(), line)
    target.elements.append(args[1])
    return target


def _to_number(interp: Interpreter, args: list[Value], line: int) -> Value:
    v = args[0]
    if isinstance(v, VNumber):
        return v
    if not isinstance(v, VString):
        raise TypeMismatch("to_number expects a string, got " + v.type_name(), line)
    text = v.value.strip()
    if NUMBER_RE.fullmatch(text) is None:
        raise InvalidArgument("cannot convert '" + v.value + "' to a number", line)
    return VNumber(float(text))


def _type_of(interp: Interpreter, args: list[Value], line: int) -> Value:
    return VString(args[0].type_name())


BUILTINS: dict[str, VBuiltIn] = {
    b.name: b
    for b in (
        VBuiltIn("clock", 0, _clock),
        VBuiltIn("println", None, _println),
        VBuiltIn("input", 0, _input),
        VBuiltIn("iter", 1, _iter),
        VBuiltIn("range_to", 1, _range_to),
        VBuiltIn("range", 2, _range),
        VBuiltIn("range_skip", 3, _range_skip),
        VBuiltIn("len", 1, _len),
        VBuiltIn("push", 2, _push),
        VBuiltIn("to_number", 1, _to_number),
        VBuiltIn("type_of", 1, _type_of),
    )
}
