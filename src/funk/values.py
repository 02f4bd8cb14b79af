"""Funk run-time values and their printed form."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import math
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .ast import FunctionDeclaration
    from .environment import Environment
    from .runtime import Interpreter


def format_number(n: float) -> str:
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    if n == 0:
        return "-0" if math.copysign(1.0, n) < 0 else "0"
    if n.is_integer():
        return str(int(n))
    # Shortest round-trip digits, spelled out without an exponent.
    return format(Decimal(repr(n)), "f")


class Value:
    """A run-time value."""

    def type_name(self) -> str:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError


@dataclass
class VNil(Value):
    def type_name(self) -> str:
        return "nil"

    def to_string(self) -> str:
        return "nil"


@dataclass
class VBool(Value):
    value: bool

    def type_name(self) -> str:
        return "boolean"

    def to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass
class VNumber(Value):
    value: float

    def type_name(self) -> str:
        return "number"

    def to_string(self) -> str:
        return format_number(self.value)


@dataclass
class VString(Value):
    value: str

    def type_name(self) -> str:
        return "string"

    def to_string(self) -> str:
        return self.value


@dataclass(eq=False)
class VBuiltIn(Value):
    """Native function. `arity` of None accepts any number of arguments."""

    name: str
    arity: int | None
    fn: Callable[[Interpreter, list[Value], int], Value]

    def type_name(self) -> str:
        return "builtin"

    def to_string(self) -> str:
        return "<builtin " + self.name + ">"


@dataclass(eq=False)
class VFunction(Value):
    """User function closing over the scope it was declared in."""

    declaration: FunctionDeclaration
    closure: Environment[Value]

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

    def type_name(self) -> str:
        return "function"

    def to_string(self) -> str:
        return "<funk " + self.name + ">"


@dataclass(eq=False)
class VList(Value):
    # Shared by reference; mutation is visible through every alias.
    elements: list[Value]

    def type_name(self) -> str:
        return "list"

    def to_string(self) -> str:
        return "[" + ", ".join(v.to_string() for v in self.elements) + "]"


@dataclass(eq=False)
class VIter(Value):
    """Materialized sequence produced by iter() and the range built-ins."""

    elements: list[Value]

    def type_name(self) -> str:
        return "iter"

    def to_string(self) -> str:
        return "iter[" + ", ".join(v.to_string() for v in self.elements) + "]"


@dataclass(eq=False)
class VRecord(Value):
    # Insertion ordered.
    fields: dict[str, Value]

    def type_name(self) -> str:
        return "record"

    def to_string(self) -> str:
        parts: list[str] = []
        for k, v in self.fields.items():
            parts.append(k + ":" + v.to_string())
        return "{" + ", ".join(parts) + "}"


NIL = VNil()
TRUE = VBool(True)
FALSE = VBool(False)


def value_eq(a: Value, b: Value) -> bool:
    """Structural equality. Values of different variants are never equal."""
    if type(a) is not type(b):
        return False
    if isinstance(a, VNil):
        return True
    if isinstance(a, (VBool, VNumber, VString)):
        return a.value == b.value  # type: ignore[attr-defined]
    if isinstance(a, (VList, VIter)):
        other = b.elements  # type: ignore[attr-defined]
        if len(a.elements) != len(other):
            return False
        return all(value_eq(x, y) for x, y in zip(a.elements, other))
    if isinstance(a, VRecord):
        other_fields = b.fields  # type: ignore[attr-defined]
        if a.fields.keys() != other_fields.keys():
            return False
        return all(value_eq(v, other_fields[k]) for k, v in a.fields.items())
    return a is b
