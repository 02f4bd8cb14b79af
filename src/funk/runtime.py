"""Funk runtime — tree-walking evaluation of a parsed program.

Statement handlers return `(value, returning)`. When `returning` is set the
enclosing block, loop, `with` or `if` stops and hands the pair up unchanged;
only a function call consumes it. A pair that reaches the top level is a
`return` outside any function and is rejected.
"""

from __future__ import annotations

import logging
import math
import sys
from typing import TextIO

from .ast import (
    And,
    Assignment,
    Block,
    Call,
    Comparison,
    Equality,
    Expr,
    ExprVisitor,
    ExpressionStatement,
    Factor,
    For,
    FunctionDeclaration,
    IfExpression,
    IfStatement,
    Index,
    IndexAssignment,
    List,
    MapIndex,
    MapIndexAssignment,
    Or,
    Primary,
    PrintStatement,
    Record,
    Return,
    Stmt,
    StmtVisitor,
    Term,
    Unary,
    VariableDeclaration,
    WhileStatement,
    With,
)
from .builtins import BUILTINS
from .environment import Environment
from .errors import (
    ArityMismatch,
    FunkRuntimeError,
    IndexOutOfRange,
    InvalidKey,
    TypeMismatch,
)
from .limits import MAX_CALL_DEPTH, raise_recursion_limit
from .tokens import (
    TK_BANG,
    TK_BANG_EQUAL,
    TK_BOOLEAN,
    TK_EQUAL_EQUAL,
    TK_GREATER,
    TK_GREATER_EQUAL,
    TK_IDENT,
    TK_LESS,
    TK_LESS_EQUAL,
    TK_MINUS,
    TK_NIL,
    TK_NUMBER,
    TK_PLUS,
    TK_SLASH,
    TK_STAR,
    TK_STRING,
)
from .values import (
    FALSE,
    NIL,
    TRUE,
    VBool,
    VBuiltIn,
    VFunction,
    VIter,
    VList,
    VNumber,
    VRecord,
    VString,
    Value,
    value_eq,
)

logger = logging.getLogger(__name__)

Outcome = tuple[Value, bool]

NORMAL: Outcome = (NIL, False)


def _bool(b: bool) -> VBool:
    return TRUE if b else FALSE


def _divide(a: float, b: float) -> float:
    """IEEE division: x/0 is a signed infinity, 0/0 is NaN."""
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


class Interpreter(ExprVisitor[Value], StmtVisitor[Outcome]):
    def __init__(self, out: TextIO | None = None, inp: TextIO | None = None):
        self.out: TextIO = out if out is not None else sys.stdout
        self.inp: TextIO = inp if inp is not None else sys.stdin
        self.globals: Environment[Value] = Environment()
        for name, builtin in BUILTINS.items():
            self.globals.declare_global(name, builtin)
            logger.debug("registered builtin %s", name)
        self.env: Environment[Value] = self.globals
        self.depth: int = 0
        raise_recursion_limit()

    # ── Helpers ──────────────────────────────────────────────

    def write(self, text: str) -> None:
        self.out.write(text)

    def evaluate(self, statements: list[Stmt]) -> Value:
        """Run a whole program in the global scope."""
        logger.debug("evaluating %d statements", len(statements))
        for stmt in statements:
            try:
                _, returning = self.execute(stmt)
            except RecursionError:
                raise FunkRuntimeError("expression nested too deeply", stmt.line) from None
            if returning:
                raise FunkRuntimeError("cannot return from top-level code", stmt.line)
        return NIL

    def execute(self, stmt: Stmt) -> Outcome:
        return stmt.accept(self)

    def eval_expr(self, expr: Expr) -> Value:
        return expr.accept(self)

    def execute_in(self, env: Environment[Value], statements: tuple[Stmt, ...]) -> Outcome:
        """Run statements with `env` active, restoring the entry scope on any exit."""
        previous = self.env
        self.env = env
        try:
            for stmt in statements:
                outcome = self.execute(stmt)
                if outcome[1]:
                    return outcome
            return NORMAL
        finally:
            self.env = previous

    def truthy(self, v: Value, what: str, line: int) -> bool:
        if not isinstance(v, VBool):
            raise TypeMismatch(what + " expects a boolean, got " + v.type_name(), line)
        return v.value

    def number(self, v: Value, op: str, line: int) -> float:
        if not isinstance(v, VNumber):
            raise TypeMismatch(
                "operator '" + op + "' expects a number, got " + v.type_name(), line
            )
        return v.value

    def call(self, callee: Value, args: list[Value], line: int) -> Value:
        if isinstance(callee, VBuiltIn):
            if callee.arity is not None and len(args) != callee.arity:
                raise ArityMismatch(
                    callee.name
                    + " expects "
                    + str(callee.arity)
                    + " arguments, got "
                    + str(len(args)),
                    line,
                )
            return callee.fn(self, args, line)
        if isinstance(callee, VFunction):
            if len(args) != callee.arity:
                raise ArityMismatch(
                    callee.name
                    + " expects "
                    + str(callee.arity)
                    + " arguments, got "
                    + str(len(args)),
                    line,
                )
            if self.depth >= MAX_CALL_DEPTH:
                raise FunkRuntimeError("maximum call depth exceeded in " + callee.name, line)
            logger.debug("call %s/%d at line %d", callee.name, callee.arity, line)
            env = Environment.enclose(callee.closure)
            for param, arg in zip(callee.declaration.params, args):
                env.declare(param.lexeme, arg)
            self.depth += 1
            try:
                value, returning = self.execute_in(env, callee.declaration.body.statements)
            except RecursionError:
                raise FunkRuntimeError(
                    "maximum call depth exceeded in " + callee.name, line
                ) from None
            finally:
                self.depth -= 1
            return value if returning else NIL
        raise TypeMismatch("cannot call a value of type " + callee.type_name(), line)

    # ── Expressions ──────────────────────────────────────────

    def visit_primary(self, expr: Primary) -> Value:
        tok = expr.token
        if tok.kind == TK_NUMBER:
            return VNumber(float(tok.lexeme))
        if tok.kind == TK_STRING:
            return VString(tok.lexeme)
        if tok.kind == TK_BOOLEAN:
            return _bool(tok.lexeme == "true")
        if tok.kind == TK_NIL:
            return NIL
        if tok.kind == TK_IDENT:
            return self.env.get(tok.lexeme, expr.line)
        raise FunkRuntimeError("unexpected literal '" + tok.lexeme + "'", expr.line)

    def visit_unary(self, expr: Unary) -> Value:
        operand = self.eval_expr(expr.operand)
        if expr.operator.kind == TK_MINUS:
            return VNumber(-self.number(operand, "-", expr.line))
        if expr.operator.kind == TK_BANG:
            return _bool(not self.truthy(operand, "operator '!'", expr.line))
        raise FunkRuntimeError("unknown unary operator '" + expr.operator.lexeme + "'", expr.line)

    def visit_factor(self, expr: Factor) -> Value:
        left = self.eval_expr(expr.left)
        right = self.eval_expr(expr.right)
        op = expr.operator.lexeme
        a = self.number(left, op, expr.line)
        b = self.number(right, op, expr.line)
        if expr.operator.kind == TK_STAR:
            return VNumber(a * b)
        if expr.operator.kind == TK_SLASH:
            return VNumber(_divide(a, b))
        raise FunkRuntimeError("unknown operator '" + op + "'", expr.line)

    def visit_term(self, expr: Term) -> Value:
        left = self.eval_expr(expr.left)
        right = self.eval_expr(expr.right)
        op = expr.operator.lexeme
        if expr.operator.kind == TK_PLUS:
            if isinstance(left, VNumber) and isinstance(right, VNumber):
                return VNumber(left.value + right.value)
            if isinstance(left, VString) and isinstance(right, VString):
                return VString(left.value + right.value)
            raise TypeMismatch(
                "operator '+' cannot be applied to "
                + left.type_name()
                + " and "
                + right.type_name(),
                expr.line,
            )
        if expr.operator.kind == TK_MINUS:
            return VNumber(self.number(left, op, expr.line) - self.number(right, op, expr.line))
        raise FunkRuntimeError("unknown operator '" + op + "'", expr.line)

    def visit_comparison(self, expr: Comparison) -> Value:
        left = self.eval_expr(expr.left)
        right = self.eval_expr(expr.right)
        op = expr.operator.lexeme
        a = self.number(left, op, expr.line)
        b = self.number(right, op, expr.line)
        kind = expr.operator.kind
        if kind == TK_LESS:
            return _bool(a < b)
        if kind == TK_LESS_EQUAL:
            return _bool(a <= b)
        if kind == TK_GREATER:
            return _bool(a > b)
        if kind == TK_GREATER_EQUAL:
            return _bool(a >= b)
        raise FunkRuntimeError("unknown operator '" + op + "'", expr.line)

    def visit_equality(self, expr: Equality) -> Value:
        left = self.eval_expr(expr.left)
        right = self.eval_expr(expr.right)
        if expr.operator.kind == TK_EQUAL_EQUAL:
            return _bool(value_eq(left, right))
        if expr.operator.kind == TK_BANG_EQUAL:
            return _bool(not value_eq(left, right))
        raise FunkRuntimeError("unknown operator '" + expr.operator.lexeme + "'", expr.line)

    def visit_and(self, expr: And) -> Value:
        if not self.truthy(self.eval_expr(expr.left), "operator 'and'", expr.line):
            return FALSE
        return _bool(self.truthy(self.eval_expr(expr.right), "operator 'and'", expr.line))

    def visit_or(self, expr: Or) -> Value:
        if self.truthy(self.eval_expr(expr.left), "operator 'or'", expr.line):
            return TRUE
        return _bool(self.truthy(self.eval_expr(expr.right), "operator 'or'", expr.line))

    def visit_assignment(self, expr: Assignment) -> Value:
        value = self.eval_expr(expr.value)
        self.env.assign(expr.name.lexeme, value, expr.line)
        return value

    def _slot(self, size: int, index: Value, line: int) -> int:
        if not isinstance(index, VNumber):
            raise TypeMismatch("index must be a number, got " + index.type_name(), line)
        n = index.value
        if not n.is_integer() or n < 0 or n >= size:
            raise IndexOutOfRange(
                "index " + index.to_string() + " out of range for length " + str(size),
                line,
            )
        return int(n)

    def visit_index_assignment(self, expr: IndexAssignment) -> Value:
        collection = self.eval_expr(expr.collection)
        index = self.eval_expr(expr.index)
        value = self.eval_expr(expr.value)
        if not isinstance(collection, VList):
            raise TypeMismatch(
                "cannot assign by index into " + collection.type_name(), expr.line
            )
        collection.elements[self._slot(len(collection.elements), index, expr.line)] = value
        return value

    def visit_map_index_assignment(self, expr: MapIndexAssignment) -> Value:
        collection = self.eval_expr(expr.collection)
        value = self.eval_expr(expr.value)
        if not isinstance(collection, VRecord):
            raise TypeMismatch(
                "cannot assign field '"
                + expr.key.lexeme
                + "' on "
                + collection.type_name(),
                expr.line,
            )
        collection.fields[expr.key.lexeme] = value
        return value

    def visit_if_expression(self, expr: IfExpression) -> Value:
        if self.truthy(self.eval_expr(expr.condition), "if-expression", expr.line):
            return self.eval_expr(expr.then_branch)
        return self.eval_expr(expr.else_branch)

    def visit_call(self, expr: Call) -> Value:
        callee = self.eval_expr(expr.callee)
        args = [self.eval_expr(arg) for arg in expr.arguments]
        return self.call(callee, args, expr.line)

    def visit_list(self, expr: List) -> Value:
        return VList([self.eval_expr(e) for e in expr.elements])

    def visit_record(self, expr: Record) -> Value:
        fields: dict[str, Value] = {}
        for key, value in expr.entries:
            fields[key.lexeme] = self.eval_expr(value)
        return VRecord(fields)

    def visit_index(self, expr: Index) -> Value:
        collection = self.eval_expr(expr.collection)
        index = self.eval_expr(expr.index)
        if isinstance(collection, VList):
            return collection.elements[self._slot(len(collection.elements), index, expr.line)]
        if isinstance(collection, VString):
            return VString(collection.value[self._slot(len(collection.value), index, expr.line)])
        raise TypeMismatch("cannot index into " + collection.type_name(), expr.line)

    def visit_map_index(self, expr: MapIndex) -> Value:
        collection = self.eval_expr(expr.collection)
        if not isinstance(collection, VRecord):
            raise TypeMismatch(
                "cannot read field '" + expr.key.lexeme + "' of " + collection.type_name(),
                expr.line,
            )
        key = expr.key.lexeme
        if key not in collection.fields:
            raise InvalidKey("record has no field '" + key + "'", expr.line)
        return collection.fields[key]

    # ── Statements ───────────────────────────────────────────

    def visit_expression_statement(self, stmt: ExpressionStatement) -> Outcome:
        self.eval_expr(stmt.expression)
        return NORMAL

    def visit_print_statement(self, stmt: PrintStatement) -> Outcome:
        self.write(self.eval_expr(stmt.expression).to_string() + "\n")
        return NORMAL

    def visit_variable_declaration(self, stmt: VariableDeclaration) -> Outcome:
        value: Value = NIL
        if stmt.initializer is not None:
            value = self.eval_expr(stmt.initializer)
        self.env.declare(stmt.name.lexeme, value)
        return NORMAL

    def visit_block(self, stmt: Block) -> Outcome:
        return self.execute_in(Environment.enclose(self.env), stmt.statements)

    def visit_if_statement(self, stmt: IfStatement) -> Outcome:
        if self.truthy(self.eval_expr(stmt.condition), "if", stmt.line):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return NORMAL

    def visit_while_statement(self, stmt: WhileStatement) -> Outcome:
        while self.truthy(self.eval_expr(stmt.condition), "while", stmt.line):
            outcome = self.execute(stmt.body)
            if outcome[1]:
                return outcome
        return NORMAL

    def visit_function_declaration(self, stmt: FunctionDeclaration) -> Outcome:
        self.env.declare(stmt.name.lexeme, VFunction(stmt, self.env))
        return NORMAL

    def visit_return(self, stmt: Return) -> Outcome:
        value: Value = NIL
        if stmt.value is not None:
            value = self.eval_expr(stmt.value)
        return (value, True)

    def visit_with(self, stmt: With) -> Outcome:
        env = Environment.enclose(self.env)
        env.declare(stmt.name.lexeme, self.eval_expr(stmt.value))
        return self.execute_in(env, (stmt.body,))

    def visit_for(self, stmt: For) -> Outcome:
        iterable = self.eval_expr(stmt.iterable)
        if not isinstance(iterable, VIter):
            raise TypeMismatch("for expects an iter, got " + iterable.type_name(), stmt.line)
        for element in list(iterable.elements):
            env = Environment.enclose(self.env)
            env.declare(stmt.name.lexeme, element)
            outcome = self.execute_in(env, (stmt.body,))
            if outcome[1]:
                return outcome
        return NORMAL


def evaluate(
    statements: list[Stmt], out: TextIO | None = None, inp: TextIO | None = None
) -> Value:
    """Run a parsed program with a fresh interpreter."""
    return Interpreter(out, inp).evaluate(statements)
