"""Funk type checker — a gradual pass over the parsed tree.

Types are coarse: one per value kind plus Unknown, which stands for anything
the checker cannot see statically (parameters, call results, indexing).
Unknown is accepted wherever a concrete type is required. The first violation
aborts the pass with a FunkTypeError.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterable

from .ast import (
    And,
    Assignment,
    Binary,
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
from .errors import FunkTypeError, UndefinedVariable
from .limits import raise_recursion_limit
from .tokens import (
    TK_BANG,
    TK_BOOLEAN,
    TK_IDENT,
    TK_MINUS,
    TK_NIL,
    TK_NUMBER,
    TK_PLUS,
    TK_STRING,
)

logger = logging.getLogger(__name__)


# ============================================================
# TYPES
# ============================================================


@dataclass(frozen=True)
class Type:
    name: str

    def __str__(self) -> str:
        return self.name


# Singletons
NUMBER_T = Type("number")
BOOLEAN_T = Type("boolean")
STRING_T = Type("string")
NIL_T = Type("nil")
FUNCTION_T = Type("function")
LIST_T = Type("list")
RECORD_T = Type("record")
UNKNOWN_T = Type("unknown")

LITERAL_TYPES: dict[str, Type] = {
    TK_NUMBER: NUMBER_T,
    TK_STRING: STRING_T,
    TK_BOOLEAN: BOOLEAN_T,
    TK_NIL: NIL_T,
}


def _is(t: Type, *allowed: Type) -> bool:
    """True when `t` is one of `allowed`, or Unknown."""
    return t == UNKNOWN_T or t in allowed


# ============================================================
# CHECKER
# ============================================================


class TypeChecker(ExprVisitor[Type], StmtVisitor[Type]):
    def __init__(self) -> None:
        self.globals: Environment[Type] = Environment()
        for name in BUILTINS:
            self.globals.declare_global(name, FUNCTION_T)
        self.env: Environment[Type] = self.globals

    def error(self, msg: str, line: int) -> FunkTypeError:
        return FunkTypeError(msg, line)

    # ── Helpers ──────────────────────────────────────────────

    def check_expr(self, expr: Expr) -> Type:
        return expr.accept(self)

    def check_stmt(self, stmt: Stmt) -> Type:
        return stmt.accept(self)

    def check_statements(self, statements: Iterable[Stmt]) -> None:
        statements = list(statements)
        # Functions are visible to every statement of their list, so
        # mutually recursive declarations resolve.
        for stmt in statements:
            if isinstance(stmt, FunctionDeclaration):
                self.env.declare(stmt.name.lexeme, FUNCTION_T)
        for stmt in statements:
            self.check_stmt(stmt)

    def in_scope(self, body: Callable[[], None]) -> None:
        """Run `body` in a fresh child of the current scope."""
        previous = self.env
        self.env = Environment.enclose(previous)
        try:
            body()
        finally:
            self.env = previous

    def lookup(self, name: str, line: int) -> Type:
        try:
            return self.env.get(name, line)
        except UndefinedVariable as e:
            raise self.error(e.msg, line) from e

    def require_condition(self, t: Type, what: str, line: int) -> None:
        if not _is(t, BOOLEAN_T):
            raise self.error(what + " condition must be boolean, got " + str(t), line)

    def require_nil_body(self, t: Type, what: str, line: int) -> None:
        if t != NIL_T:
            raise self.error(what + " body must be a statement, got " + str(t), line)

    def mismatch(self, expr: Binary, left: Type, right: Type) -> FunkTypeError:
        return self.error(
            "operator '"
            + expr.operator.lexeme
            + "' cannot be applied to "
            + str(left)
            + " and "
            + str(right),
            expr.line,
        )

    # ── Expressions ──────────────────────────────────────────

    def visit_primary(self, expr: Primary) -> Type:
        tok = expr.token
        if tok.kind == TK_IDENT:
            return self.lookup(tok.lexeme, expr.line)
        return LITERAL_TYPES[tok.kind]

    def visit_unary(self, expr: Unary) -> Type:
        t = self.check_expr(expr.operand)
        if expr.operator.kind == TK_MINUS:
            if not _is(t, NUMBER_T):
                raise self.error("operator '-' expects a number, got " + str(t), expr.line)
            return NUMBER_T if t == NUMBER_T else UNKNOWN_T
        if expr.operator.kind == TK_BANG:
            if not _is(t, BOOLEAN_T):
                raise self.error("operator '!' expects a boolean, got " + str(t), expr.line)
            return BOOLEAN_T
        raise self.error("unknown unary operator '" + expr.operator.lexeme + "'", expr.line)

    def _arithmetic(self, expr: Binary) -> Type:
        left = self.check_expr(expr.left)
        right = self.check_expr(expr.right)
        if left == UNKNOWN_T or right == UNKNOWN_T:
            return UNKNOWN_T
        if left == NUMBER_T and right == NUMBER_T:
            return NUMBER_T
        if expr.operator.kind == TK_PLUS and left == STRING_T and right == STRING_T:
            return STRING_T
        raise self.mismatch(expr, left, right)

    def visit_factor(self, expr: Factor) -> Type:
        return self._arithmetic(expr)

    def visit_term(self, expr: Term) -> Type:
        return self._arithmetic(expr)

    def visit_comparison(self, expr: Comparison) -> Type:
        left = self.check_expr(expr.left)
        right = self.check_expr(expr.right)
        if _is(left, NUMBER_T) and _is(right, NUMBER_T):
            return BOOLEAN_T
        raise self.mismatch(expr, left, right)

    def visit_equality(self, expr: Equality) -> Type:
        left = self.check_expr(expr.left)
        right = self.check_expr(expr.right)
        if left == right or left == UNKNOWN_T or right == UNKNOWN_T:
            return BOOLEAN_T
        raise self.mismatch(expr, left, right)

    def _logical(self, op: str, left_expr: Expr, right_expr: Expr, line: int) -> Type:
        left = self.check_expr(left_expr)
        right = self.check_expr(right_expr)
        if _is(left, BOOLEAN_T) and _is(right, BOOLEAN_T):
            return BOOLEAN_T
        raise self.error(
            "operator '" + op + "' expects booleans, got " + str(left) + " and " + str(right),
            line,
        )

    def visit_and(self, expr: And) -> Type:
        return self._logical("and", expr.left, expr.right, expr.line)

    def visit_or(self, expr: Or) -> Type:
        return self._logical("or", expr.left, expr.right, expr.line)

    def visit_assignment(self, expr: Assignment) -> Type:
        t = self.check_expr(expr.value)
        try:
            self.env.assign(expr.name.lexeme, t, expr.line)
        except UndefinedVariable as e:
            raise self.error(e.msg, expr.line) from e
        return t

    def visit_index_assignment(self, expr: IndexAssignment) -> Type:
        collection = self.check_expr(expr.collection)
        if not _is(collection, LIST_T):
            raise self.error("cannot assign by index into " + str(collection), expr.line)
        index = self.check_expr(expr.index)
        if not _is(index, NUMBER_T):
            raise self.error("list index must be a number, got " + str(index), expr.line)
        return self.check_expr(expr.value)

    def visit_map_index_assignment(self, expr: MapIndexAssignment) -> Type:
        collection = self.check_expr(expr.collection)
        if not _is(collection, RECORD_T):
            raise self.error(
                "cannot assign field '" + expr.key.lexeme + "' on " + str(collection),
                expr.line,
            )
        return self.check_expr(expr.value)

    def visit_if_expression(self, expr: IfExpression) -> Type:
        self.require_condition(self.check_expr(expr.condition), "if-expression", expr.line)
        then_t = self.check_expr(expr.then_branch)
        else_t = self.check_expr(expr.else_branch)
        if then_t == else_t:
            return then_t
        return UNKNOWN_T

    def visit_call(self, expr: Call) -> Type:
        callee = self.check_expr(expr.callee)
        if not _is(callee, FUNCTION_T):
            raise self.error("cannot call a value of type " + str(callee), expr.line)
        for arg in expr.arguments:
            self.check_expr(arg)
        return UNKNOWN_T

    def visit_list(self, expr: List) -> Type:
        for element in expr.elements:
            self.check_expr(element)
        return LIST_T

    def visit_record(self, expr: Record) -> Type:
        for _, value in expr.entries:
            self.check_expr(value)
        return RECORD_T

    def visit_index(self, expr: Index) -> Type:
        collection = self.check_expr(expr.collection)
        if not _is(collection, LIST_T, STRING_T):
            raise self.error("cannot index into " + str(collection), expr.line)
        index = self.check_expr(expr.index)
        if not _is(index, NUMBER_T):
            raise self.error("index must be a number, got " + str(index), expr.line)
        return UNKNOWN_T

    def visit_map_index(self, expr: MapIndex) -> Type:
        collection = self.check_expr(expr.collection)
        if not _is(collection, RECORD_T):
            raise self.error(
                "cannot read field '" + expr.key.lexeme + "' of " + str(collection),
                expr.line,
            )
        return UNKNOWN_T

    # ── Statements ───────────────────────────────────────────

    def visit_expression_statement(self, stmt: ExpressionStatement) -> Type:
        self.check_expr(stmt.expression)
        return NIL_T

    def visit_print_statement(self, stmt: PrintStatement) -> Type:
        self.check_expr(stmt.expression)
        return NIL_T

    def visit_variable_declaration(self, stmt: VariableDeclaration) -> Type:
        t = NIL_T
        if stmt.initializer is not None:
            t = self.check_expr(stmt.initializer)
        name = stmt.name.lexeme
        if self.env.contains(name) and name not in BUILTINS:
            logger.debug("'%s' at line %d shadows an existing binding", name, stmt.line)
        self.env.declare(name, t)
        return NIL_T

    def visit_block(self, stmt: Block) -> Type:
        self.in_scope(lambda: self.check_statements(stmt.statements))
        return NIL_T

    def visit_if_statement(self, stmt: IfStatement) -> Type:
        self.require_condition(self.check_expr(stmt.condition), "if", stmt.line)
        self.require_nil_body(self.check_stmt(stmt.then_branch), "if", stmt.line)
        if stmt.else_branch is not None:
            self.require_nil_body(self.check_stmt(stmt.else_branch), "else", stmt.line)
        return NIL_T

    def visit_while_statement(self, stmt: WhileStatement) -> Type:
        self.require_condition(self.check_expr(stmt.condition), "while", stmt.line)
        self.require_nil_body(self.check_stmt(stmt.body), "while", stmt.line)
        return NIL_T

    def visit_function_declaration(self, stmt: FunctionDeclaration) -> Type:
        self.env.declare(stmt.name.lexeme, FUNCTION_T)

        def body() -> None:
            for param in stmt.params:
                self.env.declare(param.lexeme, UNKNOWN_T)
            self.check_statements(stmt.body.statements)

        self.in_scope(body)
        return NIL_T

    def visit_return(self, stmt: Return) -> Type:
        if stmt.value is not None:
            self.check_expr(stmt.value)
        return NIL_T

    def visit_with(self, stmt: With) -> Type:
        t = self.check_expr(stmt.value)

        def body() -> None:
            self.env.declare(stmt.name.lexeme, t)
            self.require_nil_body(self.check_stmt(stmt.body), "with", stmt.line)

        self.in_scope(body)
        return NIL_T

    def visit_for(self, stmt: For) -> Type:
        t = self.check_expr(stmt.iterable)
        if t != UNKNOWN_T:
            raise self.error("for expects an iter, got " + str(t), stmt.line)

        def body() -> None:
            self.env.declare(stmt.name.lexeme, UNKNOWN_T)
            self.require_nil_body(self.check_stmt(stmt.body), "for", stmt.line)

        self.in_scope(body)
        return NIL_T


# ============================================================
# PUBLIC API
# ============================================================


def check(statements: list[Stmt]) -> None:
    """Type-check a parsed program. Raises FunkTypeError on the first violation."""
    logger.debug("checking %d statements", len(statements))
    raise_recursion_limit()
    try:
        TypeChecker().check_statements(statements)
    except RecursionError:
        raise FunkTypeError("program nested too deeply to check") from None
    logger.debug("check passed")
