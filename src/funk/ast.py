"""Funk AST — parse-time node definitions and the visitor protocol.

Every node is a frozen dataclass whose first field is the source line of the
token that starts it. Nodes know nothing about the passes that walk them: each
one exposes a single `accept(visitor)` that forwards to the matching
`visit_*` handler, so a new pass is a new visitor subclass, not an edit here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

from .tokens import Token

R = TypeVar("R")


# ============================================================
# VISITORS
# ============================================================


class ExprVisitor(ABC, Generic[R]):
    """One handler per expression variant."""

    @abstractmethod
    def visit_primary(self, expr: Primary) -> R: ...

    @abstractmethod
    def visit_unary(self, expr: Unary) -> R: ...

    @abstractmethod
    def visit_factor(self, expr: Factor) -> R: ...

    @abstractmethod
    def visit_term(self, expr: Term) -> R: ...

    @abstractmethod
    def visit_comparison(self, expr: Comparison) -> R: ...

    @abstractmethod
    def visit_equality(self, expr: Equality) -> R: ...

    @abstractmethod
    def visit_and(self, expr: And) -> R: ...

    @abstractmethod
    def visit_or(self, expr: Or) -> R: ...

    @abstractmethod
    def visit_assignment(self, expr: Assignment) -> R: ...

    @abstractmethod
    def visit_index_assignment(self, expr: IndexAssignment) -> R: ...

    @abstractmethod
    def visit_map_index_assignment(self, expr: MapIndexAssignment) -> R: ...

    @abstractmethod
    def visit_if_expression(self, expr: IfExpression) -> R: ...

    @abstractmethod
    def visit_call(self, expr: Call) -> R: ...

    @abstractmethod
    def visit_list(self, expr: List) -> R: ...

    @abstractmethod
    def visit_record(self, expr: Record) -> R: ...

    @abstractmethod
    def visit_index(self, expr: Index) -> R: ...

    @abstractmethod
    def visit_map_index(self, expr: MapIndex) -> R: ...


class StmtVisitor(ABC, Generic[R]):
    """One handler per statement variant."""

    @abstractmethod
    def visit_expression_statement(self, stmt: ExpressionStatement) -> R: ...

    @abstractmethod
    def visit_print_statement(self, stmt: PrintStatement) -> R: ...

    @abstractmethod
    def visit_variable_declaration(self, stmt: VariableDeclaration) -> R: ...

    @abstractmethod
    def visit_block(self, stmt: Block) -> R: ...

    @abstractmethod
    def visit_if_statement(self, stmt: IfStatement) -> R: ...

    @abstractmethod
    def visit_while_statement(self, stmt: WhileStatement) -> R: ...

    @abstractmethod
    def visit_function_declaration(self, stmt: FunctionDeclaration) -> R: ...

    @abstractmethod
    def visit_return(self, stmt: Return) -> R: ...

    @abstractmethod
    def visit_with(self, stmt: With) -> R: ...

    @abstractmethod
    def visit_for(self, stmt: For) -> R: ...


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(frozen=True)
class Expr:
    """Base for all expressions."""

    line: int

    def accept(self, visitor: ExprVisitor[R]) -> R:
        raise NotImplementedError


@dataclass(frozen=True)
class Primary(Expr):
    """Literal or identifier; the token kind tells which."""

    token: Token

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_primary(self)


@dataclass(frozen=True)
class Unary(Expr):
    """'!' or '-' applied to one operand."""

    operator: Token
    operand: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_unary(self)


@dataclass(frozen=True)
class Binary(Expr):
    """Shared shape of the four arithmetic/relational tiers."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Factor(Binary):
    """'*' or '/'."""

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_factor(self)


@dataclass(frozen=True)
class Term(Binary):
    """'+' or '-'."""

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_term(self)


@dataclass(frozen=True)
class Comparison(Binary):
    """'<', '<=', '>' or '>='."""

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_comparison(self)


@dataclass(frozen=True)
class Equality(Binary):
    """'==' or '!='."""

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_equality(self)


@dataclass(frozen=True)
class And(Expr):
    left: Expr
    right: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_and(self)


@dataclass(frozen=True)
class Or(Expr):
    left: Expr
    right: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_or(self)


@dataclass(frozen=True)
class Assignment(Expr):
    """name = value."""

    name: Token
    value: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_assignment(self)


@dataclass(frozen=True)
class IndexAssignment(Expr):
    """collection[index] = value."""

    collection: Expr
    index: Expr
    value: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_index_assignment(self)


@dataclass(frozen=True)
class MapIndexAssignment(Expr):
    """collection.key = value."""

    collection: Expr
    key: Token
    value: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_map_index_assignment(self)


@dataclass(frozen=True)
class IfExpression(Expr):
    """then_branch if condition else else_branch."""

    condition: Expr
    then_branch: Expr
    else_branch: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_if_expression(self)


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    arguments: tuple[Expr, ...]

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_call(self)


@dataclass(frozen=True)
class List(Expr):
    elements: tuple[Expr, ...]

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_list(self)


@dataclass(frozen=True)
class Record(Expr):
    """{key: value, ...} with keys in source order."""

    entries: tuple[tuple[Token, Expr], ...]

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_record(self)


@dataclass(frozen=True)
class Index(Expr):
    """collection[index]."""

    collection: Expr
    index: Expr

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_index(self)


@dataclass(frozen=True)
class MapIndex(Expr):
    """collection.key."""

    collection: Expr
    key: Token

    def accept(self, visitor: ExprVisitor[R]) -> R:
        return visitor.visit_map_index(self)


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(frozen=True)
class Stmt:
    """Base for all statements."""

    line: int

    def accept(self, visitor: StmtVisitor[R]) -> R:
        raise NotImplementedError


@dataclass(frozen=True)
class ExpressionStatement(Stmt):
    expression: Expr

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_expression_statement(self)


@dataclass(frozen=True)
class PrintStatement(Stmt):
    expression: Expr

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_print_statement(self)


@dataclass(frozen=True)
class VariableDeclaration(Stmt):
    """make name = initializer;  (initializer optional)"""

    name: Token
    initializer: Expr | None

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_variable_declaration(self)


@dataclass(frozen=True)
class Block(Stmt):
    statements: tuple[Stmt, ...]

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_block(self)


@dataclass(frozen=True)
class IfStatement(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_if_statement(self)


@dataclass(frozen=True)
class WhileStatement(Stmt):
    condition: Expr
    body: Stmt

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_while_statement(self)


@dataclass(frozen=True)
class FunctionDeclaration(Stmt):
    """funk name(params) { body }."""

    name: Token
    params: tuple[Token, ...]
    body: Block

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_function_declaration(self)


@dataclass(frozen=True)
class Return(Stmt):
    value: Expr | None

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_return(self)


@dataclass(frozen=True)
class With(Stmt):
    """with value as name body."""

    value: Expr
    name: Token
    body: Stmt

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_with(self)


@dataclass(frozen=True)
class For(Stmt):
    """for name in iterable body."""

    name: Token
    iterable: Expr
    body: Stmt

    def accept(self, visitor: StmtVisitor[R]) -> R:
        return visitor.visit_for(self)
