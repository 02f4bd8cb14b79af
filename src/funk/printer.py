"""Funk AST printer — renders a parsed program as fully parenthesized text.

Read-only over the tree. Every binary and unary operation is wrapped in
parentheses so precedence and associativity are visible at a glance.
"""

from __future__ import annotations

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
from .tokens import STRING_DELIMITERS, TK_STRING

INDENT = "  "


def _quote_string(s: str) -> str:
    for delim in STRING_DELIMITERS:
        if delim not in s:
            return delim + s + delim
    # Unreachable from parsed source: a literal cannot contain all three.
    return '"' + s + '"'


class AstPrinter(ExprVisitor[str], StmtVisitor[list[str]]):
    """Expressions render to one string, statements to a list of lines."""

    def print_program(self, statements: list[Stmt]) -> str:
        lines: list[str] = []
        for stmt in statements:
            lines.extend(stmt.accept(self))
        return "".join(line + "\n" for line in lines)

    # ── Helpers ──────────────────────────────────────────────

    def expr(self, expr: Expr) -> str:
        return expr.accept(self)

    def _binary(self, expr: Binary) -> str:
        return "(" + self.expr(expr.left) + " " + expr.operator.lexeme + " " + self.expr(expr.right) + ")"

    def _with_body(self, header: str, body: Stmt) -> list[str]:
        """Attach a nested statement to its header, sharing the brace line for blocks."""
        lines = body.accept(self)
        if isinstance(body, Block):
            return [header + " " + lines[0]] + lines[1:]
        return [header] + [INDENT + line for line in lines]

    # ── Expressions ──────────────────────────────────────────

    def visit_primary(self, expr: Primary) -> str:
        if expr.token.kind == TK_STRING:
            return _quote_string(expr.token.lexeme)
        return expr.token.lexeme

    def visit_unary(self, expr: Unary) -> str:
        return "(" + expr.operator.lexeme + self.expr(expr.operand) + ")"

    def visit_factor(self, expr: Factor) -> str:
        return self._binary(expr)

    def visit_term(self, expr: Term) -> str:
        return self._binary(expr)

    def visit_comparison(self, expr: Comparison) -> str:
        return self._binary(expr)

    def visit_equality(self, expr: Equality) -> str:
        return self._binary(expr)

    def visit_and(self, expr: And) -> str:
        return "(" + self.expr(expr.left) + " and " + self.expr(expr.right) + ")"

    def visit_or(self, expr: Or) -> str:
        return "(" + self.expr(expr.left) + " or " + self.expr(expr.right) + ")"

    def visit_assignment(self, expr: Assignment) -> str:
        return expr.name.lexeme + " = " + self.expr(expr.value)

    def visit_index_assignment(self, expr: IndexAssignment) -> str:
        return (
            self.expr(expr.collection)
            + "["
            + self.expr(expr.index)
            + "] = "
            + self.expr(expr.value)
        )

    def visit_map_index_assignment(self, expr: MapIndexAssignment) -> str:
        return self.expr(expr.collection) + "." + expr.key.lexeme + " = " + self.expr(expr.value)

    def visit_if_expression(self, expr: IfExpression) -> str:
        return (
            "("
            + self.expr(expr.then_branch)
            + " if "
            + self.expr(expr.condition)
            + " else "
            + self.expr(expr.else_branch)
            + ")"
        )

    def visit_call(self, expr: Call) -> str:
        args = ", ".join(self.expr(a) for a in expr.arguments)
        return self.expr(expr.callee) + "(" + args + ")"

    def visit_list(self, expr: List) -> str:
        return "[" + ", ".join(self.expr(e) for e in expr.elements) + "]"

    def visit_record(self, expr: Record) -> str:
        parts = [key.lexeme + ": " + self.expr(value) for key, value in expr.entries]
        return "{" + ", ".join(parts) + "}"

    def visit_index(self, expr: Index) -> str:
        return self.expr(expr.collection) + "[" + self.expr(expr.index) + "]"

    def visit_map_index(self, expr: MapIndex) -> str:
        return self.expr(expr.collection) + "." + expr.key.lexeme

    # ── Statements ───────────────────────────────────────────

    def visit_expression_statement(self, stmt: ExpressionStatement) -> list[str]:
        return [self.expr(stmt.expression)]

    def visit_print_statement(self, stmt: PrintStatement) -> list[str]:
        return ["print (" + self.expr(stmt.expression) + ")"]

    def visit_variable_declaration(self, stmt: VariableDeclaration) -> list[str]:
        if stmt.initializer is None:
            return ["make " + stmt.name.lexeme]
        return ["make " + stmt.name.lexeme + " = " + self.expr(stmt.initializer)]

    def visit_block(self, stmt: Block) -> list[str]:
        lines = ["{"]
        for inner in stmt.statements:
            lines.extend(INDENT + line for line in inner.accept(self))
        lines.append("}")
        return lines

    def visit_if_statement(self, stmt: IfStatement) -> list[str]:
        lines = self._with_body("if " + self.expr(stmt.condition), stmt.then_branch)
        if stmt.else_branch is not None:
            lines.extend(self._with_body("else", stmt.else_branch))
        return lines

    def visit_while_statement(self, stmt: WhileStatement) -> list[str]:
        return self._with_body("while " + self.expr(stmt.condition), stmt.body)

    def visit_function_declaration(self, stmt: FunctionDeclaration) -> list[str]:
        params = ", ".join(p.lexeme for p in stmt.params)
        return self._with_body("funk " + stmt.name.lexeme + "(" + params + ")", stmt.body)

    def visit_return(self, stmt: Return) -> list[str]:
        if stmt.value is None:
            return ["return"]
        return ["return " + self.expr(stmt.value)]

    def visit_with(self, stmt: With) -> list[str]:
        header = "with " + self.expr(stmt.value) + " as " + stmt.name.lexeme
        return self._with_body(header, stmt.body)

    def visit_for(self, stmt: For) -> list[str]:
        header = "for " + stmt.name.lexeme + " in " + self.expr(stmt.iterable)
        return self._with_body(header, stmt.body)


def to_source(statements: list[Stmt]) -> str:
    """Render a parsed program, one statement per line."""
    return AstPrinter().print_program(statements)
