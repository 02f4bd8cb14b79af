"""Funk parser — recursive descent, one method per grammar production."""

from __future__ import annotations

from .ast import (
    And,
    Assignment,
    Block,
    Call,
    Comparison,
    Equality,
    Expr,
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
    Term,
    Unary,
    VariableDeclaration,
    WhileStatement,
    With,
)
from .errors import ParseError
from .limits import raise_recursion_limit
from .tokens import (
    TK_AND,
    TK_AS,
    TK_BANG,
    TK_BANG_EQUAL,
    TK_BOOLEAN,
    TK_COLON,
    TK_COMMA,
    TK_DOT,
    TK_ELSE,
    TK_EOF,
    TK_EQUAL,
    TK_EQUAL_EQUAL,
    TK_FOR,
    TK_FUNK,
    TK_GREATER,
    TK_GREATER_EQUAL,
    TK_IDENT,
    TK_IF,
    TK_IN,
    TK_LBRACE,
    TK_LBRACKET,
    TK_LESS,
    TK_LESS_EQUAL,
    TK_LPAREN,
    TK_MAKE,
    TK_MINUS,
    TK_NIL,
    TK_NUMBER,
    TK_OR,
    TK_PLUS,
    TK_PRINT,
    TK_RBRACE,
    TK_RBRACKET,
    TK_RETURN,
    TK_RPAREN,
    TK_SEMICOLON,
    TK_SLASH,
    TK_STAR,
    TK_STRING,
    TK_WHILE,
    TK_WITH,
    Token,
)

EQUALITY_OPS: set[str] = {TK_EQUAL_EQUAL, TK_BANG_EQUAL}

COMPARE_OPS: set[str] = {TK_GREATER, TK_GREATER_EQUAL, TK_LESS, TK_LESS_EQUAL}

TERM_OPS: set[str] = {TK_MINUS, TK_PLUS}

FACTOR_OPS: set[str] = {TK_SLASH, TK_STAR}

UNARY_OPS: set[str] = {TK_BANG, TK_MINUS}

LITERALS: set[str] = {TK_NUMBER, TK_STRING, TK_BOOLEAN, TK_NIL, TK_IDENT}


class Parser:
    """Recursive descent parser for Funk."""

    def __init__(self, tokens: list[Token]):
        if not tokens or tokens[-1].kind != TK_EOF:
            line = tokens[-1].line if tokens else 1
            tokens = list(tokens) + [Token(TK_EOF, "", line)]
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != TK_EOF:
            self.pos += 1
        return tok

    def at(self, kind: str) -> bool:
        return self.current().kind == kind

    def at_any(self, kinds: set[str]) -> bool:
        return self.current().kind in kinds

    def expect(self, kind: str, what: str, context: str) -> Token:
        if not self.at(kind):
            raise self.error("expected " + what + " " + context)
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        if tok.kind == TK_EOF:
            got = "end of input"
        else:
            got = "'" + tok.lexeme + "'"
        return ParseError(msg + ", got " + got, tok.line, tok.lexeme)

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> list[Stmt]:
        raise_recursion_limit()
        statements: list[Stmt] = []
        try:
            while not self.at(TK_EOF):
                statements.append(self.parse_declaration())
        except RecursionError:
            tok = self.current()
            raise ParseError("program nested too deeply", tok.line, tok.lexeme) from None
        return statements

    def parse_declaration(self) -> Stmt:
        if self.at(TK_FUNK):
            return self.parse_function_declaration()
        if self.at(TK_MAKE):
            return self.parse_variable_declaration()
        return self.parse_statement()

    def parse_function_declaration(self) -> FunctionDeclaration:
        line = self.expect(TK_FUNK, "'funk'", "to start a function").line
        name = self.expect(TK_IDENT, "function name", "after 'funk'")
        self.expect(TK_LPAREN, "'('", "after function name")
        params: list[Token] = []
        if not self.at(TK_RPAREN):
            params.append(self.expect(TK_IDENT, "parameter name", "in parameter list"))
            while self.at(TK_COMMA):
                self.advance()
                params.append(self.expect(TK_IDENT, "parameter name", "after ','"))
        self.expect(TK_RPAREN, "')'", "after parameters")
        if not self.at(TK_LBRACE):
            raise self.error("expected '{' before function body")
        body = self.parse_block()
        return FunctionDeclaration(line, name, tuple(params), body)

    def parse_variable_declaration(self) -> VariableDeclaration:
        line = self.expect(TK_MAKE, "'make'", "to start a declaration").line
        name = self.expect(TK_IDENT, "variable name", "after 'make'")
        initializer: Expr | None = None
        if self.at(TK_EQUAL):
            self.advance()
            initializer = self.parse_expression()
        self.expect(TK_SEMICOLON, "';'", "after variable declaration")
        return VariableDeclaration(line, name, initializer)

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Stmt:
        tok = self.current()
        if tok.kind == TK_PRINT:
            return self.parse_print_statement()
        if tok.kind == TK_LBRACE:
            return self.parse_block()
        if tok.kind == TK_IF:
            return self.parse_if_statement()
        if tok.kind == TK_WHILE:
            return self.parse_while_statement()
        if tok.kind == TK_RETURN:
            return self.parse_return_statement()
        if tok.kind == TK_WITH:
            return self.parse_with_statement()
        if tok.kind == TK_FOR:
            return self.parse_for_statement()
        return self.parse_expression_statement()

    def parse_print_statement(self) -> PrintStatement:
        line = self.advance().line
        expression = self.parse_expression()
        self.expect(TK_SEMICOLON, "';'", "after value")
        return PrintStatement(line, expression)

    def parse_block(self) -> Block:
        line = self.expect(TK_LBRACE, "'{'", "to open block").line
        statements: list[Stmt] = []
        while not self.at(TK_RBRACE) and not self.at(TK_EOF):
            statements.append(self.parse_declaration())
        self.expect(TK_RBRACE, "'}'", "after block")
        return Block(line, tuple(statements))

    def parse_if_statement(self) -> IfStatement:
        line = self.advance().line
        condition = self.parse_expression()
        then_branch = self.parse_statement()
        else_branch: Stmt | None = None
        if self.at(TK_ELSE):
            self.advance()
            else_branch = self.parse_statement()
        return IfStatement(line, condition, then_branch, else_branch)

    def parse_while_statement(self) -> WhileStatement:
        line = self.advance().line
        condition = self.parse_expression()
        body = self.parse_statement()
        return WhileStatement(line, condition, body)

    def parse_return_statement(self) -> Return:
        line = self.advance().line
        value: Expr | None = None
        if not self.at(TK_SEMICOLON):
            value = self.parse_expression()
        self.expect(TK_SEMICOLON, "';'", "after return value")
        return Return(line, value)

    def parse_with_statement(self) -> With:
        line = self.advance().line
        value = self.parse_expression()
        self.expect(TK_AS, "'as'", "after with value")
        name = self.expect(TK_IDENT, "identifier", "after 'as'")
        body = self.parse_statement()
        return With(line, value, name, body)

    def parse_for_statement(self) -> For:
        line = self.advance().line
        name = self.expect(TK_IDENT, "loop variable", "after 'for'")
        self.expect(TK_IN, "'in'", "after loop variable")
        iterable = self.parse_expression()
        body = self.parse_statement()
        return For(line, name, iterable, body)

    def parse_expression_statement(self) -> ExpressionStatement:
        line = self.current().line
        expression = self.parse_expression()
        self.expect(TK_SEMICOLON, "';'", "after expression")
        return ExpressionStatement(line, expression)

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        """Assignment = Target '=' Assignment | IfExpression

        The target is parsed as an ordinary expression first and only then
        checked for one of the three assignable shapes.
        """
        expr = self.parse_if_expression()
        if not self.at(TK_EQUAL):
            return expr
        equals = self.advance()
        value = self.parse_assignment()
        if isinstance(expr, Primary) and expr.token.kind == TK_IDENT:
            return Assignment(expr.line, expr.token, value)
        if isinstance(expr, Index):
            return IndexAssignment(expr.line, expr.collection, expr.index, value)
        if isinstance(expr, MapIndex):
            return MapIndexAssignment(expr.line, expr.collection, expr.key, value)
        raise ParseError("invalid assignment target", equals.line, equals.lexeme)

    def parse_if_expression(self) -> Expr:
        """IfExpression = Or ( 'if' Or 'else' Or )*

        Each round wraps everything parsed so far as the new then-branch, so
        `a if c1 else b if c2 else c` is `(a if c1 else b) if c2 else c`.
        """
        expr = self.parse_or()
        while self.at(TK_IF):
            self.advance()
            condition = self.parse_or()
            self.expect(TK_ELSE, "'else'", "after if-expression condition")
            else_branch = self.parse_or()
            expr = IfExpression(expr.line, condition, expr, else_branch)
        return expr

    def parse_or(self) -> Expr:
        """Or = And ( 'or' And )*"""
        left = self.parse_and()
        while self.at(TK_OR):
            self.advance()
            right = self.parse_and()
            left = Or(left.line, left, right)
        return left

    def parse_and(self) -> Expr:
        """And = Equality ( 'and' Equality )*"""
        left = self.parse_equality()
        while self.at(TK_AND):
            self.advance()
            right = self.parse_equality()
            left = And(left.line, left, right)
        return left

    def parse_equality(self) -> Expr:
        """Equality = Comparison ( ( '==' | '!=' ) Comparison )*"""
        left = self.parse_comparison()
        while self.at_any(EQUALITY_OPS):
            op = self.advance()
            right = self.parse_comparison()
            left = Equality(left.line, left, op, right)
        return left

    def parse_comparison(self) -> Expr:
        """Comparison = Term ( ( '>' | '>=' | '<' | '<=' ) Term )*"""
        left = self.parse_term()
        while self.at_any(COMPARE_OPS):
            op = self.advance()
            right = self.parse_term()
            left = Comparison(left.line, left, op, right)
        return left

    def parse_term(self) -> Expr:
        """Term = Factor ( ( '-' | '+' ) Factor )*"""
        left = self.parse_factor()
        while self.at_any(TERM_OPS):
            op = self.advance()
            right = self.parse_factor()
            left = Term(left.line, left, op, right)
        return left

    def parse_factor(self) -> Expr:
        """Factor = Unary ( ( '/' | '*' ) Unary )*"""
        left = self.parse_unary()
        while self.at_any(FACTOR_OPS):
            op = self.advance()
            right = self.parse_unary()
            left = Factor(left.line, left, op, right)
        return left

    def parse_unary(self) -> Expr:
        """Unary = ( '!' | '-' ) Unary | Call"""
        if self.at_any(UNARY_OPS):
            op = self.advance()
            operand = self.parse_unary()
            return Unary(op.line, op, operand)
        return self.parse_call()

    def parse_call(self) -> Expr:
        """Call = Primary ( '(' Args ')' | '[' Expr ']' | '.' IDENT )*"""
        expr = self.parse_primary()
        while True:
            if self.at(TK_LPAREN):
                self.advance()
                args = self.parse_arguments()
                self.expect(TK_RPAREN, "')'", "after arguments")
                expr = Call(expr.line, expr, args)
            elif self.at(TK_LBRACKET):
                self.advance()
                index = self.parse_expression()
                self.expect(TK_RBRACKET, "']'", "after index")
                expr = Index(expr.line, expr, index)
            elif self.at(TK_DOT):
                self.advance()
                key = self.expect(TK_IDENT, "field name", "after '.'")
                expr = MapIndex(expr.line, expr, key)
            else:
                break
        return expr

    def parse_arguments(self) -> tuple[Expr, ...]:
        """Args = ( Expr ( ',' Expr )* ','? )?"""
        return self._parse_comma_list(TK_RPAREN, "')'")

    def _parse_comma_list(self, closer: str, closer_text: str) -> tuple[Expr, ...]:
        items: list[Expr] = []
        while not self.at(closer):
            items.append(self.parse_expression())
            if self.at(closer):
                break
            self.expect(TK_COMMA, "',' or " + closer_text, "between elements")
        return tuple(items)

    def parse_primary(self) -> Expr:
        """Parse a primary expression."""
        tok = self.current()

        # Literals and identifiers
        if tok.kind in LITERALS:
            self.advance()
            return Primary(tok.line, tok)

        # [ — list literal
        if tok.kind == TK_LBRACKET:
            self.advance()
            elements = self._parse_comma_list(TK_RBRACKET, "']'")
            self.expect(TK_RBRACKET, "']'", "after list elements")
            return List(tok.line, elements)

        # { — record literal
        if tok.kind == TK_LBRACE:
            self.advance()
            entries: list[tuple[Token, Expr]] = []
            while not self.at(TK_RBRACE):
                key = self.expect(TK_IDENT, "field name", "in record")
                self.expect(TK_COLON, "':'", "after field name")
                entries.append((key, self.parse_expression()))
                if self.at(TK_RBRACE):
                    break
                self.expect(TK_COMMA, "',' or '}'", "between record fields")
            self.expect(TK_RBRACE, "'}'", "after record fields")
            return Record(tok.line, tuple(entries))

        # ( — grouping
        if tok.kind == TK_LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.expect(TK_RPAREN, "')'", "after expression")
            return expr

        raise self.error("expected expression")


def parse(tokens: list[Token]) -> list[Stmt]:
    """Parse a token stream into a list of statements."""
    return Parser(tokens).parse_program()
