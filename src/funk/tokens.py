"""Funk tokenizer — lexes source into a flat token list."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import LexError


# Token kind constants
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_BOOLEAN = "BOOLEAN"
TK_NIL = "NIL"
TK_IDENT = "IDENTIFIER"
TK_EOF = "EOF"

# Keywords
TK_PRINT = "PRINT"
TK_MAKE = "MAKE"
TK_IF = "IF"
TK_ELSE = "ELSE"
TK_AND = "AND"
TK_OR = "OR"
TK_WHILE = "WHILE"
TK_FUNK = "FUNK"
TK_RETURN = "RETURN"
TK_WITH = "WITH"
TK_AS = "AS"
TK_FOR = "FOR"
TK_IN = "IN"

# Punctuation
TK_LPAREN = "LPAREN"
TK_RPAREN = "RPAREN"
TK_LBRACE = "LBRACE"
TK_RBRACE = "RBRACE"
TK_LBRACKET = "LBRACKET"
TK_RBRACKET = "RBRACKET"
TK_COMMA = "COMMA"
TK_SEMICOLON = "SEMICOLON"
TK_DOT = "DOT"
TK_COLON = "COLON"
TK_PLUS = "PLUS"
TK_MINUS = "MINUS"
TK_STAR = "STAR"
TK_SLASH = "SLASH"
TK_EQUAL = "EQUAL"
TK_BANG = "BANG"
TK_LESS = "LESS"
TK_GREATER = "GREATER"
TK_EQUAL_EQUAL = "EQUAL_EQUAL"
TK_BANG_EQUAL = "BANG_EQUAL"
TK_LESS_EQUAL = "LESS_EQUAL"
TK_GREATER_EQUAL = "GREATER_EQUAL"

KEYWORDS: dict[str, str] = {
    "true": TK_BOOLEAN,
    "false": TK_BOOLEAN,
    "nil": TK_NIL,
    "print": TK_PRINT,
    "make": TK_MAKE,
    "if": TK_IF,
    "else": TK_ELSE,
    "and": TK_AND,
    "or": TK_OR,
    "while": TK_WHILE,
    "funk": TK_FUNK,
    "return": TK_RETURN,
    "with": TK_WITH,
    "as": TK_AS,
    "for": TK_FOR,
    "in": TK_IN,
}

# Two-character operators, checked before their one-character prefixes
DOUBLE_OPS: dict[str, str] = {
    "==": TK_EQUAL_EQUAL,
    "!=": TK_BANG_EQUAL,
    "<=": TK_LESS_EQUAL,
    ">=": TK_GREATER_EQUAL,
}

SINGLE_OPS: dict[str, str] = {
    "(": TK_LPAREN,
    ")": TK_RPAREN,
    "{": TK_LBRACE,
    "}": TK_RBRACE,
    "[": TK_LBRACKET,
    "]": TK_RBRACKET,
    ",": TK_COMMA,
    ";": TK_SEMICOLON,
    ".": TK_DOT,
    ":": TK_COLON,
    "+": TK_PLUS,
    "-": TK_MINUS,
    "*": TK_STAR,
    "/": TK_SLASH,
    "=": TK_EQUAL,
    "!": TK_BANG,
    "<": TK_LESS,
    ">": TK_GREATER,
}

STRING_DELIMITERS: str = "\"'`"


@dataclass(frozen=True)
class Token:
    """A token with kind, lexeme, and the line it starts on."""

    kind: str
    lexeme: str
    line: int

    def __repr__(self) -> str:
        return "Token(" + self.kind + ", " + repr(self.lexeme) + ", " + str(self.line) + ")"


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str) -> list[Token]:
    """Tokenize Funk source into a flat list ending with TK_EOF."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            continue

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        start_pos = pos
        start_line = line

        # Number: digits with an optional fraction
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
            if pos + 1 < length and source[pos] == "." and _is_digit(source[pos + 1]):
                pos += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
            tokens.append(Token(TK_NUMBER, source[start_pos:pos], start_line))
            continue

        # String literal, closed by the delimiter that opened it
        if c in STRING_DELIMITERS:
            pos += 1
            while pos < length and source[pos] != c:
                if source[pos] == "\n":
                    line += 1
                pos += 1
            if pos >= length:
                raise LexError("unterminated string literal", start_line)
            value = source[start_pos + 1 : pos]
            pos += 1  # skip closing delimiter
            tokens.append(Token(TK_STRING, value, start_line))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
            word = source[start_pos:pos]
            tokens.append(Token(KEYWORDS.get(word, TK_IDENT), word, start_line))
            continue

        # Two-character operators
        pair = source[pos : pos + 2]
        if pair in DOUBLE_OPS:
            tokens.append(Token(DOUBLE_OPS[pair], pair, start_line))
            pos += 2
            continue

        # Single-character operators
        if c in SINGLE_OPS:
            tokens.append(Token(SINGLE_OPS[c], c, start_line))
            pos += 1
            continue

        raise LexError("unexpected character: " + repr(c), line)

    tokens.append(Token(TK_EOF, "", line))
    return tokens
