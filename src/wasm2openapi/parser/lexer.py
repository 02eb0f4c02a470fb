# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for WIT interface descriptions.

Converts raw source text into a sequence of tokens for subsequent parsing.
Documentation comments (``///`` and ``/** ... */``) are not emitted as tokens;
their text is attached to the token that follows them.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the WIT lexer."""

    # Keywords
    PACKAGE = "package"
    WORLD = "world"
    INTERFACE = "interface"
    USE = "use"
    AS = "as"
    TYPE = "type"
    RECORD = "record"
    VARIANT = "variant"
    ENUM = "enum"
    FLAGS = "flags"
    RESOURCE = "resource"
    FUNC = "func"
    ASYNC = "async"
    STATIC = "static"
    CONSTRUCTOR = "constructor"
    IMPORT = "import"
    EXPORT = "export"
    INCLUDE = "include"
    WITH = "with"

    # Symbols and operators
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    LANGLE = "<"
    RANGLE = ">"
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    DOT = "."
    EQUALS = "="
    SLASH = "/"
    AT = "@"
    STAR = "*"
    UNDERSCORE = "_"
    ARROW = "->"

    # Literals
    NUMBER = "NUMBER"

    # Identifiers
    IDENTIFIER = "IDENTIFIER"

    # End of file
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (without the ``%`` escape for identifiers).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
        docs: Text of the documentation comments directly preceding the token.
    """

    type: TokenType
    value: str
    line: int
    column: int
    docs: str = ""


class LexerError(Exception):
    """Raised when the scanner encounters an invalid character or unterminated comment.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


def tokenize(source: str) -> list[Token]:
    """Tokenize WIT source text into a sequence of tokens.

    Args:
        source: The full text of a WIT document.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On unexpected characters or unterminated block comments.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

_KEYWORDS: dict[str, TokenType] = {
    "package": TokenType.PACKAGE,
    "world": TokenType.WORLD,
    "interface": TokenType.INTERFACE,
    "use": TokenType.USE,
    "as": TokenType.AS,
    "type": TokenType.TYPE,
    "record": TokenType.RECORD,
    "variant": TokenType.VARIANT,
    "enum": TokenType.ENUM,
    "flags": TokenType.FLAGS,
    "resource": TokenType.RESOURCE,
    "func": TokenType.FUNC,
    "async": TokenType.ASYNC,
    "static": TokenType.STATIC,
    "constructor": TokenType.CONSTRUCTOR,
    "import": TokenType.IMPORT,
    "export": TokenType.EXPORT,
    "include": TokenType.INCLUDE,
    "with": TokenType.WITH,
}

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "<": TokenType.LANGLE,
    ">": TokenType.RANGLE,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
    ".": TokenType.DOT,
    "=": TokenType.EQUALS,
    "/": TokenType.SLASH,
    "@": TokenType.AT,
    "*": TokenType.STAR,
    "_": TokenType.UNDERSCORE,
}


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []
        self._pending_docs: list[str] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_whitespace_and_comments()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._line, self._column))
        return self._tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character *offset* positions ahead, or '' at end of input."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _emit(self, token_type: TokenType, value: str, line: int, col: int) -> None:
        """Append a token, attaching and clearing any pending documentation."""
        docs = "\n".join(self._pending_docs)
        self._pending_docs = []
        self._tokens.append(Token(token_type, value, line, col, docs))

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comment runs at the current position."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\n":
                self._advance()
            elif ch == "/" and self._peek() == "/":
                self._skip_line_comment()
            elif ch == "/" and self._peek() == "*":
                self._skip_block_comment()
            else:
                break

    def _skip_line_comment(self) -> None:
        """Consume a '//' comment; '///' comments are collected as documentation."""
        is_doc = self._peek(2) == "/" and self._peek(3) != "/"
        start = self._pos
        while self._pos < len(self._source) and self._current() != "\n":
            self._advance()
        if is_doc:
            text = self._source[start + 3 : self._pos]
            self._pending_docs.append(text[1:] if text.startswith(" ") else text)
        else:
            self._pending_docs = []

    def _skip_block_comment(self) -> None:
        """Consume from '/*' through the matching '*/'; '/**' comments are documentation."""
        start_line = self._line
        start_col = self._column
        is_doc = self._peek(2) == "*" and self._peek(3) != "/"
        self._advance()  # /
        self._advance()  # *
        start = self._pos
        while self._pos < len(self._source):
            if self._current() == "*" and self._peek() == "/":
                body = self._source[start : self._pos]
                self._advance()  # *
                self._advance()  # /
                if is_doc:
                    self._pending_docs.extend(_strip_block_doc(body[1:]))
                return
            self._advance()
        raise LexerError("Unterminated block comment", start_line, start_col)

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line = self._line
        col = self._column

        if ch == "-":
            if self._peek() == ">":
                self._advance()  # -
                self._advance()  # >
                self._emit(TokenType.ARROW, "->", line, col)
            else:
                raise LexerError("Unexpected character: '-'", line, col)
        elif ch == "_" and not self._peek().isalnum():
            self._advance()
            self._emit(TokenType.UNDERSCORE, ch, line, col)
        elif ch in _SINGLE_CHAR_TOKENS and ch != "_":
            self._advance()
            self._emit(_SINGLE_CHAR_TOKENS[ch], ch, line, col)
        elif ch.isdigit():
            self._scan_number(line, col)
        elif ch == "%":
            self._advance()
            if not self._current().isalpha():
                raise LexerError("Expected identifier after '%'", line, col)
            value = self._scan_identifier_text()
            self._emit(TokenType.IDENTIFIER, value, line, col)
        elif ch.isalpha():
            value = self._scan_identifier_text()
            self._emit(_KEYWORDS.get(value, TokenType.IDENTIFIER), value, line, col)
        else:
            raise LexerError(f"Unexpected character: {ch!r}", line, col)

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_number(self, line: int, col: int) -> None:
        """Scan a number or semantic version such as ``0.2.0-rc.1``."""
        start = self._pos
        while self._pos < len(self._source) and (
            self._current().isalnum() or self._current() in ".+" or (self._current() == "-" and self._peek() != ">")
        ):
            self._advance()
        self._emit(TokenType.NUMBER, self._source[start : self._pos], line, col)

    def _scan_identifier_text(self) -> str:
        """Scan a kebab-case identifier such as ``list-items`` or ``get-v2``."""
        start = self._pos
        while self._pos < len(self._source):
            ch = self._current()
            if ch.isalnum():
                self._advance()
            elif ch == "-" and self._peek().isalnum():
                self._advance()
            else:
                break
        return self._source[start : self._pos]


def _strip_block_doc(body: str) -> list[str]:
    """Return the lines of a ``/** */`` comment body without leading ``*`` gutters."""
    lines: list[str] = []
    for raw in body.splitlines():
        text = raw.strip()
        if text.startswith("*"):
            text = text[1:].lstrip()
        lines.append(text)
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines
