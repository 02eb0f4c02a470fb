# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the WIT lexical scanner."""

import pytest

from wasm2openapi.parser.lexer import LexerError, Token, TokenType, tokenize

# ###############
# Test Helpers
# ###############


def _tokens_no_eof(source: str) -> list[Token]:
    """Return all tokens except the terminal EOF token."""
    result = tokenize(source)
    assert result[-1].type == TokenType.EOF
    return result[:-1]


def _types(source: str) -> list[TokenType]:
    """Return the token types for all tokens except EOF."""
    return [tok.type for tok in _tokens_no_eof(source)]


def _values(source: str) -> list[str]:
    """Return the token values for all tokens except EOF."""
    return [tok.value for tok in _tokens_no_eof(source)]


# ###############
# EOF Handling
# ###############


class TestEof:
    def test_empty_string_produces_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].line == 1
        assert tokens[0].column == 1

    def test_whitespace_only_produces_eof(self) -> None:
        tokens = tokenize("   \t\n  ")
        assert [t.type for t in tokens] == [TokenType.EOF]


# ###############
# Keywords and Identifiers
# ###############


class TestKeywords:
    @pytest.mark.parametrize(
        ("source", "expected_type"),
        [
            ("package", TokenType.PACKAGE),
            ("world", TokenType.WORLD),
            ("interface", TokenType.INTERFACE),
            ("use", TokenType.USE),
            ("record", TokenType.RECORD),
            ("variant", TokenType.VARIANT),
            ("enum", TokenType.ENUM),
            ("flags", TokenType.FLAGS),
            ("resource", TokenType.RESOURCE),
            ("func", TokenType.FUNC),
            ("export", TokenType.EXPORT),
            ("include", TokenType.INCLUDE),
        ],
    )
    def test_keyword(self, source: str, expected_type: TokenType) -> None:
        assert _types(source) == [expected_type]

    def test_type_names_are_identifiers(self) -> None:
        assert _types("u32 string list option result") == [TokenType.IDENTIFIER] * 5

    def test_percent_escapes_keyword(self) -> None:
        tokens = _tokens_no_eof("%record")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "record"

    def test_percent_without_identifier_raises(self) -> None:
        with pytest.raises(LexerError):
            tokenize("% x")


class TestIdentifiers:
    def test_kebab_case_identifier(self) -> None:
        assert _values("get-user-v2") == ["get-user-v2"]

    def test_identifier_followed_by_arrow(self) -> None:
        assert _types("func() -> u8") == [
            TokenType.FUNC,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.ARROW,
            TokenType.IDENTIFIER,
        ]

    def test_trailing_hyphen_is_an_error(self) -> None:
        with pytest.raises(LexerError):
            tokenize("name- x")


# ###############
# Symbols and Numbers
# ###############


class TestSymbols:
    def test_package_header(self) -> None:
        assert _types("package docs:calc@1.0.0;") == [
            TokenType.PACKAGE,
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.IDENTIFIER,
            TokenType.AT,
            TokenType.NUMBER,
            TokenType.SEMICOLON,
        ]

    def test_semver_with_prerelease_is_one_number(self) -> None:
        assert _values("0.2.0-rc.1") == ["0.2.0-rc.1"]

    def test_underscore_placeholder(self) -> None:
        assert _types("result<_, string>") == [
            TokenType.IDENTIFIER,
            TokenType.LANGLE,
            TokenType.UNDERSCORE,
            TokenType.COMMA,
            TokenType.IDENTIFIER,
            TokenType.RANGLE,
        ]

    def test_unexpected_character_raises_with_position(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            tokenize("world w {\n  $\n}")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 3


# ###############
# Comments and Documentation
# ###############


class TestComments:
    def test_line_comment_is_skipped(self) -> None:
        assert _types("// nothing here\nworld") == [TokenType.WORLD]

    def test_block_comment_is_skipped(self) -> None:
        assert _types("/* a\n b */ world") == [TokenType.WORLD]

    def test_unterminated_block_comment_raises(self) -> None:
        with pytest.raises(LexerError, match="Unterminated"):
            tokenize("/* never closed")

    def test_doc_comment_attaches_to_next_token(self) -> None:
        tokens = _tokens_no_eof("/// Adds two numbers.\n/// Wraps on overflow.\nadd")
        assert tokens[0].docs == "Adds two numbers.\nWraps on overflow."

    def test_block_doc_comment_strips_gutter(self) -> None:
        tokens = _tokens_no_eof("/**\n * Summary.\n *\n * Details.\n */\nadd")
        assert tokens[0].docs == "Summary.\n\nDetails."

    def test_plain_comment_discards_pending_docs(self) -> None:
        tokens = _tokens_no_eof("/// stale\n// plain\nadd")
        assert tokens[0].docs == ""

    def test_docs_are_consumed_by_one_token(self) -> None:
        tokens = _tokens_no_eof("/// doc\nadd: func")
        assert tokens[0].docs == "doc"
        assert tokens[1].docs == ""
