# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for WIT interface descriptions."""

from wasm2openapi.parser.lexer import LexerError, Token, TokenType, tokenize

__all__ = [
    "LexerError",
    "Token",
    "TokenType",
    "tokenize",
]
