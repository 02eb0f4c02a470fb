# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for WIT documents.

Converts a token stream produced by the lexer into a :class:`WitDocument`.
Type references are left unresolved (:class:`NamedTypeRef`); semantic
analysis resolves them.
"""

from wasm2openapi.model.document import (
    ExportDecl,
    FuncDecl,
    InterfaceDecl,
    TypeDecl,
    UseDecl,
    UseName,
    WitDocument,
    WorldDecl,
)
from wasm2openapi.model.types import (
    CaseDef,
    EnumType,
    FieldDef,
    FlagsType,
    ListType,
    NamedTypeRef,
    OptionType,
    Primitive,
    PrimitiveType,
    RecordType,
    ResourceType,
    ResultType,
    TupleType,
    TypeDescriptor,
    VariantType,
)
from wasm2openapi.parser.lexer import Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


def parse(source: str) -> WitDocument:
    """Parse WIT source text into a :class:`WitDocument`.

    Args:
        source: The full text of a WIT document.

    Returns:
        A WitDocument with unresolved type references.

    Raises:
        LexerError: If the source contains invalid characters or unterminated comments.
        ParseError: If the source is syntactically invalid.
    """
    tokens = tokenize(source)
    return _Parser(tokens).parse()


# ################
# Implementation
# ################

_KEYWORD_TYPES: frozenset[TokenType] = frozenset(
    {
        TokenType.PACKAGE,
        TokenType.WORLD,
        TokenType.INTERFACE,
        TokenType.USE,
        TokenType.AS,
        TokenType.TYPE,
        TokenType.RECORD,
        TokenType.VARIANT,
        TokenType.ENUM,
        TokenType.FLAGS,
        TokenType.RESOURCE,
        TokenType.FUNC,
        TokenType.ASYNC,
        TokenType.STATIC,
        TokenType.CONSTRUCTOR,
        TokenType.IMPORT,
        TokenType.EXPORT,
        TokenType.INCLUDE,
        TokenType.WITH,
    }
)

_PRIMITIVE_TYPES: dict[str, Primitive] = {
    "bool": Primitive.BOOL,
    "u8": Primitive.U8,
    "u16": Primitive.U16,
    "u32": Primitive.U32,
    "u64": Primitive.U64,
    "s8": Primitive.S8,
    "s16": Primitive.S16,
    "s32": Primitive.S32,
    "s64": Primitive.S64,
    "f32": Primitive.F32,
    "f64": Primitive.F64,
    "float32": Primitive.F32,
    "float64": Primitive.F64,
    "char": Primitive.CHAR,
    "string": Primitive.STRING,
}

_UNSUPPORTED_TYPES: frozenset[str] = frozenset({"future", "stream", "error-context"})


class _Parser:
    """Recursive-descent parser for WIT token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> WitDocument:
        """Parse the full token stream and return a WitDocument."""
        result = WitDocument()
        package: str | None = None
        while not self._at_end():
            if self._check(TokenType.PACKAGE):
                name, nested = self._parse_package_header()
                result.packages.append(name)
                if nested:
                    while not self._check(TokenType.RBRACE, TokenType.EOF):
                        self._parse_top_level(result, name)
                    self._expect(TokenType.RBRACE)
                else:
                    package = name
            else:
                self._parse_top_level(result, package)
        return result

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _peek_type(self, offset: int = 0) -> TokenType:
        """Return the token type *offset* tokens ahead of the current one."""
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index].type

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._peek_type() == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError if the current token does not match.
        """
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            raise ParseError(
                f"Expected {expected}, got {tok.value or 'end of input'!r}",
                tok.line,
                tok.column,
            )
        return self._advance()

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types (without
        consuming).
        """
        return self._peek_type() in types

    def _accept(self, token_type: TokenType) -> bool:
        """Consume the current token if it has *token_type*; return whether it did."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _expect_name_token(self) -> Token:
        """Consume the current token as a name.

        Accepts identifiers and keywords used in name positions (e.g. a
        function named 'type').  Raises ParseError for structural tokens and EOF.
        """
        tok = self._current()
        if tok.type != TokenType.IDENTIFIER and tok.type not in _KEYWORD_TYPES:
            raise ParseError(
                f"Expected identifier, got {tok.value or 'end of input'!r}",
                tok.line,
                tok.column,
            )
        return self._advance()

    def _skip_gates(self) -> None:
        """Skip feature gates such as ``@since(version = 0.2.0)``."""
        while self._check(TokenType.AT):
            self._advance()  # consume @
            self._expect(TokenType.IDENTIFIER)
            if self._check(TokenType.LPAREN):
                self._skip_balanced(TokenType.LPAREN, TokenType.RPAREN)

    def _skip_balanced(self, open_type: TokenType, close_type: TokenType) -> None:
        """Consume a balanced ``open ... close`` token group."""
        start = self._expect(open_type)
        depth = 1
        while depth:
            if self._at_end():
                raise ParseError(f"Unterminated {open_type.value!r}", start.line, start.column)
            tok = self._advance()
            if tok.type == open_type:
                depth += 1
            elif tok.type == close_type:
                depth -= 1

    # ------------------------------------------------------------------
    # Top-level declarations
    # ------------------------------------------------------------------

    def _parse_package_header(self) -> tuple[str, bool]:
        """Parse: package ns:name[@version] (';' | '{').

        Returns the package name and whether it opens a nested block.
        """
        self._expect(TokenType.PACKAGE)
        name = self._parse_package_name()
        if self._accept(TokenType.LBRACE):
            return name, True
        self._expect(TokenType.SEMICOLON)
        return name, False

    def _parse_package_name(self) -> str:
        """Parse: ns:name[/nested]*[@version]"""
        parts = [self._expect_name_token().value]
        self._expect(TokenType.COLON)
        parts.append(":")
        parts.append(self._expect_name_token().value)
        while self._check(TokenType.COLON):
            self._advance()
            parts.append(":" + self._expect_name_token().value)
        parts.append(self._parse_optional_version())
        return "".join(parts)

    def _parse_optional_version(self) -> str:
        """Parse an optional ``@version`` suffix and return it including the ``@``."""
        if self._check(TokenType.AT) and self._peek_type(1) == TokenType.NUMBER:
            self._advance()  # consume @
            return "@" + self._advance().value
        return ""

    def _parse_top_level(self, result: WitDocument, package: str | None) -> None:
        """Parse one top-level declaration and append it to the document."""
        docs = self._current().docs
        self._skip_gates()
        tok = self._current()
        if tok.type == TokenType.INTERFACE:
            iface = self._parse_interface(package)
            iface.docs = iface.docs or docs
            result.interfaces.append(iface)
        elif tok.type == TokenType.WORLD:
            world = self._parse_world(package)
            world.docs = world.docs or docs
            result.worlds.append(world)
        elif tok.type == TokenType.USE:
            self._advance()  # consume 'use'
            path = self._parse_use_path()
            alias = path.rsplit("/", 1)[-1].split("@", 1)[0]
            if self._accept(TokenType.AS):
                alias = self._expect_name_token().value
            self._expect(TokenType.SEMICOLON)
            result.aliases[alias] = path
        else:
            raise ParseError(
                f"Unexpected token {tok.value or 'end of input'!r} at top level",
                tok.line,
                tok.column,
            )

    def _parse_use_path(self) -> str:
        """Parse an interface path such as ``types`` or ``wasi:io/streams@0.2.0``."""
        first = self._expect_name_token().value
        if not self._check(TokenType.COLON):
            return first
        self._advance()  # consume :
        parts = [first, ":", self._expect_name_token().value]
        while self._check(TokenType.COLON):
            self._advance()
            parts.append(":" + self._expect_name_token().value)
        self._expect(TokenType.SLASH)
        parts.append("/")
        parts.append(self._expect_name_token().value)
        parts.append(self._parse_optional_version())
        return "".join(parts)

    def _parse_use(self) -> UseDecl:
        """Parse: use <path>.{ a, b as c };"""
        tok = self._expect(TokenType.USE)
        path = self._parse_use_path()
        self._expect(TokenType.DOT)
        self._expect(TokenType.LBRACE)
        use = UseDecl(interface=path, line=tok.line)
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            name = self._expect_name_token().value
            alias: str | None = None
            if self._accept(TokenType.AS):
                alias = self._expect_name_token().value
            use.names.append(UseName(name=name, alias=alias))
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE)
        self._expect(TokenType.SEMICOLON)
        return use

    # ------------------------------------------------------------------
    # Interface declarations
    # ------------------------------------------------------------------

    def _parse_interface(self, package: str | None) -> InterfaceDecl:
        """Parse: interface <name> { <item>* }"""
        tok = self._expect(TokenType.INTERFACE)
        name_tok = self._expect_name_token()
        iface = InterfaceDecl(name=name_tok.value, package=package, docs=tok.docs, line=tok.line)
        self._parse_interface_body(iface)
        return iface

    def _parse_interface_body(self, iface: InterfaceDecl) -> None:
        """Parse: { <item>* } into *iface*."""
        self._expect(TokenType.LBRACE)
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            docs = self._current().docs
            self._skip_gates()
            if self._check(TokenType.USE):
                iface.uses.append(self._parse_use())
            elif self._check(
                TokenType.TYPE,
                TokenType.RECORD,
                TokenType.VARIANT,
                TokenType.ENUM,
                TokenType.FLAGS,
                TokenType.RESOURCE,
            ):
                iface.types.append(self._parse_type_decl(docs))
            elif self._peek_type(1) == TokenType.COLON:
                name_tok = self._expect_name_token()
                self._expect(TokenType.COLON)
                func = self._parse_func(name_tok, docs)
                self._expect(TokenType.SEMICOLON)
                iface.functions.append(func)
            else:
                tok = self._current()
                raise ParseError(
                    f"Unexpected token {tok.value or 'end of input'!r} in interface body",
                    tok.line,
                    tok.column,
                )
        self._expect(TokenType.RBRACE)

    # ------------------------------------------------------------------
    # World declarations
    # ------------------------------------------------------------------

    def _parse_world(self, package: str | None) -> WorldDecl:
        """Parse: world <name> { <item>* }"""
        tok = self._expect(TokenType.WORLD)
        name_tok = self._expect_name_token()
        world = WorldDecl(name=name_tok.value, package=package, docs=tok.docs, line=tok.line)
        self._expect(TokenType.LBRACE)
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            docs = self._current().docs
            self._skip_gates()
            if self._check(TokenType.EXPORT):
                world.exports.append(self._parse_export(package, docs))
            elif self._check(TokenType.IMPORT):
                self._skip_import()
            elif self._check(TokenType.INCLUDE):
                world.exports.append(self._parse_include())
            elif self._check(TokenType.USE):
                world.uses.append(self._parse_use())
            elif self._check(
                TokenType.TYPE,
                TokenType.RECORD,
                TokenType.VARIANT,
                TokenType.ENUM,
                TokenType.FLAGS,
                TokenType.RESOURCE,
            ):
                world.types.append(self._parse_type_decl(docs))
            else:
                tok = self._current()
                raise ParseError(
                    f"Unexpected token {tok.value or 'end of input'!r} in world body",
                    tok.line,
                    tok.column,
                )
        self._expect(TokenType.RBRACE)
        return world

    def _parse_export(self, package: str | None, docs: str) -> ExportDecl:
        """Parse: export <name>: func(...); | export <name>: interface {...} | export <path>;"""
        tok = self._expect(TokenType.EXPORT)
        if self._peek_type(1) == TokenType.COLON and self._peek_type(2) in (
            TokenType.FUNC,
            TokenType.ASYNC,
            TokenType.INTERFACE,
        ):
            name_tok = self._expect_name_token()
            self._expect(TokenType.COLON)
            if self._check(TokenType.INTERFACE):
                self._advance()  # consume 'interface'
                iface = InterfaceDecl(name=name_tok.value, package=package, docs=docs, line=name_tok.line)
                self._parse_interface_body(iface)
                self._accept(TokenType.SEMICOLON)
                return ExportDecl(
                    kind="interface", name=name_tok.value, interface=iface, line=tok.line, column=tok.column
                )
            func = self._parse_func(name_tok, docs)
            self._expect(TokenType.SEMICOLON)
            return ExportDecl(kind="func", name=name_tok.value, func=func, line=tok.line, column=tok.column)
        path = self._parse_use_path()
        self._expect(TokenType.SEMICOLON)
        return ExportDecl(kind="path", name=path, line=tok.line, column=tok.column)

    def _parse_include(self) -> ExportDecl:
        """Parse: include <path> [with { a as b, ... }];"""
        tok = self._expect(TokenType.INCLUDE)
        path = self._parse_use_path()
        if self._check(TokenType.WITH):
            self._advance()
            self._skip_balanced(TokenType.LBRACE, TokenType.RBRACE)
        self._accept(TokenType.SEMICOLON)
        return ExportDecl(kind="include", name=path, line=tok.line, column=tok.column)

    def _skip_import(self) -> None:
        """Consume an ``import`` item; imports contribute no endpoints."""
        self._expect(TokenType.IMPORT)
        while not self._check(TokenType.SEMICOLON, TokenType.EOF):
            if self._check(TokenType.LBRACE):
                self._skip_balanced(TokenType.LBRACE, TokenType.RBRACE)
                self._accept(TokenType.SEMICOLON)
                return
            self._advance()
        self._expect(TokenType.SEMICOLON)

    # ------------------------------------------------------------------
    # Function declarations
    # ------------------------------------------------------------------

    def _parse_func(self, name_tok: Token, docs: str) -> FuncDecl:
        """Parse: [async] func(<params>) [-> <type> | -> (<named results>)]"""
        self._accept(TokenType.ASYNC)
        self._expect(TokenType.FUNC)
        func = FuncDecl(name=name_tok.value, docs=docs, line=name_tok.line, column=name_tok.column)
        func.params = self._parse_named_type_list()
        if self._accept(TokenType.ARROW):
            if self._check(TokenType.LPAREN):
                func.named_results = self._parse_named_type_list()
            else:
                func.result = self._parse_type()
        return func

    def _parse_named_type_list(self) -> list[tuple[str, TypeDescriptor]]:
        """Parse: ( [name: type [, name: type]* [,]] )"""
        self._expect(TokenType.LPAREN)
        items: list[tuple[str, TypeDescriptor]] = []
        while not self._check(TokenType.RPAREN, TokenType.EOF):
            name = self._expect_name_token().value
            self._expect(TokenType.COLON)
            items.append((name, self._parse_type()))
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN)
        return items

    # ------------------------------------------------------------------
    # Type declarations
    # ------------------------------------------------------------------

    def _parse_type_decl(self, docs: str) -> TypeDecl:
        """Parse one of: type, record, variant, enum, flags, or resource declarations."""
        tok = self._advance()
        name = self._expect_name_token().value
        if tok.type == TokenType.TYPE:
            self._expect(TokenType.EQUALS)
            ty: TypeDescriptor = self._parse_type()
            self._expect(TokenType.SEMICOLON)
        elif tok.type == TokenType.RECORD:
            fields = [FieldDef(name=n, type=t) for n, t in self._parse_braced_fields()]
            ty = RecordType(name=name, fields=tuple(fields))
        elif tok.type == TokenType.VARIANT:
            ty = VariantType(name=name, cases=tuple(self._parse_variant_cases()))
        elif tok.type == TokenType.ENUM:
            ty = EnumType(name=name, cases=tuple(self._parse_braced_names()))
        elif tok.type == TokenType.FLAGS:
            ty = FlagsType(name=name, flags=tuple(self._parse_braced_names()))
        else:
            if self._check(TokenType.LBRACE):
                # Resource methods are not exposed as endpoints.
                self._skip_balanced(TokenType.LBRACE, TokenType.RBRACE)
            else:
                self._expect(TokenType.SEMICOLON)
            ty = ResourceType(name=name)
        return TypeDecl(name=name, type=ty, docs=docs, line=tok.line)

    def _parse_braced_fields(self) -> list[tuple[str, TypeDescriptor]]:
        """Parse: { name: type [, name: type]* [,] }"""
        self._expect(TokenType.LBRACE)
        items: list[tuple[str, TypeDescriptor]] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            self._skip_gates()
            name = self._expect_name_token().value
            self._expect(TokenType.COLON)
            items.append((name, self._parse_type()))
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE)
        return items

    def _parse_braced_names(self) -> list[str]:
        """Parse: { name [, name]* [,] }"""
        self._expect(TokenType.LBRACE)
        names: list[str] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            self._skip_gates()
            names.append(self._expect_name_token().value)
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE)
        return names

    def _parse_variant_cases(self) -> list[CaseDef]:
        """Parse: { name[(type)] [, name[(type)]]* [,] }"""
        self._expect(TokenType.LBRACE)
        cases: list[CaseDef] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            self._skip_gates()
            name = self._expect_name_token().value
            payload: TypeDescriptor | None = None
            if self._accept(TokenType.LPAREN):
                payload = self._parse_type()
                self._expect(TokenType.RPAREN)
            cases.append(CaseDef(name=name, type=payload))
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE)
        return cases

    # ------------------------------------------------------------------
    # Type references
    # ------------------------------------------------------------------

    def _parse_type(self) -> TypeDescriptor:
        """Parse a type reference.

        Handles primitive types, list<T>, tuple<...>, option<T>, result<...>,
        own<R>, borrow<R>, or a named type.
        """
        name_tok = self._expect_name_token()
        name = name_tok.value
        if name in _PRIMITIVE_TYPES:
            return PrimitiveType(primitive=_PRIMITIVE_TYPES[name])
        if name in _UNSUPPORTED_TYPES:
            raise ParseError(f"Unsupported type {name!r}", name_tok.line, name_tok.column)
        if name == "list":
            self._expect(TokenType.LANGLE)
            element = self._parse_type()
            if self._accept(TokenType.COMMA):
                self._expect(TokenType.NUMBER)  # fixed-size lists are exposed as lists
            self._expect(TokenType.RANGLE)
            return ListType(element_type=element)
        if name == "option":
            self._expect(TokenType.LANGLE)
            inner = self._parse_type()
            self._expect(TokenType.RANGLE)
            return OptionType(inner_type=inner)
        if name == "tuple":
            self._expect(TokenType.LANGLE)
            elements: list[TypeDescriptor] = []
            while not self._check(TokenType.RANGLE, TokenType.EOF):
                elements.append(self._parse_type())
                if not self._accept(TokenType.COMMA):
                    break
            self._expect(TokenType.RANGLE)
            return TupleType(elements=tuple(elements))
        if name == "result":
            return self._parse_result_type()
        if name in ("own", "borrow"):
            self._expect(TokenType.LANGLE)
            resource_tok = self._expect_name_token()
            self._expect(TokenType.RANGLE)
            return ResourceType(name=resource_tok.value, borrowed=name == "borrow")
        return NamedTypeRef(name=name)

    def _parse_result_type(self) -> ResultType:
        """Parse the remainder of: result | result<T> | result<_, E> | result<T, E>"""
        if not self._accept(TokenType.LANGLE):
            return ResultType()
        ok: TypeDescriptor | None = None
        if not self._accept(TokenType.UNDERSCORE):
            ok = self._parse_type()
        err: TypeDescriptor | None = None
        if self._accept(TokenType.COMMA):
            err = self._parse_type()
        self._expect(TokenType.RANGLE)
        return ResultType(ok_type=ok, err_type=err)
