# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Syntax tree of a parsed WIT document, before name resolution."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel
from pydantic import Field as _Field

from wasm2openapi.model.types import TypeDescriptor

# ###############
# Public Interface
# ###############


class UseName(BaseModel):
    """One name brought into scope by a ``use`` statement, with optional alias."""

    name: str
    alias: str | None = None

    @property
    def local_name(self) -> str:
        return self.alias or self.name


class UseDecl(BaseModel):
    """``use path.{a, b as c};`` inside an interface or world."""

    interface: str
    names: list[UseName] = _Field(default_factory=list)
    line: int = 0


class TypeDecl(BaseModel):
    """A named type definition (alias, record, variant, enum, flags, or resource)."""

    name: str
    type: TypeDescriptor
    docs: str = ""
    line: int = 0


class FuncDecl(BaseModel):
    """A function declaration with unresolved parameter and result types.

    ``result`` holds a single type for ``-> T`` and ``named_results`` holds the
    pairs for ``-> (a: T, ...)``; both are empty for a function without results.
    """

    name: str
    params: list[tuple[str, TypeDescriptor]] = _Field(default_factory=list)
    result: TypeDescriptor | None = None
    named_results: list[tuple[str, TypeDescriptor]] = _Field(default_factory=list)
    docs: str = ""
    line: int = 0
    column: int = 0


class InterfaceDecl(BaseModel):
    """An ``interface`` block, top-level or inline in a world export."""

    name: str
    package: str | None = None
    uses: list[UseDecl] = _Field(default_factory=list)
    types: list[TypeDecl] = _Field(default_factory=list)
    functions: list[FuncDecl] = _Field(default_factory=list)
    docs: str = ""
    line: int = 0

    @property
    def qualified_name(self) -> str:
        """Return ``ns:pkg/name@version`` when the interface belongs to a package."""
        if self.package is None:
            return self.name
        pkg, _, version = self.package.partition("@")
        return f"{pkg}/{self.name}@{version}" if version else f"{pkg}/{self.name}"


class ExportDecl(BaseModel):
    """An item of a world that contributes exported functions.

    ``kind`` is ``func`` (``export f: func(...)``), ``interface`` (inline
    ``export i: interface { ... }``), ``path`` (``export some-iface;``), or
    ``include`` (``include other-world;``).
    """

    kind: Literal["func", "interface", "path", "include"]
    name: str
    func: FuncDecl | None = None
    interface: InterfaceDecl | None = None
    line: int = 0
    column: int = 0


class WorldDecl(BaseModel):
    """A ``world`` block."""

    name: str
    package: str | None = None
    uses: list[UseDecl] = _Field(default_factory=list)
    types: list[TypeDecl] = _Field(default_factory=list)
    exports: list[ExportDecl] = _Field(default_factory=list)
    docs: str = ""
    line: int = 0


class WitDocument(BaseModel):
    """Top-level model representing the parsed contents of a WIT document."""

    packages: list[str] = _Field(default_factory=list)
    interfaces: list[InterfaceDecl] = _Field(default_factory=list)
    worlds: list[WorldDecl] = _Field(default_factory=list)
    aliases: dict[str, str] = _Field(default_factory=dict)
