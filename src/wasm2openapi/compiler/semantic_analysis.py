# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic analysis for parsed WIT documents.

Resolves every named type reference to a concrete type descriptor, checks
structural correctness (duplicate names, unknown references, recursive type
definitions), and enumerates the exported functions as signatures.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from wasm2openapi.model.document import (
    ExportDecl,
    FuncDecl,
    InterfaceDecl,
    TypeDecl,
    UseDecl,
    WitDocument,
    WorldDecl,
)
from wasm2openapi.model.entities import AnonymousResult, FunctionSignature, NamedResults, Param
from wasm2openapi.model.types import (
    CaseDef,
    EnumType,
    FieldDef,
    FlagsType,
    ListType,
    NamedTypeRef,
    OptionType,
    RecordType,
    ResourceType,
    ResultType,
    TupleType,
    TypeDescriptor,
    VariantType,
)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class SemanticError:
    """A structural error detected during semantic analysis.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class Analysis:
    """Outcome of semantic analysis.

    Attributes:
        signatures: Exported functions in source order, with fully resolved types.
        errors: Structural errors; signatures are only meaningful when empty.
    """

    signatures: list[FunctionSignature] = field(default_factory=list)
    errors: list[SemanticError] = field(default_factory=list)


def analyze(document: WitDocument) -> Analysis:
    """Resolve a parsed WIT document and enumerate its exported functions.

    Exports are enumerated world by world in document order. A world-level
    function is exported under the world's name; an exported interface
    contributes its functions under the interface's name. ``include`` splices
    the included world's exports in place. A document without worlds exports
    every top-level interface.

    Checks performed:
    - Duplicate interface and world names.
    - Duplicate type names within an interface or world.
    - Duplicate function names within an interface or world.
    - Duplicate parameter, named-result, field, case, and flag names.
    - Named type references must resolve, locally or through ``use``.
    - ``use`` and ``export`` paths must name an interface defined in the document.
    - ``own``/``borrow`` must reference a resource.
    - Type definitions must not be recursive.

    Args:
        document: The parsed WIT document.

    Returns:
        An :class:`Analysis` with the signatures and any errors found.
    """
    return _SemanticAnalyzer(document).analyze()


# ################
# Implementation
# ################


@dataclass(eq=False)
class _Scope:
    """The types visible inside one interface or world."""

    label: str
    package: str | None
    types: dict[str, tuple[TypeDecl, _Scope]] = field(default_factory=dict)


class _SemanticAnalyzer:
    """Performs semantic analysis on a single WitDocument."""

    def __init__(self, document: WitDocument) -> None:
        self._doc = document
        self._errors: list[SemanticError] = []
        self._scopes: dict[int, _Scope] = {}
        self._building: set[int] = set()
        self._resolved: dict[tuple[int, str], TypeDescriptor] = {}
        self._resolving: set[tuple[int, str]] = set()

    def analyze(self) -> Analysis:
        """Run all checks, enumerate exports, and return the analysis."""
        self._check_duplicates(
            [i.qualified_name for i in self._doc.interfaces], "Duplicate interface '{}'"
        )
        self._check_duplicates(
            [_qualify(w.package, w.name) for w in self._doc.worlds], "Duplicate world '{}'"
        )

        signatures: list[FunctionSignature] = []
        if self._doc.worlds:
            for world in self._doc.worlds:
                signatures.extend(self._world_exports(world, set()))
        else:
            for iface in self._doc.interfaces:
                signatures.extend(self._interface_exports(iface, iface.qualified_name))

        # Type definitions no function references are still checked.
        for iface in self._doc.interfaces:
            self._resolve_all(iface)
        for world in self._doc.worlds:
            self._resolve_all(world)

        return Analysis(signatures=signatures, errors=_dedupe(self._errors))

    def _error(self, message: str) -> None:
        self._errors.append(SemanticError(message))

    def _check_duplicates(self, names: list[str], template: str) -> None:
        seen: set[str] = set()
        for name in names:
            if name in seen:
                self._error(template.format(name))
            seen.add(name)

    # ------------------------------------------------------------------
    # Export enumeration
    # ------------------------------------------------------------------

    def _world_exports(self, world: WorldDecl, including: set[str]) -> list[FunctionSignature]:
        key = _qualify(world.package, world.name)
        if key in including:
            self._error(f"Circular include involving world '{world.name}'")
            return []
        including = including | {key}

        scope = self._scope_for(world)
        self._check_duplicates(
            [e.name for e in world.exports if e.kind in ("func", "interface")],
            "Duplicate export '{}' in world '" + world.name + "'",
        )
        signatures: list[FunctionSignature] = []
        for export in world.exports:
            if export.kind == "func" and export.func is not None:
                signatures.append(self._signature(export.func, scope, world.name, (export.func.name,)))
            elif export.kind == "interface" and export.interface is not None:
                signatures.extend(self._interface_exports(export.interface, export.interface.name))
            elif export.kind == "path":
                iface = self._find_interface(export.name, world.package, f"world '{world.name}'")
                if iface is not None:
                    signatures.extend(self._interface_exports(iface, iface.qualified_name))
            elif export.kind == "include":
                included = self._find_world(export.name, world.package)
                if included is None:
                    self._error(f"Unknown world '{export.name}' included in world '{world.name}'")
                else:
                    signatures.extend(self._world_exports(included, including))
        return signatures

    def _interface_exports(self, iface: InterfaceDecl, export_name: str) -> list[FunctionSignature]:
        scope = self._scope_for(iface)
        self._check_duplicates(
            [f.name for f in iface.functions], "Duplicate function '{}' in interface '" + iface.name + "'"
        )
        return [self._signature(func, scope, iface.name, (export_name, func.name)) for func in iface.functions]

    def _signature(
        self,
        func: FuncDecl,
        scope: _Scope,
        namespace: str,
        export_path: tuple[str, ...],
    ) -> FunctionSignature:
        context = f"function '{func.name}' in {scope.label}"
        self._check_duplicates([n for n, _ in func.params], "Duplicate parameter '{}' in " + context)
        self._check_duplicates([n for n, _ in func.named_results], "Duplicate result '{}' in " + context)
        params = tuple(Param(name=n, type=self._resolve(t, scope)) for n, t in func.params)
        results: NamedResults | AnonymousResult
        if func.result is not None:
            results = AnonymousResult(type=self._resolve(func.result, scope))
        else:
            results = NamedResults(
                results=tuple(Param(name=n, type=self._resolve(t, scope)) for n, t in func.named_results)
            )
        return FunctionSignature(
            name=func.name,
            namespace=namespace,
            export_path=export_path,
            params=params,
            results=results,
            docs=func.docs,
        )

    # ------------------------------------------------------------------
    # Scopes and lookups
    # ------------------------------------------------------------------

    def _scope_for(self, owner: InterfaceDecl | WorldDecl) -> _Scope:
        """Return the scope of an interface or world, building it on first use."""
        key = id(owner)
        if key in self._scopes:
            return self._scopes[key]
        kind = "interface" if isinstance(owner, InterfaceDecl) else "world"
        scope = _Scope(label=f"{kind} '{owner.name}'", package=owner.package)
        self._scopes[key] = scope
        self._building.add(key)
        try:
            for use in owner.uses:
                self._apply_use(use, scope)
            for decl in owner.types:
                if decl.name in scope.types:
                    self._error(f"Duplicate type '{decl.name}' in {scope.label}")
                    continue
                scope.types[decl.name] = (decl, scope)
        finally:
            self._building.discard(key)
        return scope

    def _apply_use(self, use: UseDecl, scope: _Scope) -> None:
        target = self._find_interface(use.interface, scope.package, scope.label)
        if target is None:
            return
        if id(target) in self._building:
            self._error(f"Circular use of interface '{target.name}' in {scope.label}")
            return
        target_scope = self._scope_for(target)
        for name in use.names:
            if name.name not in target_scope.types:
                self._error(f"Type '{name.name}' is not defined in interface '{target.name}' (used in {scope.label})")
                continue
            if name.local_name in scope.types:
                self._error(f"Duplicate type '{name.local_name}' in {scope.label}")
                continue
            scope.types[name.local_name] = target_scope.types[name.name]

    def _find_interface(self, path: str, package: str | None, context: str) -> InterfaceDecl | None:
        path = self._doc.aliases.get(path, path)
        if "/" not in path:
            candidates = [i for i in self._doc.interfaces if i.name == path]
            local = [i for i in candidates if i.package == package]
            if local or candidates:
                return (local or candidates)[0]
        else:
            for iface in self._doc.interfaces:
                if iface.qualified_name == path:
                    return iface
            unversioned = path.split("@", 1)[0]
            for iface in self._doc.interfaces:
                if iface.qualified_name.split("@", 1)[0] == unversioned:
                    return iface
        self._error(f"Interface '{path}' referenced in {context} is not defined in the document")
        return None

    def _find_world(self, path: str, package: str | None) -> WorldDecl | None:
        if "/" in path:
            pkg, _, name = path.partition("/")
            name = name.split("@", 1)[0]
            for world in self._doc.worlds:
                if world.name == name and (world.package or "").split("@", 1)[0] == pkg.split("@", 1)[0]:
                    return world
            return None
        candidates = [w for w in self._doc.worlds if w.name == path]
        local = [w for w in candidates if w.package == package]
        return (local or candidates or [None])[0]

    # ------------------------------------------------------------------
    # Type resolution
    # ------------------------------------------------------------------

    def _resolve_all(self, owner: InterfaceDecl | WorldDecl) -> None:
        scope = self._scope_for(owner)
        for decl in owner.types:
            self._resolve(NamedTypeRef(name=decl.name), scope)

    def _resolve(self, ty: TypeDescriptor, scope: _Scope) -> TypeDescriptor:
        """Return *ty* with every named reference replaced by its definition."""
        if isinstance(ty, NamedTypeRef):
            return self._resolve_name(ty.name, scope)
        if isinstance(ty, ListType):
            return ListType(element_type=self._resolve(ty.element_type, scope))
        if isinstance(ty, OptionType):
            return OptionType(inner_type=self._resolve(ty.inner_type, scope))
        if isinstance(ty, TupleType):
            return TupleType(elements=tuple(self._resolve(e, scope) for e in ty.elements))
        if isinstance(ty, ResultType):
            return ResultType(
                ok_type=None if ty.ok_type is None else self._resolve(ty.ok_type, scope),
                err_type=None if ty.err_type is None else self._resolve(ty.err_type, scope),
            )
        if isinstance(ty, RecordType):
            label = f"record '{ty.name}'"
            self._check_duplicates([f.name for f in ty.fields], "Duplicate field '{}' in " + label)
            return RecordType(
                name=ty.name,
                fields=tuple(FieldDef(name=f.name, type=self._resolve(f.type, scope)) for f in ty.fields),
            )
        if isinstance(ty, VariantType):
            self._check_duplicates([c.name for c in ty.cases], "Duplicate case '{}' in variant '" + str(ty.name) + "'")
            return VariantType(
                name=ty.name,
                cases=tuple(
                    CaseDef(name=c.name, type=None if c.type is None else self._resolve(c.type, scope))
                    for c in ty.cases
                ),
            )
        if isinstance(ty, ResourceType):
            return self._resolve_handle(ty, scope)
        if isinstance(ty, EnumType):
            self._check_duplicates(list(ty.cases), "Duplicate case '{}' in enum '" + str(ty.name) + "'")
        elif isinstance(ty, FlagsType):
            self._check_duplicates(list(ty.flags), "Duplicate flag '{}' in flags '" + str(ty.name) + "'")
        return ty

    def _resolve_name(self, name: str, scope: _Scope) -> TypeDescriptor:
        entry = scope.types.get(name)
        if entry is None:
            self._error(f"Unknown type '{name}' in {scope.label}")
            return NamedTypeRef(name=name)
        decl, home = entry
        key = (id(home), decl.name)
        if key in self._resolved:
            return self._resolved[key]
        if key in self._resolving:
            self._error(f"Recursive type definition '{decl.name}' in {home.label}")
            return NamedTypeRef(name=name)
        self._resolving.add(key)
        try:
            if isinstance(decl.type, ResourceType):
                resolved: TypeDescriptor = decl.type
            else:
                resolved = self._resolve(decl.type, home)
        finally:
            self._resolving.discard(key)
        self._resolved[key] = resolved
        return resolved

    def _resolve_handle(self, ty: ResourceType, scope: _Scope) -> TypeDescriptor:
        """Resolve ``own<R>``/``borrow<R>`` so that *R* names a resource definition."""
        target = self._resolve_name(ty.name, scope)
        if isinstance(target, NamedTypeRef):
            return target
        if not isinstance(target, ResourceType):
            self._error(f"Type '{ty.name}' in {scope.label} is not a resource")
            return target
        return ResourceType(name=target.name, borrowed=ty.borrowed)


def _qualify(package: str | None, name: str) -> str:
    return f"{package}/{name}" if package else name


def _dedupe(errors: list[SemanticError]) -> list[SemanticError]:
    """Drop repeated errors while keeping first-occurrence order."""
    seen: set[SemanticError] = set()
    unique: list[SemanticError] = []
    for error in errors:
        if error not in seen:
            seen.add(error)
            unique.append(error)
    return unique
