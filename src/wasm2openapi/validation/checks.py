# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lint checks over the exported functions of a component.

These checks run on resolved signatures (after semantic analysis) and point
out exports that load fine but serve poorly over JSON.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from wasm2openapi.errors import UnsupportedType
from wasm2openapi.model.entities import AnonymousResult, FunctionSignature
from wasm2openapi.model.types import (
    ListType,
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
from wasm2openapi.server.registry import build_operation, endpoint_path

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal issue: the export is served, but perhaps not as intended.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


@dataclass(frozen=True)
class ValidationError:
    """A fatal issue: the export cannot be served correctly.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class ValidationResult:
    """Result of running validation checks.

    Attributes:
        warnings: Non-fatal issues found during validation.
        errors: Fatal errors that prevent serving an export.
    """

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal validation errors were found."""
        return len(self.errors) > 0


def validate(signatures: Sequence[FunctionSignature]) -> ValidationResult:
    """Run all validation checks on the exported functions of a component.

    Checks performed:

    1. **Undocumented functions** (warning): the operation has no summary.

    2. **Resource handles** (warning): parameters or results of ``own`` or
       ``borrow`` type carry bare integer handles that an HTTP client cannot
       create.

    3. **64-bit integers** (warning): ``u64`` and ``s64`` values beyond 2^53
       lose precision in JSON clients that parse numbers as doubles.

    4. **Duplicate paths** (warning): only the first function deriving a path
       is served.

    5. **Duplicate operation ids** (warning): operation ids are function names
       and repeat across namespaces.

    6. **Invalid schemas** (error): a request or response schema cannot be
       generated or is not a valid JSON Schema (draft 2020-12).

    Args:
        signatures: Exported functions in introspection order.

    Returns:
        A :class:`ValidationResult` containing any warnings and errors found.
    """
    warnings: list[ValidationWarning] = []
    errors: list[ValidationError] = []

    warnings.extend(_check_undocumented(signatures))
    warnings.extend(_check_resources(signatures))
    warnings.extend(_check_wide_integers(signatures))
    warnings.extend(_check_duplicate_paths(signatures))
    warnings.extend(_check_duplicate_operation_ids(signatures))
    errors.extend(_check_schemas(signatures))

    return ValidationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################


def _values(signature: FunctionSignature) -> Iterator[tuple[str, TypeDescriptor]]:
    """Yield ``(label, type)`` for every parameter and result of *signature*."""
    for param in signature.params:
        yield f"parameter '{param.name}'", param.type
    results = signature.results
    if isinstance(results, AnonymousResult):
        yield "result", results.type
    else:
        for result in results.results:
            yield f"result '{result.name}'", result.type


def _walk(ty: TypeDescriptor | None) -> Iterator[TypeDescriptor]:
    """Yield *ty* and every type nested inside it."""
    if ty is None:
        return
    yield ty
    if isinstance(ty, ListType):
        yield from _walk(ty.element_type)
    elif isinstance(ty, RecordType):
        for f in ty.fields:
            yield from _walk(f.type)
    elif isinstance(ty, TupleType):
        for element in ty.elements:
            yield from _walk(element)
    elif isinstance(ty, VariantType):
        for case in ty.cases:
            yield from _walk(case.type)
    elif isinstance(ty, OptionType):
        yield from _walk(ty.inner_type)
    elif isinstance(ty, ResultType):
        yield from _walk(ty.ok_type)
        yield from _walk(ty.err_type)


def _check_undocumented(signatures: Sequence[FunctionSignature]) -> list[ValidationWarning]:
    return [
        ValidationWarning(f"Function '{s.qualified_name}' has no documentation")
        for s in signatures
        if not s.docs.strip()
    ]


def _check_resources(signatures: Sequence[FunctionSignature]) -> list[ValidationWarning]:
    warnings: list[ValidationWarning] = []
    for signature in signatures:
        for label, ty in _values(signature):
            if any(isinstance(t, ResourceType) for t in _walk(ty)):
                warnings.append(
                    ValidationWarning(
                        f"Function '{signature.qualified_name}': {label} passes resource handles,"
                        " which HTTP clients cannot create"
                    )
                )
    return warnings


_WIDE = frozenset({Primitive.U64, Primitive.S64})


def _check_wide_integers(signatures: Sequence[FunctionSignature]) -> list[ValidationWarning]:
    warnings: list[ValidationWarning] = []
    for signature in signatures:
        for label, ty in _values(signature):
            if any(isinstance(t, PrimitiveType) and t.primitive in _WIDE for t in _walk(ty)):
                warnings.append(
                    ValidationWarning(
                        f"Function '{signature.qualified_name}': {label} uses 64-bit integers,"
                        " which may lose precision in JSON clients"
                    )
                )
    return warnings


def _check_duplicate_paths(signatures: Sequence[FunctionSignature]) -> list[ValidationWarning]:
    warnings: list[ValidationWarning] = []
    first: dict[str, FunctionSignature] = {}
    for signature in signatures:
        path = endpoint_path(signature)
        if path in first:
            warnings.append(
                ValidationWarning(
                    f"Path '{path}' of '{'#'.join(signature.export_path)}' is already taken by"
                    f" '{'#'.join(first[path].export_path)}'; it will not be served"
                )
            )
        else:
            first[path] = signature
    return warnings


def _check_duplicate_operation_ids(signatures: Sequence[FunctionSignature]) -> list[ValidationWarning]:
    namespaces: dict[str, list[str]] = {}
    for signature in signatures:
        owners = namespaces.setdefault(signature.name, [])
        if signature.namespace not in owners:
            owners.append(signature.namespace)
    return [
        ValidationWarning(f"Operation id '{name}' is shared by namespaces {', '.join(owners)}")
        for name, owners in namespaces.items()
        if len(owners) > 1
    ]


def _check_schemas(signatures: Sequence[FunctionSignature]) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for signature in signatures:
        try:
            operation = build_operation(signature)
        except UnsupportedType as exc:
            errors.append(ValidationError(f"Function '{signature.qualified_name}': {exc}"))
            continue
        for label, schema in (("request", operation.request_schema), ("response", operation.response_schema)):
            try:
                Draft202012Validator.check_schema(schema)
            except SchemaError as exc:
                errors.append(
                    ValidationError(f"Function '{signature.qualified_name}': invalid {label} schema: {exc.message}")
                )
    return errors
