# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Typed values exchanged with a component during a single call.

Values mirror the variants of :mod:`wasm2openapi.model.types` but carry data.
They are produced fresh per call and never outlive the request.
"""

from __future__ import annotations

from dataclasses import dataclass

from wasm2openapi.model.types import Primitive

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ScalarValue:
    """A bool, integer, float, char, or string value."""

    primitive: Primitive
    value: bool | int | float | str


@dataclass(frozen=True)
class ListValue:
    items: tuple[TypedValue, ...] = ()


@dataclass(frozen=True)
class RecordValue:
    """Record fields in declaration order."""

    fields: tuple[tuple[str, TypedValue], ...] = ()

    def get(self, name: str) -> TypedValue:
        """Return the value of field *name*."""
        for field_name, value in self.fields:
            if field_name == name:
                return value
        raise KeyError(name)


@dataclass(frozen=True)
class TupleValue:
    items: tuple[TypedValue, ...] = ()


@dataclass(frozen=True)
class VariantValue:
    case: str
    payload: TypedValue | None = None


@dataclass(frozen=True)
class EnumValue:
    case: str


@dataclass(frozen=True)
class OptionValue:
    """``some(value)``, or ``none`` when *is_some* is False."""

    is_some: bool
    value: TypedValue | None = None


@dataclass(frozen=True)
class ResultValue:
    is_ok: bool
    payload: TypedValue | None = None


@dataclass(frozen=True)
class FlagsValue:
    """The set flags, in declaration order."""

    flags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ResourceValue:
    resource: str
    handle: int


TypedValue = (
    ScalarValue
    | ListValue
    | RecordValue
    | TupleValue
    | VariantValue
    | EnumValue
    | OptionValue
    | ResultValue
    | FlagsValue
    | ResourceValue
)
