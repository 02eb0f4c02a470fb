# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model: type descriptors, typed values, signatures and endpoints."""

from wasm2openapi.model.entities import (
    AnonymousResult,
    Endpoint,
    FunctionSignature,
    NamedResults,
    Operation,
    Param,
    ResultShape,
    split_docs,
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
    primitive,
    type_name,
)
from wasm2openapi.model.values import (
    EnumValue,
    FlagsValue,
    ListValue,
    OptionValue,
    RecordValue,
    ResourceValue,
    ResultValue,
    ScalarValue,
    TupleValue,
    TypedValue,
    VariantValue,
)

__all__ = [
    # Type descriptors
    "Primitive",
    "PrimitiveType",
    "ListType",
    "FieldDef",
    "RecordType",
    "TupleType",
    "CaseDef",
    "VariantType",
    "EnumType",
    "OptionType",
    "ResultType",
    "FlagsType",
    "ResourceType",
    "NamedTypeRef",
    "TypeDescriptor",
    "primitive",
    "type_name",
    # Typed values
    "ScalarValue",
    "ListValue",
    "RecordValue",
    "TupleValue",
    "VariantValue",
    "EnumValue",
    "OptionValue",
    "ResultValue",
    "FlagsValue",
    "ResourceValue",
    "TypedValue",
    # Entities
    "Param",
    "NamedResults",
    "AnonymousResult",
    "ResultShape",
    "FunctionSignature",
    "Operation",
    "Endpoint",
    "split_docs",
]
