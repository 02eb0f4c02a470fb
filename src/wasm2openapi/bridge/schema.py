# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema Mapper: JSON Schema (2020-12, as used by OpenAPI 3.1) for type descriptors.

Every schema produced here describes exactly the JSON shape that
:mod:`wasm2openapi.bridge.codec` accepts on input and produces on output.
"""

from __future__ import annotations

from typing import Any

from wasm2openapi.errors import UnsupportedType
from wasm2openapi.model.entities import AnonymousResult, Param, ResultShape
from wasm2openapi.model.types import (
    FLOAT_PRIMITIVES,
    INTEGER_RANGES,
    EnumType,
    FlagsType,
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
    type_name,
)

# ###############
# Public Interface
# ###############

# JSON spellings of non-finite floats.
NAN = "NaN"
POS_INFINITY = "Infinity"
NEG_INFINITY = "-Infinity"
FLOAT_SENTINELS: tuple[str, ...] = (NAN, POS_INFINITY, NEG_INFINITY)

# Smallest magnitude that rounds to infinity in single precision.
F32_OVERFLOW = 2.0**128 - 2.0**103

# Smallest magnitude that rounds to infinity in double precision. No double can
# hold it, so it stays an integer.
F64_OVERFLOW = 2**1024 - 2**970

# Key naming the case of a variant and the key holding its payload.
VARIANT_TAG = "tag"
VARIANT_VALUE = "value"

# Wrapper key distinguishing some(none) from none for nested options.
OPTION_SOME = "some"

RESULT_OK = "ok"
RESULT_ERR = "err"


def map_type(ty: TypeDescriptor) -> dict[str, Any]:
    """Return the JSON Schema of *ty*.

    Raises:
        UnsupportedType: If *ty* is an unresolved reference or unknown variant.
    """
    if isinstance(ty, PrimitiveType):
        return _primitive_schema(ty.primitive)
    if isinstance(ty, ListType):
        return {"type": "array", "items": map_type(ty.element_type)}
    if isinstance(ty, RecordType):
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {f.name: map_type(f.type) for f in ty.fields},
            "required": [f.name for f in ty.fields],
            "additionalProperties": False,
        }
        if ty.name:
            schema["title"] = ty.name
        return schema
    if isinstance(ty, TupleType):
        count = len(ty.elements)
        return {
            "type": "array",
            "prefixItems": [map_type(e) for e in ty.elements],
            "items": False,
            "minItems": count,
            "maxItems": count,
        }
    if isinstance(ty, VariantType):
        return _variant_schema(ty)
    if isinstance(ty, EnumType):
        schema = {"type": "string", "enum": list(ty.cases)}
        if ty.name:
            schema["title"] = ty.name
        return schema
    if isinstance(ty, OptionType):
        return _option_schema(ty)
    if isinstance(ty, ResultType):
        return {
            "oneOf": [
                _single_key_object(RESULT_OK, _payload_schema(ty.ok_type)),
                _single_key_object(RESULT_ERR, _payload_schema(ty.err_type)),
            ]
        }
    if isinstance(ty, FlagsType):
        schema = {
            "type": "array",
            "items": {"type": "string", "enum": list(ty.flags)},
            "uniqueItems": True,
        }
        if ty.name:
            schema["title"] = ty.name
        return schema
    if isinstance(ty, ResourceType):
        low, high = INTEGER_RANGES[Primitive.U32]
        return {
            "type": "integer",
            "minimum": low,
            "maximum": high,
            "description": f"Handle to a '{ty.name}' resource",
        }
    raise UnsupportedType(f"No schema for type '{type_name(ty)}'")


def map_params(params: tuple[Param, ...] | list[Param]) -> dict[str, Any]:
    """Return the object schema of a request body keyed by parameter name."""
    return {
        "type": "object",
        "properties": {p.name: map_type(p.type) for p in params},
        "required": [p.name for p in params],
    }


def map_results(results: ResultShape) -> dict[str, Any]:
    """Return the response schema of a result shape.

    A single anonymous result is the response body itself; named results form
    an object keyed by result name.
    """
    if isinstance(results, AnonymousResult):
        return map_type(results.type)
    return {
        "type": "object",
        "properties": {r.name: map_type(r.type) for r in results.results},
        "required": [r.name for r in results.results],
    }


# ################
# Implementation
# ################

_INTEGER_FORMATS: dict[Primitive, str] = {
    Primitive.U8: "uint8",
    Primitive.U16: "uint16",
    Primitive.U32: "uint32",
    Primitive.U64: "uint64",
    Primitive.S8: "int8",
    Primitive.S16: "int16",
    Primitive.S32: "int32",
    Primitive.S64: "int64",
}


def _primitive_schema(prim: Primitive) -> dict[str, Any]:
    if prim == Primitive.BOOL:
        return {"type": "boolean"}
    if prim in INTEGER_RANGES:
        low, high = INTEGER_RANGES[prim]
        return {"type": "integer", "format": _INTEGER_FORMATS[prim], "minimum": low, "maximum": high}
    if prim in FLOAT_PRIMITIVES:
        number: dict[str, Any] = {"type": "number"}
        if prim == Primitive.F32:
            number.update({"format": "float", "exclusiveMinimum": -F32_OVERFLOW, "exclusiveMaximum": F32_OVERFLOW})
        else:
            number.update({"format": "double", "exclusiveMinimum": -F64_OVERFLOW, "exclusiveMaximum": F64_OVERFLOW})
        return {"oneOf": [number, {"type": "string", "enum": list(FLOAT_SENTINELS)}]}
    if prim == Primitive.CHAR:
        return {"type": "string", "minLength": 1, "maxLength": 1}
    return {"type": "string"}


def _variant_schema(ty: VariantType) -> dict[str, Any]:
    alternatives: list[dict[str, Any]] = []
    for case in ty.cases:
        properties: dict[str, Any] = {VARIANT_TAG: {"const": case.name}}
        required = [VARIANT_TAG]
        if case.type is not None:
            properties[VARIANT_VALUE] = map_type(case.type)
            required.append(VARIANT_VALUE)
        alternatives.append(
            {
                "type": "object",
                "properties": properties,
                "required": required,
                "additionalProperties": False,
            }
        )
    schema: dict[str, Any] = {"oneOf": alternatives}
    if ty.name:
        schema["title"] = ty.name
    return schema


def _option_schema(ty: OptionType) -> dict[str, Any]:
    null = {"type": "null"}
    if isinstance(ty.inner_type, OptionType):
        return {"oneOf": [null, _single_key_object(OPTION_SOME, map_type(ty.inner_type))]}
    return {"oneOf": [map_type(ty.inner_type), null]}


def _payload_schema(ty: TypeDescriptor | None) -> dict[str, Any]:
    """Schema of a result payload; an absent payload is carried as null."""
    if ty is None:
        return {"type": "null"}
    return map_type(ty)


def _single_key_object(key: str, value_schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {key: value_schema},
        "required": [key],
        "additionalProperties": False,
    }
