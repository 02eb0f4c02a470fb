# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Value Codec: conversion between JSON values and typed component values.

:func:`encode` is driven by the expected type descriptor and never trusts the
JSON value to describe itself; every shape or range violation is reported as
:class:`~wasm2openapi.errors.TypeMismatch` with a locator of the offending
value. :func:`decode` is total.

Floating point: ``f32`` inputs are rounded to single precision, and ``f32``
outputs are rendered as the shortest decimal that rounds back to the same
single-precision value. Non-finite floats travel as the strings ``"NaN"``,
``"Infinity"`` and ``"-Infinity"``.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Mapping
from typing import Any

from wasm2openapi.bridge.schema import (
    F32_OVERFLOW,
    F64_OVERFLOW,
    FLOAT_SENTINELS,
    NAN,
    NEG_INFINITY,
    OPTION_SOME,
    POS_INFINITY,
    RESULT_ERR,
    RESULT_OK,
    VARIANT_TAG,
    VARIANT_VALUE,
)
from wasm2openapi.errors import MissingParameter, TypeMismatch, UnsupportedType
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

JsonValue = Any

# ###############
# Public Interface
# ###############


def encode(value: JsonValue, ty: TypeDescriptor, *, path: str = "value") -> TypedValue:
    """Convert a JSON value into a typed value of type *ty*.

    Args:
        value: A value as produced by ``json.loads``.
        ty: The expected type.
        path: Locator of *value* used in error messages.

    Raises:
        TypeMismatch: If *value* does not have the shape *ty* requires.
        UnsupportedType: If *ty* is not a resolved type descriptor.
    """
    if isinstance(ty, PrimitiveType):
        return _encode_primitive(value, ty.primitive, path)
    if isinstance(ty, ListType):
        items = _expect_array(value, ty, path)
        return ListValue(tuple(encode(item, ty.element_type, path=f"{path}[{i}]") for i, item in enumerate(items)))
    if isinstance(ty, RecordType):
        return _encode_record(value, ty, path)
    if isinstance(ty, TupleType):
        items = _expect_array(value, ty, path)
        if len(items) != len(ty.elements):
            raise TypeMismatch(path, f"{type_name(ty)} of {len(ty.elements)} elements", f"array of {len(items)}")
        pairs = enumerate(zip(items, ty.elements))
        return TupleValue(tuple(encode(item, t, path=f"{path}[{i}]") for i, (item, t) in pairs))
    if isinstance(ty, VariantType):
        return _encode_variant(value, ty, path)
    if isinstance(ty, EnumType):
        if not isinstance(value, str) or value not in ty.cases:
            raise TypeMismatch(path, f"one of {list(ty.cases)}", _describe(value))
        return EnumValue(value)
    if isinstance(ty, OptionType):
        return _encode_option(value, ty, path)
    if isinstance(ty, ResultType):
        return _encode_result(value, ty, path)
    if isinstance(ty, FlagsType):
        return _encode_flags(value, ty, path)
    if isinstance(ty, ResourceType):
        return ResourceValue(ty.name, _expect_integer(value, Primitive.U32, path, expected=f"{type_name(ty)} handle"))
    raise UnsupportedType(f"Cannot encode values of type '{type_name(ty)}'")


def decode(value: TypedValue) -> JsonValue:
    """Convert a typed value into its JSON representation. Never fails."""
    if isinstance(value, ScalarValue):
        if value.primitive in FLOAT_PRIMITIVES:
            return _decode_float(float(value.value), value.primitive)
        return value.value
    if isinstance(value, (ListValue, TupleValue)):
        return [decode(item) for item in value.items]
    if isinstance(value, RecordValue):
        return {name: decode(item) for name, item in value.fields}
    if isinstance(value, VariantValue):
        if value.payload is None:
            return {VARIANT_TAG: value.case}
        return {VARIANT_TAG: value.case, VARIANT_VALUE: decode(value.payload)}
    if isinstance(value, EnumValue):
        return value.case
    if isinstance(value, OptionValue):
        if not value.is_some or value.value is None:
            return None
        if isinstance(value.value, OptionValue):
            return {OPTION_SOME: decode(value.value)}
        return decode(value.value)
    if isinstance(value, ResultValue):
        key = RESULT_OK if value.is_ok else RESULT_ERR
        return {key: None if value.payload is None else decode(value.payload)}
    if isinstance(value, FlagsValue):
        return list(value.flags)
    return value.handle


def encode_params(body: Mapping[str, JsonValue], params: tuple[Param, ...] | list[Param]) -> list[TypedValue]:
    """Encode the arguments of a call from a JSON object keyed by parameter name.

    Parameters are checked in declaration order and the first failure is raised.

    Raises:
        MissingParameter: If a parameter has no key in *body*.
        TypeMismatch: If a parameter value has the wrong shape.
    """
    args: list[TypedValue] = []
    for param in params:
        if param.name not in body:
            raise MissingParameter(param.name)
        args.append(encode(body[param.name], param.type, path=param.name))
    return args


def decode_results(results: list[TypedValue], shape: ResultShape) -> JsonValue:
    """Shape the values returned by a call as the response body.

    A single anonymous result is returned directly; named results become an
    object keyed by result name.
    """
    if isinstance(shape, AnonymousResult):
        return decode(results[0])
    return {r.name: decode(v) for r, v in zip(shape.results, results)}


# ################
# Implementation
# ################


def _describe(value: JsonValue) -> str:
    """Return the JSON type name of *value*."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _encode_primitive(value: JsonValue, prim: Primitive, path: str) -> ScalarValue:
    if prim == Primitive.BOOL:
        if not isinstance(value, bool):
            raise TypeMismatch(path, "boolean", _describe(value))
        return ScalarValue(prim, value)
    if prim in INTEGER_RANGES:
        return ScalarValue(prim, _expect_integer(value, prim, path))
    if prim in FLOAT_PRIMITIVES:
        return ScalarValue(prim, _encode_float(value, prim, path))
    if not isinstance(value, str):
        raise TypeMismatch(path, "string" if prim == Primitive.STRING else "char", _describe(value))
    if prim == Primitive.CHAR and (len(value) != 1 or _is_surrogate(value)):
        raise TypeMismatch(path, "string of exactly one character", f"string of length {len(value)}")
    if _has_surrogates(value):
        raise TypeMismatch(path, "string of Unicode scalar values", "string with unpaired surrogates")
    return ScalarValue(prim, value)


def _expect_integer(value: JsonValue, prim: Primitive, path: str, *, expected: str | None = None) -> int:
    """Return *value* as an integer within the range of *prim*."""
    low, high = INTEGER_RANGES[prim]
    expected = expected or f"{prim.value} integer"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatch(path, expected, _describe(value))
    if isinstance(value, float):
        if not value.is_integer():
            raise TypeMismatch(path, expected, f"number {value!r}")
        value = int(value)
    if not low <= value <= high:
        raise TypeMismatch(path, f"{expected} in range {low}..{high}", str(value))
    return value


def _encode_float(value: JsonValue, prim: Primitive, path: str) -> float:
    if isinstance(value, str) and value in FLOAT_SENTINELS:
        return {NAN: math.nan, POS_INFINITY: math.inf, NEG_INFINITY: -math.inf}[value]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatch(path, f"{prim.value} number", _describe(value))
    try:
        number = float(value)
    except OverflowError:
        raise TypeMismatch(path, f"{prim.value} number", "integer out of floating-point range") from None
    if abs(number) >= F64_OVERFLOW:
        # Infinities only arrive through the string spellings.
        raise TypeMismatch(path, f"finite {prim.value} number", str(value))
    if prim == Primitive.F32:
        if abs(number) >= F32_OVERFLOW:
            raise TypeMismatch(path, "f32 number within single-precision range", str(value))
        number = _to_f32(number)
    return number


def _decode_float(number: float, prim: Primitive) -> float | str:
    if math.isnan(number):
        return NAN
    if math.isinf(number):
        return POS_INFINITY if number > 0 else NEG_INFINITY
    if prim == Primitive.F32:
        return _shortest_f32(number)
    return number


def _to_f32(number: float) -> float:
    """Round *number* to the nearest single-precision value."""
    return struct.unpack("<f", struct.pack("<f", number))[0]


def _shortest_f32(number: float) -> float:
    """Return the shortest decimal that rounds to the same single-precision value."""
    for digits in range(6, 10):
        candidate = float(f"{number:.{digits}g}")
        if _to_f32(candidate) == number:
            return candidate
    return number


def _is_surrogate(text: str) -> bool:
    return 0xD800 <= ord(text) <= 0xDFFF


def _has_surrogates(text: str) -> bool:
    return any(0xD800 <= ord(ch) <= 0xDFFF for ch in text)


def _expect_array(value: JsonValue, ty: TypeDescriptor, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise TypeMismatch(path, f"array ({type_name(ty)})", _describe(value))
    return value


def _expect_object(value: JsonValue, ty: TypeDescriptor, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeMismatch(path, f"object ({type_name(ty)})", _describe(value))
    return value


def _reject_unknown_keys(obj: dict[str, Any], allowed: set[str], path: str) -> None:
    for key in obj:
        if key not in allowed:
            raise TypeMismatch(f"{path}.{key}", "no such key", _describe(obj[key]))


def _encode_record(value: JsonValue, ty: RecordType, path: str) -> RecordValue:
    obj = _expect_object(value, ty, path)
    fields: list[tuple[str, TypedValue]] = []
    for f in ty.fields:
        if f.name not in obj:
            raise TypeMismatch(f"{path}.{f.name}", type_name(f.type), "missing field")
        fields.append((f.name, encode(obj[f.name], f.type, path=f"{path}.{f.name}")))
    _reject_unknown_keys(obj, {f.name for f in ty.fields}, path)
    return RecordValue(tuple(fields))


def _encode_variant(value: JsonValue, ty: VariantType, path: str) -> VariantValue:
    obj = _expect_object(value, ty, path)
    tag = obj.get(VARIANT_TAG)
    cases = {c.name: c for c in ty.cases}
    if not isinstance(tag, str) or tag not in cases:
        actual = _describe(tag) if VARIANT_TAG in obj else "missing key"
        raise TypeMismatch(f"{path}.{VARIANT_TAG}", f"one of {list(cases)}", actual)
    case = cases[tag]
    if case.type is None:
        _reject_unknown_keys(obj, {VARIANT_TAG}, path)
        return VariantValue(tag)
    if VARIANT_VALUE not in obj:
        raise TypeMismatch(f"{path}.{VARIANT_VALUE}", type_name(case.type), "missing key")
    _reject_unknown_keys(obj, {VARIANT_TAG, VARIANT_VALUE}, path)
    return VariantValue(tag, encode(obj[VARIANT_VALUE], case.type, path=f"{path}.{VARIANT_VALUE}"))


def _encode_option(value: JsonValue, ty: OptionType, path: str) -> OptionValue:
    if value is None:
        return OptionValue(False)
    if isinstance(ty.inner_type, OptionType):
        obj = _expect_object(value, ty, path)
        if OPTION_SOME not in obj:
            raise TypeMismatch(f"{path}.{OPTION_SOME}", type_name(ty.inner_type), "missing key")
        _reject_unknown_keys(obj, {OPTION_SOME}, path)
        return OptionValue(True, encode(obj[OPTION_SOME], ty.inner_type, path=f"{path}.{OPTION_SOME}"))
    return OptionValue(True, encode(value, ty.inner_type, path=path))


def _encode_result(value: JsonValue, ty: ResultType, path: str) -> ResultValue:
    obj = _expect_object(value, ty, path)
    keys = [k for k in (RESULT_OK, RESULT_ERR) if k in obj]
    if len(keys) != 1 or len(obj) != 1:
        raise TypeMismatch(path, f"object with exactly one of '{RESULT_OK}' or '{RESULT_ERR}'", f"keys {sorted(obj)}")
    is_ok = keys[0] == RESULT_OK
    payload_type = ty.ok_type if is_ok else ty.err_type
    payload_path = f"{path}.{keys[0]}"
    payload = obj[keys[0]]
    if payload_type is None:
        if payload is not None:
            raise TypeMismatch(payload_path, "null", _describe(payload))
        return ResultValue(is_ok)
    return ResultValue(is_ok, encode(payload, payload_type, path=payload_path))


def _encode_flags(value: JsonValue, ty: FlagsType, path: str) -> FlagsValue:
    items = _expect_array(value, ty, path)
    seen: set[str] = set()
    for i, item in enumerate(items):
        if not isinstance(item, str) or item not in ty.flags:
            raise TypeMismatch(f"{path}[{i}]", f"one of {list(ty.flags)}", _describe(item))
        if item in seen:
            raise TypeMismatch(f"{path}[{i}]", "each flag at most once", f"duplicate '{item}'")
        seen.add(item)
    return FlagsValue(tuple(name for name in ty.flags if name in seen))
