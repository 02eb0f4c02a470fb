# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the mapping of type descriptors to JSON Schema."""

import pytest
from jsonschema import Draft202012Validator

from wasm2openapi.bridge.schema import F32_OVERFLOW, F64_OVERFLOW, map_params, map_results, map_type
from wasm2openapi.errors import UnsupportedType
from wasm2openapi.model.entities import AnonymousResult, NamedResults, Param
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
    VariantType,
    primitive,
)

# ###############
# Test Helpers
# ###############

POINT = RecordType(
    name="point",
    fields=(FieldDef(name="x", type=primitive("s32")), FieldDef(name="y", type=primitive("s32"))),
)


# ###############
# Scalars
# ###############


class TestScalars:
    @pytest.mark.parametrize(
        ("name", "fmt", "low", "high"),
        [
            ("u8", "uint8", 0, 255),
            ("u16", "uint16", 0, 65535),
            ("u32", "uint32", 0, 2**32 - 1),
            ("u64", "uint64", 0, 2**64 - 1),
            ("s8", "int8", -128, 127),
            ("s32", "int32", -(2**31), 2**31 - 1),
            ("s64", "int64", -(2**63), 2**63 - 1),
        ],
    )
    def test_integers_carry_bounds(self, name: str, fmt: str, low: int, high: int) -> None:
        assert map_type(primitive(name)) == {"type": "integer", "format": fmt, "minimum": low, "maximum": high}

    def test_bool(self) -> None:
        assert map_type(primitive("bool")) == {"type": "boolean"}

    def test_string(self) -> None:
        assert map_type(primitive("string")) == {"type": "string"}

    def test_char_is_single_character_string(self) -> None:
        assert map_type(primitive("char")) == {"type": "string", "minLength": 1, "maxLength": 1}

    def test_f64_accepts_number_or_sentinel(self) -> None:
        assert map_type(primitive("f64")) == {
            "oneOf": [
                {
                    "type": "number",
                    "format": "double",
                    "exclusiveMinimum": -F64_OVERFLOW,
                    "exclusiveMaximum": F64_OVERFLOW,
                },
                {"type": "string", "enum": ["NaN", "Infinity", "-Infinity"]},
            ]
        }

    def test_f32_is_bounded(self) -> None:
        number = map_type(primitive("f32"))["oneOf"][0]
        assert number["format"] == "float"
        assert number["exclusiveMaximum"] == F32_OVERFLOW
        assert number["exclusiveMinimum"] == -F32_OVERFLOW


# ###############
# Composites
# ###############


class TestComposites:
    def test_list(self) -> None:
        assert map_type(ListType(element_type=primitive("bool"))) == {"type": "array", "items": {"type": "boolean"}}

    def test_record_requires_every_field(self) -> None:
        schema = map_type(POINT)
        assert schema["title"] == "point"
        assert schema["required"] == ["x", "y"]
        assert schema["additionalProperties"] is False
        assert schema["properties"]["x"]["format"] == "int32"

    def test_record_nests_recursively(self) -> None:
        line = RecordType(name="line", fields=(FieldDef(name="a", type=POINT), FieldDef(name="b", type=POINT)))
        schema = map_type(line)
        assert schema["properties"]["a"] == map_type(POINT)

    def test_tuple_is_fixed_length(self) -> None:
        schema = map_type(TupleType(elements=(primitive("u8"), primitive("string"))))
        assert schema["prefixItems"] == [map_type(primitive("u8")), {"type": "string"}]
        assert schema["items"] is False
        assert schema["minItems"] == schema["maxItems"] == 2

    def test_variant_cases_are_tagged_objects(self) -> None:
        shape = VariantType(name="shape", cases=(CaseDef(name="none"), CaseDef(name="circle", type=primitive("f64"))))
        schema = map_type(shape)
        none_case, circle_case = schema["oneOf"]
        assert none_case["properties"] == {"tag": {"const": "none"}}
        assert none_case["required"] == ["tag"]
        assert circle_case["required"] == ["tag", "value"]

    def test_enum(self) -> None:
        assert map_type(EnumType(name="color", cases=("red", "green"))) == {
            "type": "string",
            "enum": ["red", "green"],
            "title": "color",
        }

    def test_option_is_nullable(self) -> None:
        assert map_type(OptionType(inner_type=primitive("string"))) == {
            "oneOf": [{"type": "string"}, {"type": "null"}]
        }

    def test_nested_option_wraps_inner_value(self) -> None:
        schema = map_type(OptionType(inner_type=OptionType(inner_type=primitive("string"))))
        null, some = schema["oneOf"]
        assert null == {"type": "null"}
        assert some["required"] == ["some"]

    def test_result_with_absent_payloads(self) -> None:
        ok, err = map_type(ResultType())["oneOf"]
        assert ok["properties"] == {"ok": {"type": "null"}}
        assert err["properties"] == {"err": {"type": "null"}}

    def test_flags(self) -> None:
        schema = map_type(FlagsType(name="perms", flags=("read", "write")))
        assert schema["items"] == {"type": "string", "enum": ["read", "write"]}
        assert schema["uniqueItems"] is True

    def test_resource_is_u32_handle(self) -> None:
        schema = map_type(ResourceType(name="blob"))
        assert schema["type"] == "integer"
        assert schema["maximum"] == 2**32 - 1

    def test_unresolved_reference_is_an_error(self) -> None:
        with pytest.raises(UnsupportedType):
            map_type(NamedTypeRef(name="point"))

    def test_every_schema_is_valid_json_schema(self) -> None:
        for ty in (
            POINT,
            ListType(element_type=POINT),
            OptionType(inner_type=OptionType(inner_type=primitive("f32"))),
            ResultType(ok_type=POINT, err_type=primitive("string")),
            FlagsType(name="f", flags=("a",)),
        ):
            Draft202012Validator.check_schema(map_type(ty))


# ###############
# Request and Response Bodies
# ###############


class TestBodies:
    def test_params_object(self) -> None:
        schema = map_params((Param(name="x", type=primitive("s32")), Param(name="y", type=primitive("s32"))))
        assert schema["type"] == "object"
        assert list(schema["properties"]) == ["x", "y"]
        assert schema["required"] == ["x", "y"]

    def test_no_params(self) -> None:
        assert map_params(()) == {"type": "object", "properties": {}, "required": []}

    def test_anonymous_result_is_raw(self) -> None:
        assert map_results(AnonymousResult(type=primitive("bool"))) == {"type": "boolean"}

    def test_named_results_object(self) -> None:
        results = NamedResults(results=(Param(name="q", type=primitive("u32")), Param(name="r", type=primitive("u32"))))
        schema = map_results(results)
        assert schema["required"] == ["q", "r"]
