# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type descriptors for component-interface types."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class Primitive(Enum):
    """Scalar types of the component model."""

    BOOL = "bool"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    S8 = "s8"
    S16 = "s16"
    S32 = "s32"
    S64 = "s64"
    F32 = "f32"
    F64 = "f64"
    CHAR = "char"
    STRING = "string"


# Inclusive value ranges of the integer primitives.
INTEGER_RANGES: dict[Primitive, tuple[int, int]] = {
    Primitive.U8: (0, 2**8 - 1),
    Primitive.U16: (0, 2**16 - 1),
    Primitive.U32: (0, 2**32 - 1),
    Primitive.U64: (0, 2**64 - 1),
    Primitive.S8: (-(2**7), 2**7 - 1),
    Primitive.S16: (-(2**15), 2**15 - 1),
    Primitive.S32: (-(2**31), 2**31 - 1),
    Primitive.S64: (-(2**63), 2**63 - 1),
}

FLOAT_PRIMITIVES: frozenset[Primitive] = frozenset({Primitive.F32, Primitive.F64})


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True)


class PrimitiveType(_Descriptor):
    """A scalar type such as ``u8``, ``f64`` or ``string``."""

    kind: Literal["primitive"] = "primitive"
    primitive: Primitive


class ListType(_Descriptor):
    """``list<T>``."""

    kind: Literal["list"] = "list"
    element_type: TypeDescriptor


class FieldDef(_Descriptor):
    """A named field of a record."""

    name: str
    type: TypeDescriptor


class RecordType(_Descriptor):
    """A record with ordered, named fields."""

    kind: Literal["record"] = "record"
    name: str | None = None
    fields: tuple[FieldDef, ...] = ()


class TupleType(_Descriptor):
    """``tuple<T1, T2, ...>``."""

    kind: Literal["tuple"] = "tuple"
    elements: tuple[TypeDescriptor, ...] = ()


class CaseDef(_Descriptor):
    """A case of a variant, with an optional payload type."""

    name: str
    type: TypeDescriptor | None = None


class VariantType(_Descriptor):
    """A tagged union of named cases."""

    kind: Literal["variant"] = "variant"
    name: str | None = None
    cases: tuple[CaseDef, ...] = ()


class EnumType(_Descriptor):
    """A variant whose cases carry no payload."""

    kind: Literal["enum"] = "enum"
    name: str | None = None
    cases: tuple[str, ...] = ()


class OptionType(_Descriptor):
    """``option<T>``."""

    kind: Literal["option"] = "option"
    inner_type: TypeDescriptor


class ResultType(_Descriptor):
    """``result<T, E>``; either side may be absent."""

    kind: Literal["result"] = "result"
    ok_type: TypeDescriptor | None = None
    err_type: TypeDescriptor | None = None


class FlagsType(_Descriptor):
    """A set of named boolean flags."""

    kind: Literal["flags"] = "flags"
    name: str | None = None
    flags: tuple[str, ...] = ()


class ResourceType(_Descriptor):
    """A handle to a resource (``own<R>`` or ``borrow<R>``)."""

    kind: Literal["resource"] = "resource"
    name: str
    borrowed: bool = False


class NamedTypeRef(_Descriptor):
    """An unresolved reference to a named type.

    Only produced by the parser; semantic analysis replaces every occurrence
    before a descriptor reaches the schema mapper or the codec.
    """

    kind: Literal["named"] = "named"
    name: str


# A component-interface type. The `kind` discriminator keeps deserialization unambiguous.
TypeDescriptor = Annotated[
    PrimitiveType
    | ListType
    | RecordType
    | TupleType
    | VariantType
    | EnumType
    | OptionType
    | ResultType
    | FlagsType
    | ResourceType
    | NamedTypeRef,
    _Field(discriminator="kind"),
]


def primitive(value: Primitive | str) -> PrimitiveType:
    """Return the descriptor of a scalar type, given by member or WIT name."""
    return PrimitiveType(primitive=Primitive(value))


def type_name(ty: TypeDescriptor | None) -> str:
    """Render a descriptor in WIT notation for messages (e.g. ``list<u8>``)."""
    if ty is None:
        return "_"
    if isinstance(ty, PrimitiveType):
        return ty.primitive.value
    if isinstance(ty, ListType):
        return f"list<{type_name(ty.element_type)}>"
    if isinstance(ty, TupleType):
        return "tuple<" + ", ".join(type_name(e) for e in ty.elements) + ">"
    if isinstance(ty, OptionType):
        return f"option<{type_name(ty.inner_type)}>"
    if isinstance(ty, ResultType):
        if ty.ok_type is None and ty.err_type is None:
            return "result"
        return f"result<{type_name(ty.ok_type)}, {type_name(ty.err_type)}>"
    if isinstance(ty, ResourceType):
        return f"borrow<{ty.name}>" if ty.borrowed else f"own<{ty.name}>"
    if isinstance(ty, NamedTypeRef):
        return ty.name
    return f"{ty.kind} {ty.name}" if ty.name else ty.kind


# Resolve forward references for models that nest descriptors.
ListType.model_rebuild()
FieldDef.model_rebuild()
RecordType.model_rebuild()
TupleType.model_rebuild()
CaseDef.model_rebuild()
VariantType.model_rebuild()
OptionType.model_rebuild()
ResultType.model_rebuild()
