# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Adapter onto the wasmtime execution engine.

Requires the optional ``wasmtime`` dependency (``pip install wasm2openapi[engine]``),
which is imported on first use so that ``convert`` and ``check`` work without it.

Values cross the boundary in wasmtime's component representation: records as
``Record`` objects with one attribute per field, flags as sets of names, tuples
as tuples and ``list<u8>`` as ``bytes``. Variants, options and results travel as
the bare payload (``None`` for a case without one) unless two of their cases map
to the same Python class, in which case wasmtime wraps them in
``Variant(tag, payload)``; see :func:`is_tagged`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wasm2openapi.errors import CallFailed, UnsupportedType
from wasm2openapi.model.entities import AnonymousResult, FunctionSignature
from wasm2openapi.model.types import (
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
    ResultValue,
    ScalarValue,
    TupleValue,
    TypedValue,
    VariantValue,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class EngineError(Exception):
    """Raised when a component cannot be loaded or instantiated."""


@dataclass
class ComponentInstance:
    """One instantiated component together with the store that owns it.

    ``pending`` holds the function whose post-return step has not run yet;
    wasmtime refuses further calls into the instance until it has.
    """

    store: Any
    instance: Any
    pending: Any = None


class WasmtimeRuntime:
    """Compiles a component once and instantiates it on demand."""

    def __init__(self, component: Path, *, wasi: bool = True) -> None:
        try:
            import wasmtime
            import wasmtime.component
        except ImportError as exc:
            raise EngineError("Serving requires the 'wasmtime' package: pip install wasm2openapi[engine]") from exc
        self._wasmtime = wasmtime
        self._wasi = wasi
        self._engine = wasmtime.Engine()
        try:
            self._component = wasmtime.component.Component.from_file(self._engine, str(component))
        except (wasmtime.WasmtimeError, OSError) as exc:
            raise EngineError(f"Cannot compile component '{component}': {exc}") from exc
        logger.info("Compiled component %s", component)

    def instantiate(self) -> ComponentInstance:
        """Create a fresh store and instance of the component."""
        wasmtime = self._wasmtime
        store = wasmtime.Store(self._engine)
        linker = wasmtime.component.Linker(self._engine)
        if self._wasi:
            store.set_wasi(wasmtime.WasiConfig())
            linker.add_wasip2()
        try:
            instance = linker.instantiate(store, self._component)
        except wasmtime.WasmtimeError as exc:
            raise EngineError(f"Cannot instantiate component: {exc}") from exc
        return ComponentInstance(store, instance)

    def bind(self, signature: FunctionSignature) -> WasmtimeExport:
        """Return the export handle of *signature*."""
        return WasmtimeExport(signature)


class WasmtimeExport:
    """An exported function, located in an instance by its export path."""

    def __init__(self, signature: FunctionSignature) -> None:
        self.signature = signature

    def invoke(self, instance: ComponentInstance, args: list[TypedValue]) -> list[TypedValue]:
        func = self._lookup(instance)
        raw_args = [to_engine(arg, param.type) for arg, param in zip(args, self.signature.params)]
        raw = func(instance.store, *raw_args)
        instance.pending = func
        results = self.signature.results
        if isinstance(results, AnonymousResult):
            return [from_engine(raw, results.type)]
        if not results.results:
            return []
        if len(results.results) == 1:
            raw = (raw,)
        return [from_engine(value, r.type) for value, r in zip(raw, results.results)]

    def post_return(self, instance: ComponentInstance) -> None:
        func, instance.pending = instance.pending, None
        if func is not None:
            func.post_return(instance.store)

    def _lookup(self, instance: ComponentInstance) -> Any:
        index = None
        for name in self.signature.export_path:
            index = instance.instance.get_export_index(instance.store, name, index)
            if index is None:
                raise CallFailed(f"component has no export '{'/'.join(self.signature.export_path)}'")
        func = instance.instance.get_func(instance.store, index)
        if func is None:
            raise CallFailed(f"export '{self.signature.qualified_name}' is not a function")
        return func


class UnboundExport:
    """Placeholder handle for endpoints that are described but never invoked."""

    def __init__(self, signature: FunctionSignature) -> None:
        self.signature = signature

    def invoke(self, instance: Any, args: list[TypedValue]) -> list[TypedValue]:
        raise CallFailed(f"'{self.signature.qualified_name}' is not bound to a component instance")

    def post_return(self, instance: Any) -> None:
        return None


def unbound_binder(signature: FunctionSignature) -> UnboundExport:
    """Binder for ``convert`` and ``check``, where nothing is executed."""
    return UnboundExport(signature)


def to_engine(value: TypedValue, ty: TypeDescriptor) -> Any:
    """Convert a typed value into wasmtime's component value representation."""
    if isinstance(value, ScalarValue):
        return value.value
    if isinstance(value, ListValue):
        assert isinstance(ty, ListType)
        items = [to_engine(item, ty.element_type) for item in value.items]
        if _is_bytes(ty):
            return bytes(items)
        return items
    if isinstance(value, RecordValue):
        assert isinstance(ty, RecordType)
        record = _component_types().Record()
        for f in ty.fields:
            setattr(record, f.name, to_engine(value.get(f.name), f.type))
        return record
    if isinstance(value, TupleValue):
        assert isinstance(ty, TupleType)
        return tuple(to_engine(item, t) for item, t in zip(value.items, ty.elements))
    if isinstance(value, VariantValue):
        assert isinstance(ty, VariantType)
        return _lower_case(ty, value.case, value.payload)
    if isinstance(value, EnumValue):
        return value.case
    if isinstance(value, OptionValue):
        assert isinstance(ty, OptionType)
        if not value.is_some:
            return _lower_case(ty, "none", None)
        return _lower_case(ty, "some", value.value)
    if isinstance(value, ResultValue):
        assert isinstance(ty, ResultType)
        return _lower_case(ty, "ok" if value.is_ok else "err", value.payload)
    if isinstance(value, FlagsValue):
        return set(value.flags)
    raise UnsupportedType(f"Resource handles cannot be passed to wasmtime ({type_name(ty)})")


def from_engine(raw: Any, ty: TypeDescriptor) -> TypedValue:
    """Convert a wasmtime component value of type *ty* into a typed value."""
    if isinstance(ty, PrimitiveType):
        if ty.primitive in (Primitive.F32, Primitive.F64):
            raw = float(raw)
        return ScalarValue(ty.primitive, raw)
    if isinstance(ty, ListType):
        return ListValue(tuple(from_engine(item, ty.element_type) for item in raw))
    if isinstance(ty, RecordType):
        return RecordValue(tuple((f.name, from_engine(getattr(raw, f.name), f.type)) for f in ty.fields))
    if isinstance(ty, TupleType):
        return TupleValue(tuple(from_engine(item, t) for item, t in zip(raw, ty.elements)))
    if isinstance(ty, VariantType):
        name, payload = _lift_case(ty, raw)
        return VariantValue(name, payload)
    if isinstance(ty, EnumType):
        return EnumValue(raw)
    if isinstance(ty, OptionType):
        name, payload = _lift_case(ty, raw)
        return OptionValue(name == "some", payload)
    if isinstance(ty, ResultType):
        name, payload = _lift_case(ty, raw)
        return ResultValue(name == "ok", payload)
    if isinstance(ty, FlagsType):
        return FlagsValue(tuple(name for name in ty.flags if name in raw))
    if isinstance(ty, ResourceType):
        raise UnsupportedType(f"Resource handles cannot be returned from wasmtime ({type_name(ty)})")
    raise UnsupportedType(f"Cannot convert values of type '{type_name(ty)}'")


def is_tagged(ty: VariantType | OptionType | ResultType) -> bool:
    """Whether wasmtime represents values of *ty* as ``Variant(tag, payload)``.

    wasmtime only tags a variant-like value when the Python classes of two
    cases overlap, so that the bare payload would not identify the case. A
    case without payload counts as ``object``.
    """
    seen: set[type] = set()
    for _, case in _cases(ty):
        classes = _engine_classes(case)
        if classes & seen:
            return True
        seen |= classes
    return False


# ################
# Implementation
# ################

_VariantLike = VariantType | OptionType | ResultType


def _component_types() -> Any:
    import wasmtime.component

    return wasmtime.component


def _is_bytes(ty: ListType) -> bool:
    return ty.element_type == PrimitiveType(primitive=Primitive.U8)


def _cases(ty: _VariantLike) -> list[tuple[str, TypeDescriptor | None]]:
    if isinstance(ty, VariantType):
        return [(c.name, c.type) for c in ty.cases]
    if isinstance(ty, OptionType):
        return [("none", None), ("some", ty.inner_type)]
    return [("ok", ty.ok_type), ("err", ty.err_type)]


def _engine_classes(ty: TypeDescriptor | None) -> set[type]:
    """The Python classes wasmtime produces for values of *ty*."""
    if ty is None:
        return {object}
    if isinstance(ty, PrimitiveType):
        if ty.primitive == Primitive.BOOL:
            return {bool}
        if ty.primitive in (Primitive.F32, Primitive.F64):
            return {float}
        if ty.primitive in (Primitive.CHAR, Primitive.STRING):
            return {str}
        return {int}
    if isinstance(ty, ListType):
        return {bytes} if _is_bytes(ty) else {list}
    if isinstance(ty, RecordType):
        return {_component_types().Record}
    if isinstance(ty, TupleType):
        return {tuple}
    if isinstance(ty, EnumType):
        return {str}
    if isinstance(ty, FlagsType):
        return {set}
    if isinstance(ty, ResourceType):
        component = _component_types()
        return {component.ResourceAny, component.ResourceHost}
    if isinstance(ty, (VariantType, OptionType, ResultType)):
        if is_tagged(ty):
            return {_component_types().Variant}
        classes: set[type] = set()
        for _, case in _cases(ty):
            classes |= _engine_classes(case)
        return classes
    raise UnsupportedType(f"Cannot convert values of type '{type_name(ty)}'")


def _lower_case(ty: _VariantLike, name: str, payload: TypedValue | None) -> Any:
    case_type = dict(_cases(ty))[name]
    raw = None if payload is None or case_type is None else to_engine(payload, case_type)
    if is_tagged(ty):
        return _component_types().Variant(name, raw)
    return raw


def _lift_case(ty: _VariantLike, raw: Any) -> tuple[str, TypedValue | None]:
    cases = _cases(ty)
    if is_tagged(ty):
        case_type = dict(cases)[raw.tag]
        return raw.tag, None if case_type is None else from_engine(raw.payload, case_type)
    # Exact class first, so that a bool never lands in an integer case.
    for name, case_type in cases:
        if case_type is not None and type(raw) in _engine_classes(case_type):
            return name, from_engine(raw, case_type)
    for name, case_type in cases:
        if object in _engine_classes(case_type):
            return name, None if case_type is None else from_engine(raw, case_type)
    raise CallFailed(f"wasmtime returned a {type(raw).__name__} for '{type_name(ty)}'")
