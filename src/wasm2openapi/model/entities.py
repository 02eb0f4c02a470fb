# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Function signatures, endpoints, and operation descriptors."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from wasm2openapi.model.types import TypeDescriptor

# ###############
# Public Interface
# ###############


class Param(BaseModel):
    """A named, typed parameter (or named result) of a function."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeDescriptor


class NamedResults(BaseModel):
    """Results declared as ``-> (a: T, b: U)``; an empty tuple means no results."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["named"] = "named"
    results: tuple[Param, ...] = ()


class AnonymousResult(BaseModel):
    """A single unnamed result declared as ``-> T``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["anonymous"] = "anonymous"
    type: TypeDescriptor


ResultShape = Annotated[NamedResults | AnonymousResult, _Field(discriminator="kind")]


class FunctionSignature(BaseModel):
    """An exported function of a component.

    Attributes:
        name: Function name, unique within its namespace.
        namespace: World or interface name the function is exported from.
        export_path: Export names leading to the function in the component
            instance, e.g. ``("add",)`` or ``("docs:calc/math@1.0.0", "add")``.
        params: Ordered parameters.
        results: Result shape.
        docs: Documentation text; the first line is the summary.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str
    export_path: tuple[str, ...]
    params: tuple[Param, ...] = ()
    results: ResultShape = NamedResults()
    docs: str = ""

    @property
    def qualified_name(self) -> str:
        """Return ``namespace.name``."""
        return f"{self.namespace}.{self.name}"

    @property
    def result_count(self) -> int:
        """Return the number of values the function returns."""
        if isinstance(self.results, AnonymousResult):
            return 1
        return len(self.results.results)


class Operation(BaseModel):
    """The API description of one endpoint."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: str = "post"
    operation_id: str
    summary: str = ""
    description: str | None = None
    request_schema: dict[str, Any]
    response_schema: dict[str, Any]


class Endpoint(BaseModel):
    """A request path bound to a function signature and an invocable handle."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: str
    signature: FunctionSignature
    operation: Operation
    callable: Any


def split_docs(docs: str) -> tuple[str, str | None]:
    """Split documentation into a summary line and an optional description.

    Blank lines between the summary and the description are dropped.
    """
    lines = docs.splitlines()
    if not lines:
        return "", None
    summary = lines[0].strip()
    rest = lines[1:]
    while rest and not rest[0].strip():
        rest = rest[1:]
    description = "\n".join(rest).rstrip()
    return summary, description or None
