# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Endpoint Registry: binds function signatures to request paths and schemas."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from wasm2openapi.bridge.schema import map_params, map_results
from wasm2openapi.errors import DuplicatePath
from wasm2openapi.model.entities import Endpoint, FunctionSignature, Operation, split_docs

logger = logging.getLogger(__name__)

Binder = Callable[[FunctionSignature], object]

# ###############
# Public Interface
# ###############


def endpoint_path(signature: FunctionSignature) -> str:
    """Return the request path ``/<namespace>/<function>`` of *signature*."""
    return f"/{signature.namespace}/{signature.name}"


def build_operation(signature: FunctionSignature) -> Operation:
    """Describe the ``POST`` operation serving *signature*."""
    summary, description = split_docs(signature.docs)
    return Operation(
        path=endpoint_path(signature),
        operation_id=signature.name,
        summary=summary,
        description=description,
        request_schema=map_params(signature.params),
        response_schema=map_results(signature.results),
    )


def build_endpoints(
    signatures: Iterable[FunctionSignature],
    binder: Binder,
    *,
    strict: bool = False,
) -> list[Endpoint]:
    """Build one endpoint per signature, in signature order.

    When two signatures derive the same path the first one wins; the later one
    is dropped with a warning, or :class:`DuplicatePath` is raised if *strict*.

    Args:
        signatures: Exported functions in introspection order.
        binder: Resolves a signature to the handle used to invoke it.
        strict: Raise on path collisions instead of dropping.

    Raises:
        DuplicatePath: If *strict* and two signatures derive the same path.
        UnsupportedType: If a signature uses a type with no schema.
    """
    endpoints: list[Endpoint] = []
    by_path: dict[str, Endpoint] = {}
    for signature in signatures:
        path = endpoint_path(signature)
        existing = by_path.get(path)
        if existing is not None:
            duplicate = DuplicatePath(path, _export_id(existing.signature), _export_id(signature))
            if strict:
                raise duplicate
            logger.warning("%s", duplicate)
            continue
        endpoint = Endpoint(
            path=path,
            signature=signature,
            operation=build_operation(signature),
            callable=binder(signature),
        )
        by_path[path] = endpoint
        endpoints.append(endpoint)
        logger.info("Registered POST %s -> %s", path, _export_id(signature))
    return endpoints


# ################
# Implementation
# ################


def _export_id(signature: FunctionSignature) -> str:
    """Return the export path of *signature* as ``interface#function``."""
    return "#".join(signature.export_path)
