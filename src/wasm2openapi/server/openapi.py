# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Assembly of the OpenAPI 3.1 document describing registered endpoints."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from wasm2openapi.model.entities import Endpoint
from wasm2openapi.settings.config import InfoConfig

# ###############
# Public Interface
# ###############

OPENAPI_VERSION = "3.1.0"
JSON_MEDIA_TYPE = "application/json"

ERROR_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "kind": {"type": "string"},
                "message": {"type": "string"},
                "path": {"type": "string"},
                "parameter": {"type": "string"},
            },
            "required": ["kind", "message"],
        }
    },
    "required": ["error"],
}


def build_document(
    endpoints: Iterable[Endpoint],
    info: InfoConfig | None = None,
    servers: list[str] | None = None,
) -> dict[str, Any]:
    """Return the OpenAPI document for *endpoints*, as plain JSON data.

    Paths appear in registration order. Every operation answers ``200`` with
    its result schema, ``400`` for malformed arguments and ``500`` for failed
    calls.

    Args:
        endpoints: Registered endpoints.
        info: Title, version, and description of the API.
        servers: Base URLs the API is served from.
    """
    info = info or InfoConfig()
    document: dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": {"title": info.title, "version": info.version, "description": info.description},
    }
    if servers:
        document["servers"] = [{"url": url} for url in servers]
    document["paths"] = {endpoint.path: {"post": _operation_object(endpoint)} for endpoint in endpoints}
    document["components"] = {
        "schemas": {"Error": ERROR_SCHEMA},
        "responses": {
            "BadRequest": _error_response("The request body does not match the parameter schema"),
            "CallFailed": _error_response("The component call failed"),
        },
    }
    return document


# ################
# Implementation
# ################


def _json_content(schema: dict[str, Any]) -> dict[str, Any]:
    return {JSON_MEDIA_TYPE: {"schema": schema}}


def _error_response(description: str) -> dict[str, Any]:
    return {"description": description, "content": _json_content({"$ref": "#/components/schemas/Error"})}


def _operation_object(endpoint: Endpoint) -> dict[str, Any]:
    operation = endpoint.operation
    result: dict[str, Any] = {"operationId": operation.operation_id, "tags": [endpoint.signature.namespace]}
    if operation.summary:
        result["summary"] = operation.summary
    if operation.description:
        result["description"] = operation.description
    result["requestBody"] = {
        "required": bool(endpoint.signature.params),
        "content": _json_content(operation.request_schema),
    }
    result["responses"] = {
        "200": {"description": "Successful call", "content": _json_content(operation.response_schema)},
        "400": {"$ref": "#/components/responses/BadRequest"},
        "500": {"$ref": "#/components/responses/CallFailed"},
    }
    return result
