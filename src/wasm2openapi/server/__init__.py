# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Endpoint registration, request dispatch, and the API description."""

from wasm2openapi.server.dispatcher import Dispatcher
from wasm2openapi.server.openapi import build_document
from wasm2openapi.server.registry import build_endpoints, build_operation, endpoint_path

__all__ = [
    "Dispatcher",
    "build_document",
    "build_endpoints",
    "build_operation",
    "endpoint_path",
]
