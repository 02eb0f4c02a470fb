# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""The type bridge between JSON and component values: schemas and the value codec."""

from wasm2openapi.bridge.codec import decode, decode_results, encode, encode_params
from wasm2openapi.bridge.schema import map_params, map_results, map_type

__all__ = [
    "decode",
    "decode_results",
    "encode",
    "encode_params",
    "map_params",
    "map_results",
    "map_type",
]
