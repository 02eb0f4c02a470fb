# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interface introspection pipeline: parsing, semantic analysis, and loading."""

from wasm2openapi.compiler.build import load, load_component, load_file
from wasm2openapi.compiler.extract import WasmToolsError, extract_wit
from wasm2openapi.compiler.parser import ParseError, parse
from wasm2openapi.compiler.semantic_analysis import Analysis, SemanticError, analyze

__all__ = [
    "parse",
    "ParseError",
    "analyze",
    "Analysis",
    "SemanticError",
    "extract_wit",
    "WasmToolsError",
    "load",
    "load_file",
    "load_component",
]
