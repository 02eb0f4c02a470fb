# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interface introspection: from a WIT description to exported function signatures.

The pipeline scans and parses the description, resolves every named type
through semantic analysis, and returns one signature per exported function in
source order. Any failure along the way is reported as
:class:`~wasm2openapi.errors.InterfaceDecodeError`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from wasm2openapi.compiler.extract import WasmToolsError, extract_wit
from wasm2openapi.compiler.parser import ParseError, parse
from wasm2openapi.compiler.semantic_analysis import analyze
from wasm2openapi.errors import InterfaceDecodeError
from wasm2openapi.model.entities import FunctionSignature
from wasm2openapi.parser.lexer import LexerError

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def load(source: str, *, source_label: str = "<string>") -> list[FunctionSignature]:
    """Enumerate the exported functions described by WIT text.

    Args:
        source: The WIT document.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Returns:
        Signatures in insertion order of the description (not sorted).

    Raises:
        InterfaceDecodeError: If the description is malformed or references
            undefined types or interfaces.
    """
    try:
        document = parse(source)
    except (LexerError, ParseError) as exc:
        raise InterfaceDecodeError(f"Parse error in '{source_label}': {exc}") from exc

    analysis = analyze(document)
    if analysis.errors:
        error_lines = "\n".join(f"  {e.message}" for e in analysis.errors)
        raise InterfaceDecodeError(f"Semantic errors in '{source_label}':\n{error_lines}")

    logger.debug("Loaded %d exported function(s) from %s", len(analysis.signatures), source_label)
    return analysis.signatures


def load_file(path: Path) -> list[FunctionSignature]:
    """Enumerate the exported functions described by a ``.wit`` file.

    Raises:
        InterfaceDecodeError: If the file cannot be read or is malformed.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InterfaceDecodeError(f"Cannot read interface description '{path}': {exc}") from exc
    return load(source, source_label=str(path))


def load_component(component: Path, wit: Path | None = None) -> list[FunctionSignature]:
    """Enumerate the exported functions of a component.

    The interface description is read from *wit* when given, and otherwise
    decoded from the component binary with ``wasm-tools``.

    Raises:
        InterfaceDecodeError: If the description cannot be obtained or is malformed.
    """
    if wit is not None:
        return load_file(wit)
    try:
        source = extract_wit(component)
    except WasmToolsError as exc:
        raise InterfaceDecodeError(str(exc)) from exc
    return load(source, source_label=str(component))
