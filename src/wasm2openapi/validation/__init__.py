# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lint checks for the exported functions of a component."""

from wasm2openapi.validation.checks import ValidationError, ValidationResult, ValidationWarning, validate

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "validate",
]
