# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the wasm2openapi documentation."""

project = "wasm2openapi"
author = "wasm2openapi Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc"]
autodoc_mock_imports = ["wasmtime"]

html_theme = "alabaster"
