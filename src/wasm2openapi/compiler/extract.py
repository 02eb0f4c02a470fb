# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Extraction of the WIT interface description embedded in a component binary.

Delegates to the ``wasm-tools`` command-line tool, which prints the decoded
interface of a component as WIT text.
"""

import subprocess
from pathlib import Path

# ###############
# Public Interface
# ###############

WASM_TOOLS = "wasm-tools"


class WasmToolsError(Exception):
    """Raised when the interface cannot be extracted with ``wasm-tools``."""


def extract_wit(component: Path, *, timeout: int = 60) -> str:
    """Return the WIT text describing the interface of a component binary.

    Args:
        component: Path to the ``.wasm`` component.
        timeout: Seconds to wait for ``wasm-tools`` before giving up.

    Returns:
        The decoded WIT document.

    Raises:
        WasmToolsError: If the file does not exist, ``wasm-tools`` is not
            installed, times out, or fails to decode the component.
    """
    if not component.exists():
        raise WasmToolsError(f"Component file not found: {component}")
    result = _run_wasm_tools_raw(["component", "wit", str(component)], timeout=timeout)
    if result.returncode != 0:
        raise WasmToolsError(f"Failed to decode component '{component}': {result.stderr.strip()}")
    return result.stdout


# ################
# Implementation
# ################


def _run_wasm_tools_raw(args: list[str], *, timeout: int) -> subprocess.CompletedProcess[str]:
    """Run a wasm-tools command and return the raw CompletedProcess result.

    Raises:
        WasmToolsError: If wasm-tools is not found on PATH or the command times out.
    """
    try:
        return subprocess.run(
            [WASM_TOOLS, *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise WasmToolsError(f"{WASM_TOOLS} executable not found on PATH") from exc
    except subprocess.TimeoutExpired as exc:
        raise WasmToolsError(f"Command timed out: {WASM_TOOLS} {' '.join(args)}") from exc
