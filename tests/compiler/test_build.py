# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for interface introspection: loading signatures from WIT text, files, and components."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from wasm2openapi.compiler import build, extract
from wasm2openapi.compiler.build import load, load_component, load_file
from wasm2openapi.compiler.extract import WasmToolsError, extract_wit
from wasm2openapi.errors import InterfaceDecodeError

# ###############
# Test data
# ###############

CALC_WIT = """\
package docs:calc@1.0.0;

interface foo {
    /// Adds two numbers.
    add: func(x: s32, y: s32) -> s32;
}

world root {
    export add: func(x: s32, y: s32) -> s32;
    export foo;
}
"""

# ###############
# Helpers
# ###############


def _completed(returncode: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


# ###############
# load
# ###############


class TestLoad:
    def test_returns_signatures_in_source_order(self) -> None:
        sigs = load(CALC_WIT)
        assert [s.qualified_name for s in sigs] == ["root.add", "foo.add"]
        assert sigs[1].docs == "Adds two numbers."

    def test_parse_error_is_interface_decode_error(self) -> None:
        with pytest.raises(InterfaceDecodeError, match="Parse error in 'calc.wit'"):
            load("world {", source_label="calc.wit")

    def test_lexer_error_is_interface_decode_error(self) -> None:
        with pytest.raises(InterfaceDecodeError, match="Parse error"):
            load("world w { $ }")

    def test_semantic_errors_are_listed(self) -> None:
        with pytest.raises(InterfaceDecodeError) as exc_info:
            load("interface i { f: func(x: ghost, y: phantom); }")
        message = str(exc_info.value)
        assert "Unknown type 'ghost'" in message
        assert "Unknown type 'phantom'" in message

    def test_unsupported_type_is_fatal(self) -> None:
        with pytest.raises(InterfaceDecodeError, match="Unsupported type"):
            load("interface i { f: func(x: stream<u8>); }")


class TestLoadFile:
    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "calc.wit"
        path.write_text(CALC_WIT, encoding="utf-8")
        assert len(load_file(path)) == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InterfaceDecodeError, match="Cannot read"):
            load_file(tmp_path / "missing.wit")


class TestLoadComponent:
    def test_wit_file_takes_precedence(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _fail(component: Path, **kwargs: object) -> str:
            raise AssertionError("component should not be decoded")

        monkeypatch.setattr(build, "extract_wit", _fail)
        wit = tmp_path / "calc.wit"
        wit.write_text(CALC_WIT, encoding="utf-8")
        assert len(load_component(tmp_path / "calc.wasm", wit)) == 2

    def test_extracts_from_component(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(build, "extract_wit", lambda component: CALC_WIT)
        sigs = load_component(tmp_path / "calc.wasm")
        assert [s.name for s in sigs] == ["add", "add"]

    def test_extraction_failure_is_interface_decode_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _fail(component: Path) -> str:
            raise WasmToolsError("wasm-tools executable not found on PATH")

        monkeypatch.setattr(build, "extract_wit", _fail)
        with pytest.raises(InterfaceDecodeError, match="wasm-tools"):
            load_component(tmp_path / "calc.wasm")


# ###############
# extract_wit
# ###############


class TestExtractWit:
    def test_missing_component(self, tmp_path: Path) -> None:
        with pytest.raises(WasmToolsError, match="not found"):
            extract_wit(tmp_path / "missing.wasm")

    def test_returns_stdout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        component = tmp_path / "calc.wasm"
        component.write_bytes(b"\0asm")
        calls: list[list[str]] = []

        def _run(args: list[str], *, timeout: int) -> subprocess.CompletedProcess[str]:
            calls.append(args)
            return _completed(0, stdout=CALC_WIT)

        monkeypatch.setattr(extract, "_run_wasm_tools_raw", _run)
        assert extract_wit(component) == CALC_WIT
        assert calls == [["component", "wit", str(component)]]

    def test_nonzero_exit(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        component = tmp_path / "calc.wasm"
        component.write_bytes(b"junk")
        monkeypatch.setattr(extract, "_run_wasm_tools_raw", lambda args, timeout: _completed(1, stderr="bad magic"))
        with pytest.raises(WasmToolsError, match="bad magic"):
            extract_wit(component)

    def test_tool_not_on_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        component = tmp_path / "calc.wasm"
        component.write_bytes(b"\0asm")

        def _missing(*args: object, **kwargs: object) -> subprocess.CompletedProcess[str]:
            raise FileNotFoundError("wasm-tools")

        monkeypatch.setattr(extract.subprocess, "run", _missing)
        with pytest.raises(WasmToolsError, match="not found on PATH"):
            extract_wit(component)
