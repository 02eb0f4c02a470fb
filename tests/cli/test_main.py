# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the wasm2openapi CLI entry point."""

import json
import sys
from pathlib import Path
from typing import Any

import flask
import pytest
import yaml

from wasm2openapi.cli.main import main
from wasm2openapi.engine import wasmtime_runtime

# ###############
# Helpers
# ###############

CALC_WIT = """\
package docs:calc@1.0.0;

interface foo {
    /// Adds two numbers.
    add: func(x: s32, y: s32) -> s32;
}

world root {
    /// Adds two numbers.
    export add: func(x: s32, y: s32) -> s32;
    export foo;
}
"""


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
    """Run main() with *args* and return its exit code."""
    monkeypatch.setattr(sys, "argv", ["wasm2openapi", *args])
    with pytest.raises(SystemExit) as exc_info:
        main()
    code = exc_info.value.code
    return 0 if code is None else int(code)


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a wasm2openapi.yaml in the caller's directory from leaking in."""
    monkeypatch.chdir(tmp_path)


# ###############
# General
# ###############


def test_no_command_prints_help_and_exits(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """main() with no subcommand prints help and exits with code 0."""
    assert _run(monkeypatch) == 0
    assert "usage: wasm2openapi" in capsys.readouterr().out


def test_command_without_file_is_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every command needs --file."""
    assert _run(monkeypatch, "convert") == 2


def test_missing_component(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """A component that does not exist is reported."""
    assert _run(monkeypatch, "--file", "missing.wasm", "convert") == 1
    assert "component file 'missing.wasm' does not exist" in capsys.readouterr().err


def test_bad_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """An invalid configuration file stops the command."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    config = _write(tmp_path, "bad.yaml", "server:\n  hostname: x\n")
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "--config", str(config), "convert") == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_malformed_wit(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """A malformed interface description is reported."""
    wit = _write(tmp_path, "calc.wit", "world {")
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "convert") == 1
    assert "Parse error" in capsys.readouterr().err


# ###############
# convert
# ###############


def test_convert_json_to_stdout(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """convert prints the OpenAPI document as JSON."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "convert") == 0
    document = json.loads(capsys.readouterr().out)
    assert document["openapi"] == "3.1.0"
    assert list(document["paths"]) == ["/root/add", "/foo/add"]
    assert "servers" not in document


def test_convert_yaml_to_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """convert --format yaml --output writes YAML to a file."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    output = tmp_path / "openapi.yaml"
    code = _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "convert", "--format", "yaml", "-o", str(output))
    assert code == 0
    assert "Wrote OpenAPI document for 2 endpoint(s)" in capsys.readouterr().out
    document = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert document["paths"]["/foo/add"]["post"]["summary"] == "Adds two numbers."


def test_convert_uses_config_info(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """The default config file in the working directory sets the document info."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    _write(tmp_path, "wasm2openapi.yaml", "info:\n  title: Calculator\n")
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "convert") == 0
    assert json.loads(capsys.readouterr().out)["info"]["title"] == "Calculator"


def test_convert_strict_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """With strict-paths a duplicate path fails the conversion."""
    source = """\
package a:b { interface math { add: func(); } }
package c:d { interface math { add: func(); } }
"""
    wit = _write(tmp_path, "calc.wit", source)
    config = _write(tmp_path, "strict.yaml", "registry:\n  strict-paths: true\n")
    code = _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "--config", str(config), "convert")
    assert code == 1
    assert "Duplicate path '/math/add'" in capsys.readouterr().err


# ###############
# check
# ###############


def test_check_reports_warnings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """check prints warnings and still succeeds."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "check") == 0
    out = capsys.readouterr().out
    assert "Checking 2 exported function(s)..." in out
    assert "Warning: Operation id 'add' is shared by namespaces root, foo" in out
    assert "No issues found." in out


def test_check_clean(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """A clean interface produces no warnings."""
    wit = _write(tmp_path, "calc.wit", "world root {\n    /// Adds.\n    export add: func(x: s32) -> s32;\n}\n")
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "check") == 0
    out = capsys.readouterr().out
    assert "Warning" not in out
    assert "No issues found." in out


# ###############
# serve
# ###############


class _FakeRuntime:
    instantiated = 0

    def __init__(self, component: Path, *, wasi: bool = True) -> None:
        self.component = component

    def instantiate(self) -> str:
        _FakeRuntime.instantiated += 1
        return f"instance-{_FakeRuntime.instantiated}"

    def bind(self, signature: Any) -> Any:
        return wasmtime_runtime.UnboundExport(signature)


@pytest.fixture
def served(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Replace the engine and the blocking server loop, recording what serve builds."""
    recorded: dict[str, Any] = {}
    _FakeRuntime.instantiated = 0
    monkeypatch.setattr(wasmtime_runtime, "WasmtimeRuntime", _FakeRuntime)

    def _run_server(self: flask.Flask, **kwargs: Any) -> None:
        recorded["app"] = self
        recorded.update(kwargs)

    monkeypatch.setattr(flask.Flask, "run", _run_server)
    return recorded


def test_serve(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, served: dict[str, Any], capsys: pytest.CaptureFixture[str]
) -> None:
    """serve binds the configured address and serves the document."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    component = tmp_path / "calc.wasm"
    component.write_bytes(b"\0asm")
    code = _run(monkeypatch, "-f", str(component), "--wit", str(wit), "serve", "-a", "0.0.0.0", "-p", "9000")
    assert code == 0
    assert served["host"] == "0.0.0.0"
    assert served["port"] == 9000
    assert "Serving 2 endpoint(s) at http://0.0.0.0:9000/" in capsys.readouterr().out

    document = served["app"].test_client().get("/api-docs/openapi.json").get_json()
    assert document["servers"] == [{"url": "http://0.0.0.0:9000"}]
    assert _FakeRuntime.instantiated == 1


def test_serve_with_instance_pool(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, served: dict[str, Any]) -> None:
    """--instances builds one instance per pool slot."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    component = tmp_path / "calc.wasm"
    component.write_bytes(b"\0asm")
    assert _run(monkeypatch, "-f", str(component), "--wit", str(wit), "serve", "--instances", "3") == 0
    assert _FakeRuntime.instantiated == 3


def test_serve_rejects_zero_instances(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, served: dict[str, Any]) -> None:
    """An empty pool cannot serve."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "serve", "--instances", "0") == 1
    assert "app" not in served


def test_serve_requires_component(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, served: dict[str, Any], capsys: pytest.CaptureFixture[str]
) -> None:
    """Serving needs the component binary even when --wit is given."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    assert _run(monkeypatch, "-f", "calc.wasm", "--wit", str(wit), "serve") == 1
    assert "does not exist" in capsys.readouterr().err


def test_serve_docs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, served: dict[str, Any]) -> None:
    """--swagger mounts the docs UI."""
    wit = _write(tmp_path, "calc.wit", CALC_WIT)
    component = tmp_path / "calc.wasm"
    component.write_bytes(b"\0asm")
    assert _run(monkeypatch, "-f", str(component), "--wit", str(wit), "serve", "--swagger") == 0
    assert served["app"].test_client().get("/docs/").status_code == 200
