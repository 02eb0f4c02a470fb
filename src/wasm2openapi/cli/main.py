# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the wasm2openapi command-line interface."""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from wasm2openapi.compiler.build import load_component
from wasm2openapi.errors import DuplicatePath, InterfaceDecodeError, UnsupportedType
from wasm2openapi.model.entities import FunctionSignature
from wasm2openapi.settings.config import Config, ConfigError, find_config, load_config

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the wasm2openapi CLI."""
    parser = argparse.ArgumentParser(
        prog="wasm2openapi",
        description="wasm2openapi - expose WASM component exports as a JSON HTTP API",
    )
    parser.add_argument(
        "-f",
        "--file",
        help="Path to the WebAssembly component file (required by every command)",
    )
    parser.add_argument(
        "--wit",
        help="Read the interface description from this WIT file instead of the component",
    )
    parser.add_argument(
        "--config",
        help="Configuration file (default: ./wasm2openapi.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: from the configuration file, else INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # convert subcommand
    convert_parser = subparsers.add_parser(
        "convert",
        help="Print the OpenAPI description of the component",
        description="Generate the OpenAPI document describing the component's exported functions.",
    )
    convert_parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="json",
        help="Output format (default: json)",
    )
    convert_parser.add_argument(
        "-o",
        "--output",
        help="Write the document to this file instead of stdout",
    )

    # serve subcommand
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the component's exported functions over HTTP",
        description="Instantiate the component and answer POST /<namespace>/<function> requests.",
    )
    serve_parser.add_argument(
        "-s",
        "--docs",
        "--swagger",
        action="store_true",
        default=None,
        help="Enable the interactive documentation UI at /docs/",
    )
    serve_parser.add_argument(
        "-a",
        "--address",
        help="Address to bind the server to (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "-p",
        "--port",
        type=int,
        help="Port to run the server on (default: 8080)",
    )
    serve_parser.add_argument(
        "--instances",
        type=int,
        help="Number of independent component instances serving requests (default: 1)",
    )

    # check subcommand
    subparsers.add_parser(
        "check",
        help="Check the component's exports for problems",
        description="Load the interface description and report issues with serving it over JSON.",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)
    if args.file is None:
        parser.error("the following arguments are required: -f/--file")

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    try:
        config = _load_settings(args)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    logging.basicConfig(level=args.log_level or config.log_level, format=_LOG_FORMAT)

    if args.command == "convert":
        return _cmd_convert(args, config)
    if args.command == "serve":
        return _cmd_serve(args, config)
    if args.command == "check":
        return _cmd_check(args)
    return 0


def _load_settings(args: argparse.Namespace) -> Config:
    """Load the configuration named on the command line, or the default file."""
    if args.config:
        return load_config(Path(args.config))
    default = find_config(Path.cwd())
    return load_config(default) if default is not None else Config()


def _load_signatures(args: argparse.Namespace) -> list[FunctionSignature] | None:
    """Load the component's exported functions, printing errors."""
    component = Path(args.file)
    wit = Path(args.wit) if args.wit else None
    if wit is None and not component.exists():
        print(f"Error: component file '{component}' does not exist.", file=sys.stderr)
        return None
    try:
        return load_component(component, wit)
    except InterfaceDecodeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None


def _cmd_convert(args: argparse.Namespace, config: Config) -> int:
    """Handle the convert subcommand."""
    from wasm2openapi.engine.wasmtime_runtime import unbound_binder
    from wasm2openapi.server.openapi import build_document
    from wasm2openapi.server.registry import build_endpoints

    signatures = _load_signatures(args)
    if signatures is None:
        return 1

    try:
        endpoints = build_endpoints(signatures, unbound_binder, strict=config.registry.strict_paths)
    except (DuplicatePath, UnsupportedType) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    document = build_document(endpoints, config.info)

    if args.format == "yaml":
        text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(document, indent=2) + "\n"

    if args.output:
        output = Path(args.output)
        try:
            output.write_text(text, encoding="utf-8")
        except OSError as exc:
            print(f"Error: cannot write '{output}': {exc}", file=sys.stderr)
            return 1
        print(f"Wrote OpenAPI document for {len(endpoints)} endpoint(s) to '{output}'.")
    else:
        sys.stdout.write(text)
    return 0


def _cmd_serve(args: argparse.Namespace, config: Config) -> int:
    """Handle the serve subcommand."""
    from wasm2openapi.engine.lease import ExclusiveInstance, InstanceLease, InstancePool
    from wasm2openapi.engine.wasmtime_runtime import EngineError, WasmtimeRuntime
    from wasm2openapi.server.dispatcher import Dispatcher
    from wasm2openapi.server.openapi import build_document
    from wasm2openapi.server.registry import build_endpoints
    from wasm2openapi.webui.app import DOCS_PATH, create_app

    address = args.address or config.server.address
    port = args.port if args.port is not None else config.server.port
    docs = args.docs if args.docs is not None else config.server.docs
    instances = args.instances if args.instances is not None else config.server.instances
    if instances < 1:
        print("Error: --instances must be at least 1.", file=sys.stderr)
        return 1

    component = Path(args.file)
    if not component.exists():
        print(f"Error: component file '{component}' does not exist.", file=sys.stderr)
        return 1

    signatures = _load_signatures(args)
    if signatures is None:
        return 1

    try:
        runtime = WasmtimeRuntime(component)
        lease: InstanceLease
        if instances == 1:
            lease = ExclusiveInstance(runtime.instantiate())
        else:
            lease = InstancePool.create(runtime.instantiate, instances)
        endpoints = build_endpoints(signatures, runtime.bind, strict=config.registry.strict_paths)
    except (EngineError, DuplicatePath, UnsupportedType) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    base_url = f"http://{address}:{port}"
    document = build_document(endpoints, config.info, servers=[base_url])
    app = create_app(endpoints, Dispatcher(lease), document, docs=docs)

    print(f"Serving {len(endpoints)} endpoint(s) at {base_url}/")
    if docs:
        print(f"Documentation UI at {base_url}{DOCS_PATH}")
    app.run(host=address, port=port, debug=False, threaded=True)
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    from wasm2openapi.validation.checks import validate

    signatures = _load_signatures(args)
    if signatures is None:
        return 1

    print(f"Checking {len(signatures)} exported function(s)...")
    result = validate(signatures)
    for warning in result.warnings:
        print(f"Warning: {warning.message}")
    for error in result.errors:
        print(f"Error: {error.message}", file=sys.stderr)

    if result.has_errors:
        return 1

    print("No issues found.")
    return 0
