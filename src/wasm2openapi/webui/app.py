# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""HTTP transport for registered endpoints, with an optional Dash docs UI.

Endpoints are served by the Flask server underneath Dash. Every
``POST /<namespace>/<function>`` request is looked up in a table of registered
endpoints and handed to the dispatcher; the API description is served at
``/api-docs/openapi.json``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import dash
import flask
from dash import Input, Output, State, dcc, html

from wasm2openapi.errors import DispatchError, InvalidBody
from wasm2openapi.model.entities import Endpoint
from wasm2openapi.server.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

DOCUMENT_PATH = "/api-docs/openapi.json"
DOCS_PATH = "/docs/"


def create_app(
    endpoints: Sequence[Endpoint],
    dispatcher: Dispatcher,
    document: dict[str, Any],
    *,
    docs: bool = False,
) -> flask.Flask:
    """Create the HTTP server for *endpoints*.

    Args:
        endpoints: Registered endpoints, each answering ``POST`` at its path.
        dispatcher: Runs requests against the component.
        document: The API description served at ``/api-docs/openapi.json``.
        docs: Also mount the interactive documentation UI at ``/docs/``.
    """
    server = flask.Flask(__name__)
    server.json.sort_keys = False
    table = {endpoint.path: endpoint for endpoint in endpoints}

    @server.get(DOCUMENT_PATH)
    def api_document() -> flask.Response:
        return flask.jsonify(document)

    @server.post("/<namespace>/<function>")
    def call(namespace: str, function: str) -> tuple[flask.Response, int]:
        endpoint = table.get(f"/{namespace}/{function}")
        if endpoint is None:
            return _error_response("NotFound", f"no endpoint at '/{namespace}/{function}'", 404)
        try:
            body = _request_body(flask.request)
            result = dispatcher.handle(endpoint, body)
        except DispatchError as exc:
            return flask.jsonify(exc.to_json()), exc.status
        return flask.jsonify(result), 200

    if docs:
        create_docs_app(server, endpoints, dispatcher, title=document.get("info", {}).get("title", "API"))
    return server


def create_docs_app(
    server: flask.Flask,
    endpoints: Sequence[Endpoint],
    dispatcher: Dispatcher,
    *,
    title: str = "API",
) -> dash.Dash:
    """Mount the interactive documentation UI on *server* at ``/docs/``."""
    app = dash.Dash(__name__, server=server, url_base_pathname=DOCS_PATH, title=f"{title} - Docs")
    app.layout = _build_layout(endpoints, title)
    table = {endpoint.path: endpoint for endpoint in endpoints}

    @app.callback(
        Output("operation", "children"),
        Output("body", "value"),
        Input("endpoint", "value"),
    )
    def show_operation(path: str | None) -> tuple[Any, str]:
        endpoint = table.get(path or "")
        if endpoint is None:
            return html.P("Select an endpoint."), "{}"
        return _describe_operation(endpoint), example_body(endpoint)

    @app.callback(
        Output("response", "children"),
        Input("invoke", "n_clicks"),
        State("endpoint", "value"),
        State("body", "value"),
        prevent_initial_call=True,
    )
    def invoke(_clicks: int, path: str | None, body: str | None) -> str:
        endpoint = table.get(path or "")
        if endpoint is None:
            return "Select an endpoint."
        return invoke_endpoint(dispatcher, endpoint, body or "")

    return app


def invoke_endpoint(dispatcher: Dispatcher, endpoint: Endpoint, body_text: str) -> str:
    """Run a request typed into the docs UI and format the response."""
    try:
        body = json.loads(body_text) if body_text.strip() else {}
    except json.JSONDecodeError as exc:
        return _format_response(400, InvalidBody(f"request body is not valid JSON: {exc}").to_json())
    try:
        result = dispatcher.handle(endpoint, body)
    except DispatchError as exc:
        return _format_response(exc.status, exc.to_json())
    return _format_response(200, result)


def example_body(endpoint: Endpoint) -> str:
    """Return a JSON skeleton of the request body with one key per parameter."""
    return json.dumps({param.name: None for param in endpoint.signature.params}, indent=2)


# ################
# Implementation
# ################


def _request_body(request: flask.Request) -> Any:
    if not request.get_data():
        return {}
    body = request.get_json(force=True, silent=True)
    if body is None:
        raise InvalidBody("request body is not valid JSON")
    return body


def _error_response(kind: str, message: str, status: int) -> tuple[flask.Response, int]:
    return flask.jsonify({"error": {"kind": kind, "message": message}}), status


def _format_response(status: int, body: Any) -> str:
    return f"{status}\n{json.dumps(body, indent=2)}"


def _build_layout(endpoints: Sequence[Endpoint], title: str) -> html.Div:
    """Build the application layout."""
    return html.Div(
        [
            html.H1(title),
            html.P(html.A("OpenAPI document", href=DOCUMENT_PATH)),
            html.Hr(),
            dcc.Dropdown(
                id="endpoint",
                options=[{"label": f"POST {e.path}", "value": e.path} for e in endpoints],
                value=endpoints[0].path if endpoints else None,
                clearable=False,
            ),
            html.Div(id="operation", style={"marginTop": "1rem"}),
            dcc.Textarea(id="body", value="{}", style={"width": "100%", "height": "10rem", "fontFamily": "monospace"}),
            html.Button("Invoke", id="invoke", n_clicks=0),
            html.Pre(id="response", style={"background": "#f5f5f5", "padding": "1rem"}),
        ],
        style={"fontFamily": "sans-serif", "padding": "2rem"},
    )


def _describe_operation(endpoint: Endpoint) -> html.Div:
    operation = endpoint.operation
    children: list[Any] = [html.H3(operation.summary or operation.operation_id)]
    if operation.description:
        children.append(html.P(operation.description, style={"whiteSpace": "pre-wrap"}))
    children.append(html.H4("Request schema"))
    children.append(html.Pre(json.dumps(operation.request_schema, indent=2)))
    children.append(html.H4("Response schema"))
    children.append(html.Pre(json.dumps(operation.response_schema, indent=2)))
    return html.Div(children)
