# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error taxonomy shared by the introspector, registry, and dispatcher.

Load-time errors (:class:`InterfaceDecodeError`, :class:`DuplicatePath`) are
raised while endpoints are being built. Per-request errors derive from
:class:`DispatchError` and carry the HTTP status the transport answers with.
"""

from __future__ import annotations

from typing import Any

# ###############
# Public Interface
# ###############


class InterfaceDecodeError(Exception):
    """Raised when an interface description cannot be decoded into signatures.

    Fatal: no endpoints can be built from a malformed description.
    """


class UnsupportedType(Exception):
    """Raised when a type descriptor has no schema or value representation."""


class DuplicatePath(Exception):
    """Two exported functions derive the same request path.

    Attributes:
        path: The colliding request path.
        kept: Qualified name of the function registered first (which wins).
        dropped: Qualified name of the function that was dropped.
    """

    def __init__(self, path: str, kept: str, dropped: str) -> None:
        super().__init__(f"Duplicate path '{path}': keeping '{kept}', dropping '{dropped}'")
        self.path = path
        self.kept = kept
        self.dropped = dropped


class DispatchError(Exception):
    """Base class for failures while serving one request.

    Attributes:
        kind: Stable name of the failure, used in HTTP error bodies.
        status: HTTP status code the transport answers with.
    """

    kind = "DispatchError"
    status = 500

    def to_json(self) -> dict[str, Any]:
        """Return the JSON error body for this failure."""
        return {"error": {"kind": self.kind, "message": str(self)}}


class MissingParameter(DispatchError):
    """A required top-level parameter is absent from the request body."""

    kind = "MissingParameter"
    status = 400

    def __init__(self, name: str) -> None:
        super().__init__(f"missing required parameter '{name}'")
        self.name = name

    def to_json(self) -> dict[str, Any]:
        body = super().to_json()
        body["error"]["parameter"] = self.name
        return body


class TypeMismatch(DispatchError):
    """A JSON value does not have the shape its type descriptor expects.

    Attributes:
        path: Locator of the offending value, rooted at the parameter name
            (e.g. ``point.x`` or ``items[2]``).
        expected: Description of the expected shape.
        actual: JSON type name (or short description) of the value received.
    """

    kind = "TypeMismatch"
    status = 400

    def __init__(self, path: str, expected: str, actual: str) -> None:
        super().__init__(f"{path}: expected {expected}, got {actual}")
        self.path = path
        self.expected = expected
        self.actual = actual

    def to_json(self) -> dict[str, Any]:
        body = super().to_json()
        body["error"]["path"] = self.path
        return body


class InvalidBody(DispatchError):
    """The request body is not a JSON object."""

    kind = "InvalidBody"
    status = 400


class CallFailed(DispatchError):
    """The component trapped or the execution engine reported a failure."""

    kind = "CallFailed"
    status = 500


class CleanupFailed(DispatchError):
    """Post-call cleanup in the execution engine failed.

    Logged by the dispatcher; never replaces the outcome of the call itself.
    """

    kind = "CleanupFailed"
    status = 500
