# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Request Dispatcher: runs one JSON request against an endpoint.

Each request moves through ``Decoding -> Invoking -> Encoding``; decoding and
invoking may end the request with a :class:`~wasm2openapi.errors.DispatchError`.
Calls are never retried.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from wasm2openapi.bridge.codec import JsonValue, decode_results, encode_params
from wasm2openapi.engine.lease import InstanceLease
from wasm2openapi.errors import CallFailed, CleanupFailed, DispatchError, InvalidBody
from wasm2openapi.model.entities import Endpoint
from wasm2openapi.model.values import TypedValue

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class Dispatcher:
    """Dispatches requests to endpoints through an instance lease.

    The lease is held from the start of the call until post-call cleanup has
    finished, on every exit path.
    """

    def __init__(self, lease: InstanceLease) -> None:
        self._lease = lease

    def handle(self, endpoint: Endpoint, body: Mapping[str, Any]) -> JsonValue:
        """Invoke *endpoint* with the named arguments in *body*.

        Keys of *body* that name no parameter are ignored.

        Returns:
            An object of named results, or the single anonymous result.

        Raises:
            InvalidBody: If *body* is not a JSON object.
            MissingParameter: If a parameter is absent from *body*.
            TypeMismatch: If a parameter value has the wrong shape.
            CallFailed: If the component traps or the engine fails.
        """
        if not isinstance(body, Mapping):
            raise InvalidBody("request body must be a JSON object")
        signature = endpoint.signature

        logger.debug("%s: decoding arguments", endpoint.path)
        args = encode_params(body, signature.params)

        logger.debug("%s: invoking %s", endpoint.path, signature.qualified_name)
        results = self._invoke(endpoint, args)

        logger.debug("%s: encoding %d result(s)", endpoint.path, len(results))
        return decode_results(results, signature.results)

    def _invoke(self, endpoint: Endpoint, args: list[TypedValue]) -> list[TypedValue]:
        handle = endpoint.callable
        name = endpoint.signature.qualified_name
        with self._lease.acquire() as instance:
            try:
                results = handle.invoke(instance, args)
            except DispatchError as exc:
                logger.error("Call to %s failed: %s", name, exc)
                raise
            except Exception as exc:
                logger.error("Call to %s failed: %s", name, exc)
                raise CallFailed(f"call to '{name}' failed: {exc}") from exc
            finally:
                self._cleanup(endpoint, instance)
        expected = endpoint.signature.result_count
        if len(results) != expected:
            raise CallFailed(f"call to '{name}' returned {len(results)} value(s), expected {expected}")
        return results

    def _cleanup(self, endpoint: Endpoint, instance: Any) -> None:
        try:
            endpoint.callable.post_return(instance)
        except Exception as exc:
            failure = CleanupFailed(f"cleanup after '{endpoint.signature.qualified_name}' failed: {exc}")
            logger.warning("%s", failure, exc_info=exc)
