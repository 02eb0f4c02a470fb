# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Execution engine seam: instance leases and the wasmtime adapter."""

from wasm2openapi.engine.lease import ExclusiveInstance, ExportHandle, InstanceLease, InstancePool
from wasm2openapi.engine.wasmtime_runtime import UnboundExport, unbound_binder

__all__ = [
    "ExclusiveInstance",
    "ExportHandle",
    "InstanceLease",
    "InstancePool",
    "UnboundExport",
    "unbound_binder",
]
