# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Exclusive access to component instances.

A component instance and its store form one mutable execution context: only
one call may be in flight against it at a time. The dispatcher never holds an
instance directly; it asks an :class:`InstanceLease` for exclusive use of one
for the duration of a call and its cleanup.

:class:`ExclusiveInstance` serializes every call on a single instance behind a
lock, which is the throughput ceiling of a served component.
:class:`InstancePool` removes that ceiling by handing out one of several
independent instances.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from wasm2openapi.model.values import TypedValue

# ###############
# Public Interface
# ###############


class ExportHandle(Protocol):
    """An exported function of a component, bound by export path."""

    def invoke(self, instance: Any, args: list[TypedValue]) -> list[TypedValue]:
        """Call the function on *instance* and return its results in order."""
        ...

    def post_return(self, instance: Any) -> None:
        """Run the post-call cleanup the execution engine requires."""
        ...


class InstanceLease(Protocol):
    """Source of exclusive access to a component instance."""

    def acquire(self) -> Any:
        """Return a context manager yielding an instance held exclusively."""
        ...


class ExclusiveInstance:
    """A single shared instance guarded by a mutual-exclusion lock."""

    def __init__(self, instance: Any) -> None:
        self._instance = instance
        self._lock = threading.Lock()

    @contextmanager
    def acquire(self) -> Iterator[Any]:
        with self._lock:
            yield self._instance


class InstancePool:
    """A fixed set of independent instances handed out one caller at a time.

    Callers block until an instance is returned to the pool. There is no
    timeout: a hung call holds its instance indefinitely.
    """

    def __init__(self, instances: Iterable[Any]) -> None:
        self._instances: queue.Queue[Any] = queue.Queue()
        self.size = 0
        for instance in instances:
            self._instances.put(instance)
            self.size += 1
        if self.size == 0:
            raise ValueError("An instance pool needs at least one instance")

    @classmethod
    def create(cls, factory: Callable[[], Any], size: int) -> InstancePool:
        """Build a pool of *size* instances produced by *factory*."""
        return cls(factory() for _ in range(size))

    @contextmanager
    def acquire(self) -> Iterator[Any]:
        instance = self._instances.get()
        try:
            yield instance
        finally:
            self._instances.put(instance)
