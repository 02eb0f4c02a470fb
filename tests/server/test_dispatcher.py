# Copyright 2026 wasm2openapi Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for request dispatch against instrumented export handles."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

import pytest

from wasm2openapi.engine.lease import ExclusiveInstance, InstancePool
from wasm2openapi.errors import CallFailed, InvalidBody, MissingParameter, TypeMismatch
from wasm2openapi.model.entities import AnonymousResult, Endpoint, FunctionSignature, NamedResults, Param
from wasm2openapi.model.types import primitive
from wasm2openapi.model.values import ScalarValue, TypedValue
from wasm2openapi.server.dispatcher import Dispatcher
from wasm2openapi.server.registry import build_endpoints

# ###############
# Test Helpers
# ###############

S32 = primitive("s32")


class _Handle:
    """An export handle backed by a Python function over plain values."""

    def __init__(self, func: Callable[..., list[Any]], *, fail_cleanup: bool = False) -> None:
        self.func = func
        self.fail_cleanup = fail_cleanup
        self.instances: list[Any] = []
        self.cleanups = 0

    def invoke(self, instance: Any, args: list[TypedValue]) -> list[TypedValue]:
        self.instances.append(instance)
        values = self.func(*[a.value for a in args if isinstance(a, ScalarValue)])
        return [ScalarValue(S32.primitive, v) for v in values]

    def post_return(self, instance: Any) -> None:
        self.cleanups += 1
        if self.fail_cleanup:
            raise RuntimeError("post-return trapped")


def _endpoint(handle: _Handle, *, named: bool = False) -> Endpoint:
    results: NamedResults | AnonymousResult
    if named:
        results = NamedResults(results=(Param(name="q", type=S32), Param(name="r", type=S32)))
    else:
        results = AnonymousResult(type=S32)
    signature = FunctionSignature(
        name="add",
        namespace="root",
        export_path=("add",),
        params=(Param(name="x", type=S32), Param(name="y", type=S32)),
        results=results,
    )
    (endpoint,) = build_endpoints([signature], lambda sig: handle)
    return endpoint


def _adder() -> _Handle:
    return _Handle(lambda x, y: [x + y])


# ###############
# Request Handling
# ###############


class TestHandle:
    def test_add(self) -> None:
        dispatcher = Dispatcher(ExclusiveInstance("instance"))
        assert dispatcher.handle(_endpoint(_adder()), {"x": 2, "y": 3}) == 5

    def test_named_results(self) -> None:
        handle = _Handle(lambda a, b: [a // b, a % b])
        dispatcher = Dispatcher(ExclusiveInstance("instance"))
        assert dispatcher.handle(_endpoint(handle, named=True), {"x": 7, "y": 2}) == {"q": 3, "r": 1}

    def test_missing_parameter(self) -> None:
        handle = _adder()
        with pytest.raises(MissingParameter) as exc_info:
            Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(handle), {"x": 2})
        assert exc_info.value.name == "y"
        assert exc_info.value.status == 400
        assert handle.instances == []

    def test_type_mismatch_references_parameter(self) -> None:
        with pytest.raises(TypeMismatch) as exc_info:
            Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(_adder()), {"x": "2", "y": 3})
        assert exc_info.value.path == "x"
        assert exc_info.value.to_json()["error"]["path"] == "x"

    def test_body_must_be_object(self) -> None:
        with pytest.raises(InvalidBody):
            Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(_adder()), [2, 3])  # type: ignore[arg-type]

    def test_call_receives_leased_instance(self) -> None:
        handle = _adder()
        Dispatcher(ExclusiveInstance("the-instance")).handle(_endpoint(handle), {"x": 1, "y": 1})
        assert handle.instances == ["the-instance"]


# ###############
# Failures and Cleanup
# ###############


class TestFailures:
    def test_trap_is_call_failed(self) -> None:
        def _trap(x: int, y: int) -> list[int]:
            raise RuntimeError("unreachable executed")

        handle = _Handle(_trap)
        with pytest.raises(CallFailed, match="unreachable executed") as exc_info:
            Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(handle), {"x": 1, "y": 1})
        assert exc_info.value.status == 500
        assert handle.cleanups == 1

    def test_wrong_result_count_is_call_failed(self) -> None:
        handle = _Handle(lambda x, y: [])
        with pytest.raises(CallFailed, match="returned 0 value"):
            Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(handle), {"x": 1, "y": 1})

    def test_cleanup_runs_after_success(self) -> None:
        handle = _adder()
        Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(handle), {"x": 1, "y": 1})
        assert handle.cleanups == 1

    def test_cleanup_failure_does_not_override_result(self, caplog: pytest.LogCaptureFixture) -> None:
        handle = _Handle(lambda x, y: [x + y], fail_cleanup=True)
        with caplog.at_level(logging.WARNING, logger="wasm2openapi.server.dispatcher"):
            result = Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(handle), {"x": 2, "y": 3})
        assert result == 5
        assert "post-return trapped" in caplog.text

    def test_cleanup_failure_does_not_override_call_failure(self) -> None:
        def _trap(x: int, y: int) -> list[int]:
            raise RuntimeError("trap")

        handle = _Handle(_trap, fail_cleanup=True)
        with pytest.raises(CallFailed, match="trap"):
            Dispatcher(ExclusiveInstance("instance")).handle(_endpoint(handle), {"x": 1, "y": 1})

    def test_lease_released_after_failure(self) -> None:
        def _trap(x: int, y: int) -> list[int]:
            raise RuntimeError("trap")

        lease = ExclusiveInstance("instance")
        dispatcher = Dispatcher(lease)
        with pytest.raises(CallFailed):
            dispatcher.handle(_endpoint(_Handle(_trap)), {"x": 1, "y": 1})
        assert dispatcher.handle(_endpoint(_adder()), {"x": 1, "y": 1}) == 2


# ###############
# Concurrency
# ###############


def _timed_handle(log: list[tuple[float, float]], lock: threading.Lock) -> _Handle:
    def _slow_add(x: int, y: int) -> list[int]:
        start = time.monotonic()
        time.sleep(0.05)
        end = time.monotonic()
        with lock:
            log.append((start, end))
        return [x + y]

    return _Handle(_slow_add)


def _run_concurrently(dispatcher: Dispatcher, endpoint: Endpoint, count: int) -> list[Any]:
    results: list[Any] = [None] * count

    def _call(index: int) -> None:
        results[index] = dispatcher.handle(endpoint, {"x": index, "y": 1})

    threads = [threading.Thread(target=_call, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


class TestConcurrency:
    def test_calls_on_one_instance_never_overlap(self) -> None:
        log: list[tuple[float, float]] = []
        endpoint = _endpoint(_timed_handle(log, threading.Lock()))
        results = _run_concurrently(Dispatcher(ExclusiveInstance("instance")), endpoint, 4)

        assert results == [1, 2, 3, 4]
        intervals = sorted(log)
        for (_, first_end), (second_start, _) in zip(intervals, intervals[1:]):
            assert second_start >= first_end

    def test_pool_hands_out_distinct_instances(self) -> None:
        log: list[tuple[float, float]] = []
        handle = _timed_handle(log, threading.Lock())
        pool = InstancePool(["a", "b"])
        results = _run_concurrently(Dispatcher(pool), _endpoint(handle), 4)

        assert results == [1, 2, 3, 4]
        assert set(handle.instances) <= {"a", "b"}
