"""Unit tests for fire-and-forget saves.

Covers the deferred shapes an engine may return: coroutines, thread-pool
futures and plain synchronous results.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any
from unittest.mock import Mock

import pytest

from reducer_storage.constants import SAVE
from reducer_storage.scheduler import schedule_save

Drain = Callable[[], Awaitable[None]]


def test_engine_raising_synchronously_is_swallowed(store: Mock) -> None:
    engine = Mock(spec=["save"])
    engine.save.side_effect = RuntimeError("no connection")

    schedule_save({"type": "A"}, store, engine, attach_origin=True)

    store.dispatch.assert_not_called()


@pytest.mark.asyncio
async def test_synchronous_engine_announces_after_the_call_returns(
    store: Mock, state: dict[str, Any]
) -> None:
    engine = Mock(spec=["save"])
    engine.save.return_value = None

    schedule_save({"type": "A"}, store, engine, attach_origin=False)

    engine.save.assert_called_once_with(state)
    store.dispatch.assert_not_called()
    await asyncio.sleep(0)
    store.dispatch.assert_called_once_with({"type": SAVE, "payload": state})


@pytest.mark.asyncio
async def test_completed_future_announces_after_the_call_returns(
    store: Mock, state: dict[str, Any], drain: Drain
) -> None:
    future: Future[None] = Future()
    future.set_result(None)
    engine = Mock(spec=["save"])
    engine.save.return_value = future

    schedule_save({"type": "A"}, store, engine, attach_origin=False)
    store.dispatch.assert_not_called()
    await drain()

    store.dispatch.assert_called_once_with({"type": SAVE, "payload": state})


def test_synchronous_engine_without_loop_announces_inline(
    store: Mock, state: dict[str, Any]
) -> None:
    engine = Mock(spec=["save"])
    engine.save.return_value = None

    schedule_save({"type": "A"}, store, engine, attach_origin=False)

    store.dispatch.assert_called_once_with({"type": SAVE, "payload": state})


def test_awaitable_without_running_loop_is_dropped(engine: Mock, store: Mock) -> None:
    schedule_save({"type": "A"}, store, engine, attach_origin=False)

    engine.save.assert_called_once()
    store.dispatch.assert_not_called()


@pytest.mark.parametrize("outcome", ["result", "error", "cancelled"])
def test_future_without_loop_is_never_announced(store: Mock, outcome: str) -> None:
    future: Future[None] = Future()
    engine = Mock(spec=["save"])
    engine.save.return_value = future

    schedule_save({"type": "A"}, store, engine, attach_origin=True)
    if outcome == "result":
        future.set_result(None)
    elif outcome == "error":
        future.set_exception(OSError("write failed"))
    else:
        future.cancel()

    engine.save.assert_called_once()
    store.dispatch.assert_not_called()


@pytest.mark.asyncio
async def test_thread_pool_future_announces_on_the_loop(
    store: Mock, state: dict[str, Any], drain: Drain
) -> None:
    loop_thread: list[bool] = []
    store.dispatch.side_effect = lambda _action: loop_thread.append(_on_loop())
    with ThreadPoolExecutor(max_workers=1) as pool:
        engine = Mock(spec=["save"])
        engine.save.side_effect = lambda snapshot: pool.submit(lambda: None)

        schedule_save({"type": "A"}, store, engine, attach_origin=False)
        await drain()

    store.dispatch.assert_called_once_with({"type": SAVE, "payload": state})
    assert loop_thread == [True]


def _on_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


@pytest.mark.asyncio
async def test_payload_is_the_snapshot_taken_before_the_write(drain: Drain) -> None:
    states = iter([{"v": 1}, {"v": 2}])
    store = Mock(spec=["get_state", "dispatch"])
    store.get_state.side_effect = lambda: next(states)
    written: list[Any] = []

    async def save(snapshot: Any) -> None:
        written.append(snapshot)

    engine = Mock(spec=["save"])
    engine.save.side_effect = save

    schedule_save({"type": "A"}, store, engine, attach_origin=False)
    await drain()

    assert written == [{"v": 1}]
    store.dispatch.assert_called_once_with({"type": SAVE, "payload": {"v": 1}})
    assert store.get_state.call_count == 1


@pytest.mark.asyncio
async def test_saves_complete_independently_of_initiation_order(drain: Drain) -> None:
    slow_gate = asyncio.Event()
    store = Mock(spec=["get_state", "dispatch"])
    store.get_state.side_effect = [{"n": "slow"}, {"n": "fast"}]

    async def save(snapshot: Any) -> None:
        if snapshot["n"] == "slow":
            await slow_gate.wait()

    engine = Mock(spec=["save"])
    engine.save.side_effect = save

    schedule_save({"type": "first"}, store, engine, attach_origin=False)
    schedule_save({"type": "second"}, store, engine, attach_origin=False)
    for _ in range(3):
        await asyncio.sleep(0)
    slow_gate.set()
    await drain()

    payloads = [c.args[0]["payload"]["n"] for c in store.dispatch.call_args_list]
    assert payloads == ["fast", "slow"]


@pytest.mark.asyncio
async def test_failing_dispatch_is_logged_not_raised(
    engine: Mock, store: Mock, drain: Drain, caplog: pytest.LogCaptureFixture
) -> None:
    store.dispatch.side_effect = RuntimeError("reducer blew up")

    with caplog.at_level(logging.ERROR, logger="reducer_storage.scheduler"):
        schedule_save({"type": "A"}, store, engine, attach_origin=False)
        await drain()

    assert "Dispatching the SAVE action failed" in caplog.text
