"""Fire-and-forget state saves.

`schedule_save` snapshots the store, hands the snapshot to the engine and
returns immediately. When the engine reports success, a SAVE action carrying
that same snapshot is dispatched back into the store. A failed write is
dropped: no retry, no re-raise, no SAVE action.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import Future
from typing import Any

from reducer_storage.actions import Action, save_action
from reducer_storage.interfaces import StateContainer, StorageEngine

logger = logging.getLogger(__name__)

# Strong references so pending saves are not garbage collected mid-flight.
_background_tasks: set[asyncio.Task[None]] = set()


def _announce(store: StateContainer, snapshot: Any, origin: Action | None) -> None:
    try:
        store.dispatch(save_action(snapshot, origin=origin))
    except Exception:
        logger.exception("Dispatching the SAVE action failed")


async def _settle(pending: Awaitable[Any], on_success: Callable[[], None]) -> None:
    try:
        await pending
    except Exception:
        logger.debug("State save failed; snapshot dropped", exc_info=True)
        return
    on_success()


def schedule_save(
    action: Action,
    store: StateContainer,
    engine: StorageEngine,
    *,
    attach_origin: bool,
) -> None:
    """Persist the current state of `store` without blocking the caller.

    Must be called after the pipeline delegate handled `action`, so the
    snapshot includes whatever the reducers did with it. With a running event
    loop the SAVE action is always dispatched from a later loop iteration,
    never from inside this call.

    Without a running loop there is nothing to defer onto:
    - a synchronous engine (plain return value) announces SAVE immediately,
      nested inside the dispatch that triggered it
    - awaitables and `concurrent.futures.Future` results are not announced;
      a future's write still completes on its executor, but SAVE is never
      dispatched from a worker thread

    Args:
        action: The action that triggered the save.
        store: Read once for the snapshot; receives the SAVE action.
        engine: Storage engine performing the write.
        attach_origin: Include `action` as `meta.origin` on the SAVE action.
    """
    snapshot = store.get_state()
    origin = action if attach_origin else None

    def on_success() -> None:
        _announce(store, snapshot, origin)

    try:
        pending = engine.save(snapshot)
    except Exception:
        logger.debug("State save raised; snapshot dropped", exc_info=True)
        return

    try:
        loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None:
        if isinstance(pending, Future):
            logger.debug("No running event loop; state save left unannounced")
        elif inspect.isawaitable(pending):
            if inspect.iscoroutine(pending):
                pending.close()
            logger.debug("No running event loop; asynchronous state save dropped")
        else:
            on_success()
        return

    if isinstance(pending, Future):
        pending = asyncio.wrap_future(pending, loop=loop)

    if not inspect.isawaitable(pending):
        # Synchronous engine: the write already happened.
        loop.call_soon(on_success)
        return

    task = loop.create_task(_settle(pending, on_success))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
