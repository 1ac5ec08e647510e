"""Restore persisted state into a store."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import Future
from typing import Any

from reducer_storage.actions import load_action
from reducer_storage.interfaces import StateContainer, StorageEngine

logger = logging.getLogger(__name__)


def create_loader(engine: StorageEngine) -> Callable[[StateContainer], Awaitable[Any]]:
    """Create an async loader for `engine`.

    The loader reads the persisted state, dispatches a LOAD action carrying it
    and returns it. Unlike saves, load failures propagate to the caller.
    """

    async def load(store: StateContainer) -> Any:
        pending = engine.load()
        if isinstance(pending, Future):
            pending = asyncio.wrap_future(pending)
        state = await pending if inspect.isawaitable(pending) else pending

        logger.info("Loaded persisted state", extra={"state_type": type(state).__name__})
        store.dispatch(load_action(state))
        return state

    return load
