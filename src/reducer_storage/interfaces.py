"""Collaborator interfaces consumed by the middleware.

Both are structural: any object with the named methods qualifies.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from concurrent.futures import Future
from typing import Any, Protocol, TypeAlias, runtime_checkable

from reducer_storage.actions import Action

Deferred: TypeAlias = "Awaitable[Any] | Future[Any]"

Dispatch: TypeAlias = Callable[[Any], Any]
Middleware: TypeAlias = "Callable[[StateContainer], Callable[[Dispatch], Dispatch]]"


@runtime_checkable
class StorageEngine(Protocol):
    """Durable storage for state snapshots.

    `save` must tolerate being called again before a previous call settled.
    Results are either awaitables (scheduled on the running event loop) or
    `concurrent.futures.Future` objects (e.g. from a thread pool).
    """

    def save(self, state: Any) -> Deferred:
        """Persist `state`; the deferred result fails when the write failed."""
        ...

    def load(self) -> Deferred:
        """Return the last persisted state."""
        ...


@runtime_checkable
class StateContainer(Protocol):
    def get_state(self) -> Any: ...

    def dispatch(self, action: Action) -> Any: ...
