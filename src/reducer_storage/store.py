"""A minimal state container.

Any object with `get_state()` and `dispatch(action)` works with the
middleware; this one exists for applications that do not bring their own.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from reducer_storage.actions import Action
from reducer_storage.interfaces import Middleware
from reducer_storage.reducer import Reducer

INIT = "@@reducer_storage/INIT"


class Store:
    """Holds state, runs the reducer and chains middleware around dispatch.

    The first middleware in `middlewares` is the outermost one. Actions
    dispatched from inside a middleware go through the full chain again.
    """

    def __init__(
        self,
        reducer: Reducer,
        initial_state: Any = None,
        middlewares: Sequence[Middleware] = (),
    ) -> None:
        self._reducer = reducer
        self._state = reducer(initial_state, {"type": INIT})
        self._listeners: list[Callable[[], None]] = []

        dispatch: Callable[[Any], Any] = self._reduce
        for middleware in reversed(middlewares):
            dispatch = middleware(self)(dispatch)
        self._dispatch = dispatch

    def get_state(self) -> Any:
        return self._state

    def dispatch(self, action: Action) -> Any:
        return self._dispatch(action)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call `listener` after every reduced action; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _reduce(self, action: Any) -> Any:
        self._state = self._reducer(self._state, action)
        for listener in list(self._listeners):
            listener()
        return action


def create_store(
    reducer: Reducer,
    initial_state: Any = None,
    middlewares: Sequence[Middleware] = (),
) -> Store:
    return Store(reducer, initial_state=initial_state, middlewares=middlewares)
