"""Storage middleware factory."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection
from typing import Any

from reducer_storage.actions import Action
from reducer_storage.config import StorageSettings
from reducer_storage.filtering import Admission, StorageConfigError, admit, build_filter_config
from reducer_storage.interfaces import Dispatch, Middleware, StateContainer, StorageEngine
from reducer_storage.scheduler import schedule_save

logger = logging.getLogger(__name__)


def create_middleware(
    engine: StorageEngine,
    blacklist: Collection[str] | None = None,
    whitelist: Collection[str] | Callable[[Action], bool] | None = None,
    *,
    diagnostics: bool | None = None,
    attach_origin: bool | None = None,
    settings: StorageSettings | None = None,
) -> Middleware:
    """Create a middleware that saves state after admissible actions.

    The returned callable follows the usual curried shape:
    ``middleware(store)(next)(action)``. Every action is passed to ``next``
    first and its return value is returned unchanged; saving happens in the
    background afterwards.

    Args:
        engine: Storage engine with a ``save(state)`` method.
        blacklist: Action types that never trigger a save.
        whitelist: Action types that exclusively trigger a save, or a
            predicate called with the complete action.
        diagnostics: Emit warnings for malformed actions and ambiguous
            configuration. Defaults to ``settings.diagnostics_enabled``.
        attach_origin: Add the triggering action as ``meta.origin`` on SAVE
            actions. Defaults to ``settings.origin_enabled``.
        settings: Settings consulted for unset flags. Loaded from the
            environment when omitted and a flag is unset.

    Raises:
        StorageConfigError: If the engine has no ``save`` method or the
            lists have an unsupported shape.
    """
    if not callable(getattr(engine, "save", None)):
        raise StorageConfigError("engine must provide a callable save(state) method")

    if diagnostics is None or attach_origin is None:
        settings = settings or StorageSettings()
        if diagnostics is None:
            diagnostics = settings.diagnostics_enabled
        if attach_origin is None:
            attach_origin = settings.origin_enabled

    config = build_filter_config(blacklist, whitelist, diagnostics=diagnostics)
    logger.debug(
        "Storage middleware created",
        extra={
            "blacklist": sorted(config.blacklist or ()),
            "whitelist": type(config.whitelist).__name__ if config.whitelist else None,
            "diagnostics": diagnostics,
            "attach_origin": attach_origin,
        },
    )

    def middleware(store: StateContainer) -> Callable[[Dispatch], Dispatch]:
        def wrap(next_: Dispatch) -> Dispatch:
            def handle(action: Any) -> Any:
                result = next_(action)
                if admit(action, config, diagnostics=diagnostics) is Admission.ELIGIBLE:
                    schedule_save(action, store, engine, attach_origin=attach_origin)
                return result

            return handle

        return wrap

    return middleware
