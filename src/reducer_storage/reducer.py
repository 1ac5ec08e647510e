"""Reducer wrapper applying LOAD actions, and state mergers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from reducer_storage.actions import Action
from reducer_storage.constants import LOAD

Reducer = Callable[[Any, Action], Any]
Merger = Callable[[Any, Any], Any]


def _deep_merge(old: Mapping[str, Any], new: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(old)
    for key, value in new.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = _deep_merge(current, value)
        elif isinstance(value, Mapping):
            merged[key] = _deep_merge({}, value)
        else:
            merged[key] = value
    return merged


def simple_merger(old_state: Any, new_state: Any) -> Any:
    """Merge loaded state into the current state.

    Mapping values are merged recursively; every other value (lists included)
    replaces the current one. Keys only present in the current state survive,
    so defaults added after the state was persisted are kept.
    """
    if new_state is None:
        return old_state
    if not isinstance(old_state, Mapping) or not isinstance(new_state, Mapping):
        return new_state
    return _deep_merge(old_state, new_state)


def storage_reducer(reducer: Reducer, merger: Merger = simple_merger) -> Reducer:
    """Wrap `reducer` so LOAD actions merge their payload before it runs."""

    def wrapped(state: Any, action: Action) -> Any:
        if isinstance(action, Mapping) and action.get("type") == LOAD:
            state = merger(state, action.get("payload"))
        return reducer(state, action)

    return wrapped
