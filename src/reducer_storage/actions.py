from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NotRequired, TypedDict

from reducer_storage.constants import LOAD, SAVE

Action = Mapping[str, Any]


class ActionMeta(TypedDict):
    origin: Action


class SaveAction(TypedDict):
    """Dispatched once the engine reports a successful write."""

    type: str
    payload: Any
    meta: NotRequired[ActionMeta]


class LoadAction(TypedDict):
    type: str
    payload: Any


def save_action(payload: Any, origin: Action | None = None) -> SaveAction:
    action: SaveAction = {"type": SAVE, "payload": payload}
    if origin is not None:
        action["meta"] = {"origin": origin}
    return action


def load_action(payload: Any) -> LoadAction:
    return {"type": LOAD, "payload": payload}
