"""Action admissibility filtering.

Decides, per dispatched action, whether it should trigger a state save.
The decision is a pure function of the action and an immutable `FilterConfig`;
configuration filtering is normal operation and stays silent, malformed
actions are reported through the diagnostic logger when diagnostics are on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from reducer_storage.actions import Action
from reducer_storage.constants import RESERVED_TYPES
from reducer_storage.logging import DIAGNOSTICS_LOGGER

logger = logging.getLogger(__name__)
diagnostics_logger = logging.getLogger(DIAGNOSTICS_LOGGER)

IGNORED_MARKER = "ACTION IGNORED!"
_FRAGMENT_LIMIT = 100


class StorageConfigError(ValueError):
    pass


def action_type_of(action: Action) -> str:
    """Return the plain string type of a well-formed action."""
    action_type = action["type"]
    # str-based Enum members hash by name; compare by value.
    if isinstance(action_type, Enum):
        return str(action_type.value)
    return action_type


class Admission(str, Enum):
    ELIGIBLE = "eligible"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class ByMembership:
    """Whitelist admitting only the listed action types."""

    types: frozenset[str]

    def allows(self, action: Action) -> bool:
        return action_type_of(action) in self.types


@dataclass(frozen=True, slots=True)
class ByPredicate:
    """Whitelist delegating to a predicate called with the whole action."""

    predicate: Callable[[Action], bool]

    def allows(self, action: Action) -> bool:
        return bool(self.predicate(action))


Whitelist = ByMembership | ByPredicate


@dataclass(frozen=True, slots=True)
class FilterConfig:
    blacklist: frozenset[str] | None = None
    whitelist: Whitelist | None = None


def _type_set(value: Collection[str], *, name: str) -> frozenset[str]:
    if isinstance(value, (str, bytes)):
        raise StorageConfigError(f"{name} must be a collection of action types, not a string")
    types = frozenset(value)
    bad = [t for t in types if not isinstance(t, str)]
    if bad:
        raise StorageConfigError(f"{name} entries must be strings, got: {bad!r}")
    return types


def build_filter_config(
    blacklist: Collection[str] | None = None,
    whitelist: Collection[str] | Callable[[Action], bool] | None = None,
    *,
    diagnostics: bool = False,
) -> FilterConfig:
    """Build the immutable filter configuration for one middleware instance.

    Args:
        blacklist: Action types that never trigger a save.
        whitelist: Either the only action types that trigger a save, or a
            predicate receiving the complete action.
        diagnostics: Warn when a type is both black- and whitelisted.

    Raises:
        StorageConfigError: If either argument has an unsupported shape.
    """
    if callable(blacklist):
        raise StorageConfigError("blacklist must be a collection of action types")

    black = _type_set(blacklist, name="blacklist") if blacklist is not None else None

    white: Whitelist | None
    if whitelist is None:
        white = None
    elif callable(whitelist):
        white = ByPredicate(whitelist)
    else:
        white = ByMembership(_type_set(whitelist, name="whitelist"))

    if diagnostics and black and isinstance(white, ByMembership):
        for action_type in sorted(black & white.types):
            diagnostics_logger.warning(
                f"{IGNORED_MARKER} Action type {action_type!r} is on both the blacklist "
                "and the whitelist. The blacklist wins; the whitelist alone already "
                "excludes every type it does not list.",
                extra={"action_type": action_type},
            )

    return FilterConfig(blacklist=black, whitelist=white)


def _fragment(value: Any) -> str:
    try:
        text = str(value)
    except Exception:
        # Malformed actions may not even be printable; fall back to the identity repr.
        text = object.__repr__(value)
    if len(text) > _FRAGMENT_LIMIT:
        return text[:_FRAGMENT_LIMIT] + "..."
    return text


def _shape_problem(action: Any) -> str | None:
    """Describe why `action` is not a typed action, or None when it is."""
    if callable(action):
        return (
            "Actions should be mappings with a type key but received a function! "
            f"Your function resolved to: {_fragment(action)}"
        )
    if not isinstance(action, Mapping):
        return f"Actions should be mappings with a type key but received: {_fragment(action)}"
    try:
        action_type = action.get("type")
    except Exception:
        action_type = None
    if not isinstance(action_type, str):
        return (
            "Action objects should have a type property (a string) but received: "
            f"{_fragment(action)}"
        )
    return None


def admit(action: Any, config: FilterConfig, *, diagnostics: bool = False) -> Admission:
    """Decide whether `action` should trigger a save.

    Order: shape, reserved types, blacklist, whitelist. The first rule that
    rejects the action wins. Never raises.
    """
    problem = _shape_problem(action)
    if problem is not None:
        if diagnostics:
            diagnostics_logger.warning(f"{IGNORED_MARKER} {problem}")
        return Admission.SKIP

    action_type = action_type_of(action)
    if action_type in RESERVED_TYPES:
        return Admission.SKIP

    if config.blacklist is not None and action_type in config.blacklist:
        return Admission.SKIP

    if config.whitelist is not None:
        try:
            allowed = config.whitelist.allows(action)
        except Exception:
            logger.exception("Whitelist predicate failed", extra={"action_type": action_type})
            return Admission.SKIP
        if not allowed:
            return Admission.SKIP

    return Admission.ELIGIBLE
