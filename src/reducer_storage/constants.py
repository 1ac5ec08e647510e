"""Reserved action types used by the storage protocol itself.

Neither type is ever eligible for persistence, so a SAVE dispatched after a
successful write cannot trigger another write.
"""

from __future__ import annotations

LOAD = "REDUCER_STORAGE_LOAD"
SAVE = "REDUCER_STORAGE_SAVE"

RESERVED_TYPES: frozenset[str] = frozenset({LOAD, SAVE})
