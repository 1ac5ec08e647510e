from __future__ import annotations

import copy
from typing import Any


class MemoryEngine:
    """Async engine keeping the most recent snapshot in memory.

    Snapshots are deep-copied on save so later in-place mutation of the
    store's state cannot leak into what was "persisted".
    """

    def __init__(self, initial: Any = None) -> None:
        self._state: Any = copy.deepcopy(initial) if initial is not None else {}
        self.save_count = 0

    async def save(self, state: Any) -> None:
        self._state = copy.deepcopy(state)
        self.save_count += 1

    async def load(self) -> Any:
        return copy.deepcopy(self._state)
