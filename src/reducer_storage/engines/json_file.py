from __future__ import annotations

import asyncio
import itertools
import json
import logging
import threading
from pathlib import Path
from typing import Any

from reducer_storage.config import StorageSettings

logger = logging.getLogger(__name__)


class JsonFileEngine:
    """Persist state snapshots as a single JSON document.

    File IO runs in a worker thread so saving never blocks the event loop.
    Overlapping saves are serialised by a lock, and each save carries a
    sequence number taken when it was requested: a write older than the one
    already on disk is skipped, so a slow thread cannot roll the file back.
    Writes go to a sibling temp file first and are renamed into place, so a
    crash mid-write leaves the previous snapshot intact.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._written = 0

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> JsonFileEngine:
        return cls(settings.state_file)

    @property
    def path(self) -> Path:
        return self._path

    def _write(self, text: str, sequence: int) -> bool:
        with self._lock:
            if sequence < self._written:
                logger.debug(
                    "Stale state write skipped",
                    extra={"sequence": sequence, "written": self._written},
                )
                return False
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(self._path)
            self._written = sequence
        logger.debug("State written", extra={"path": str(self._path), "bytes": len(text)})
        return True

    def _read(self) -> Any:
        with self._lock:
            if not self._path.exists():
                logger.info("No persisted state found, starting fresh")
                return {}
            return json.loads(self._path.read_text(encoding="utf-8"))

    async def save(self, state: Any) -> None:
        # Serialise on the loop thread; the store may move on while the write runs.
        sequence = next(self._sequence)
        text = json.dumps(state, indent=2, ensure_ascii=False) + "\n"
        await asyncio.to_thread(self._write, text, sequence)

    async def load(self) -> Any:
        return await asyncio.to_thread(self._read)
