"""Reference storage engines.

- `MemoryEngine`: keeps the last snapshot in memory
- `JsonFileEngine`: persists the snapshot as a JSON document
"""

from reducer_storage.engines.json_file import JsonFileEngine
from reducer_storage.engines.memory import MemoryEngine

__all__ = [
    "JsonFileEngine",
    "MemoryEngine",
]
