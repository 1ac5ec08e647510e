"""Reducer Storage.

Persistence middleware for action/reducer state containers:
- an admissibility filter (reserved types, blacklist, whitelist)
- fire-and-forget saves through a pluggable storage engine
- a SAVE action dispatched back into the pipeline once a save succeeds
- a loader and reducer wrapper to restore persisted state
"""

__version__ = "0.1.0"

from reducer_storage.config import StorageSettings
from reducer_storage.constants import LOAD, SAVE
from reducer_storage.loader import create_loader
from reducer_storage.middleware import create_middleware
from reducer_storage.reducer import simple_merger, storage_reducer

__all__ = [
    "LOAD",
    "SAVE",
    "StorageSettings",
    "__version__",
    "create_loader",
    "create_middleware",
    "simple_merger",
    "storage_reducer",
]
