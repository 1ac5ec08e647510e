#!/usr/bin/env python3
"""Persisted counter example.

This demonstrates wiring the storage middleware into a store:

* load settings from `.env`
* restore the previous state from the JSON state file
* apply a few actions; each one is saved in the background

Run it twice and the counter keeps going from where it stopped.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Any, Sequence

from reducer_storage import SAVE, StorageSettings, create_loader, create_middleware, storage_reducer
from reducer_storage.engines import JsonFileEngine
from reducer_storage.logging import configure_logging
from reducer_storage.store import create_store


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Increment a persisted counter.")
    parser.add_argument("--times", type=int, default=1, help="How many increments to apply")
    parser.add_argument(
        "--skip",
        default="",
        help='Comma-separated action types that must not trigger a save, e.g. "TICK"',
    )
    return parser.parse_args(argv)


def counter(state: Any, action: Any) -> Any:
    state = state if state is not None else {"count": 0, "last_saved": None}
    if action["type"] == "INCREMENT":
        return {**state, "count": state["count"] + 1}
    if action["type"] == SAVE:
        return {**state, "last_saved": action["payload"]["count"]}
    return state


async def run(args: argparse.Namespace) -> int:
    settings = StorageSettings()
    configure_logging(settings.log_level)

    blacklist = [part.strip() for part in args.skip.split(",") if part.strip()]
    engine = JsonFileEngine.from_settings(settings)
    store = create_store(
        storage_reducer(counter),
        middlewares=[create_middleware(engine, blacklist=blacklist, settings=settings)],
    )

    await create_loader(engine)(store)
    print(f"Restored count: {store.get_state()['count']}")

    for _ in range(args.times):
        store.dispatch({"type": "INCREMENT"})
        store.dispatch({"type": "TICK"})
        # Let the background save finish before the next increment.
        await asyncio.sleep(0.05)

    print(f"Count is now {store.get_state()['count']}")
    print(f"Last saved count: {store.get_state()['last_saved']}")
    print(f"Persisted to: {engine.path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    return asyncio.run(run(_parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
