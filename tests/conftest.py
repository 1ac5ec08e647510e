"""Test configuration and fixtures."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from reducer_storage.logging import DIAGNOSTICS_LOGGER

_SETTINGS_ENV_VARS = (
    "STORAGE_ENV",
    "LOG_LEVEL",
    "STORAGE_ATTACH_ORIGIN",
    "STORAGE_STATE_FILE",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep settings independent from the developer's environment and `.env`."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def state() -> dict[str, Any]:
    return {"x": 42}


@pytest.fixture
def engine() -> Mock:
    """Engine whose save succeeds asynchronously."""
    mock = Mock(spec=["save", "load"])
    mock.save = AsyncMock(return_value=None)
    mock.load = AsyncMock(return_value={})
    return mock


@pytest.fixture
def failing_engine() -> Mock:
    mock = Mock(spec=["save", "load"])
    mock.save = AsyncMock(side_effect=OSError("disk full"))
    mock.load = AsyncMock(side_effect=OSError("disk gone"))
    return mock


@pytest.fixture
def store(state: dict[str, Any]) -> Mock:
    mock = Mock(spec=["get_state", "dispatch"])
    mock.get_state.return_value = state
    return mock


@pytest.fixture
def diagnostics_caplog(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.WARNING, logger=DIAGNOSTICS_LOGGER)
    return caplog


@pytest.fixture
def drain() -> Callable[[], Awaitable[None]]:
    """Wait until every other task on the running loop has finished."""

    async def _drain() -> None:
        for _ in range(10):
            pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    return _drain


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    diagnostics_level = logging.getLogger(DIAGNOSTICS_LOGGER).level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger(DIAGNOSTICS_LOGGER).setLevel(diagnostics_level)
