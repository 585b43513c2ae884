"""Shared test fixtures and fake connection handles."""

import asyncio
from typing import Any

import pytest

from app.services.connection_registry import ConnectionHandle


class FakeConnection(ConnectionHandle):
    """Connection handle that records every frame sent to it.

    Set ``fail`` to make sends raise like a socket that has already closed.
    """

    def __init__(self, name: str = "conn") -> None:
        self.name = name
        self.frames: list[tuple[str, Any]] = []
        self.fail = False

    async def send(self, event: str, data: Any) -> None:
        if self.fail:
            raise RuntimeError(f"{self.name} is closed")
        self.frames.append((event, data))

    def events(self, name: str) -> list[Any]:
        return [data for event, data in self.frames if event == name]

    def clear(self) -> None:
        self.frames.clear()

    def __repr__(self) -> str:
        return f"FakeConnection({self.name!r})"


class StalledConnection(FakeConnection):
    """Connection whose sends never complete, like a peer that stopped reading."""

    def __init__(self, name: str = "stalled") -> None:
        super().__init__(name)
        self.attempts = 0
        self._never = asyncio.Event()

    async def send(self, event: str, data: Any) -> None:
        self.attempts += 1
        await self._never.wait()


@pytest.fixture
def make_connection():
    def _make(name: str = "conn") -> FakeConnection:
        return FakeConnection(name)

    return _make
