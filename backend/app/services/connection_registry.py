"""Track the single active realtime connection for each online user."""

from abc import ABC, abstractmethod
from typing import Any


class ConnectionHandle(ABC):
    """Transport-level reference used to deliver events to one connection."""

    @abstractmethod
    async def send(self, event: str, data: Any) -> None:
        """Deliver one event frame. May raise if the transport is closed."""
        ...


class ConnectionRegistry:
    """Map each user identity to its authoritative connection handle.

    A user has at most one registered handle. Registering again replaces
    the previous handle without closing it (last registration wins).
    """

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionHandle] = {}

    def register(self, user_id: str, handle: ConnectionHandle) -> None:
        """Insert or replace the handle for a user."""
        self._connections[user_id] = handle

    def unregister(self, user_id: str, handle: ConnectionHandle | None = None) -> bool:
        """Remove a user's entry. Absent users are a no-op.

        When ``handle`` is given, the entry is only removed if it is still
        that handle. Returns True if an entry was removed.
        """
        current = self._connections.get(user_id)
        if current is None:
            return False
        if handle is not None and current is not handle:
            return False
        del self._connections[user_id]
        return True

    def lookup(self, user_id: str) -> ConnectionHandle | None:
        return self._connections.get(user_id)

    def is_current(self, user_id: str, handle: ConnectionHandle) -> bool:
        """Return True if ``handle`` is the registered handle for the user."""
        return self._connections.get(user_id) is handle

    def snapshot_ids(self) -> set[str]:
        """Return the identities online right now."""
        return set(self._connections)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
