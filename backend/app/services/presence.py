"""Broadcast the full online-user set to every open connection."""

from app.services.connection_registry import ConnectionHandle, ConnectionRegistry
from app.services.outbox import Outbox

GET_ONLINE_USERS = "getOnlineUsers"


class PresenceBroadcaster:
    """Announce the online set to the whole audience on every membership change.

    The audience is every open connection, including anonymous ones and
    connections whose identity was taken over by a newer connection.
    """

    def __init__(self, registry: ConnectionRegistry, outbox: Outbox | None = None) -> None:
        self._registry = registry
        self.outbox = outbox if outbox is not None else Outbox()
        self._audience: list[ConnectionHandle] = []

    def attach(self, handle: ConnectionHandle) -> None:
        if handle not in self._audience:
            self._audience.append(handle)

    def detach(self, handle: ConnectionHandle) -> None:
        if handle in self._audience:
            self._audience.remove(handle)
        self.outbox.discard(handle)

    @property
    def audience_size(self) -> int:
        return len(self._audience)

    def online_users(self) -> list[str]:
        return sorted(self._registry.snapshot_ids())

    def announce(self) -> int:
        """Queue `getOnlineUsers` for every open connection. Returns frames queued."""
        online = self.online_users()
        queued = 0
        for handle in self._audience:
            if self.outbox.post(handle, GET_ONLINE_USERS, online):
                queued += 1
        return queued
