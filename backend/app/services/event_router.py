"""Per-connection lifecycle and inbound event dispatch for presence and typing."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from app.config import Settings, settings
from app.schemas.realtime import TypingEventIn
from app.services.connection_registry import ConnectionHandle, ConnectionRegistry
from app.services.outbox import Outbox
from app.services.presence import PresenceBroadcaster
from app.services.typing_tracker import Emission, TypingTracker

logger = logging.getLogger(__name__)

TYPING = "typing"
STOP_TYPING = "stopTyping"
NEW_MESSAGE = "newMessage"


class EventRouter:
    """Coordinate the registry, typing tracker and broadcaster for each connection.

    A connection goes Connecting -> Online -> Disconnected. Connections
    without an identity are never registered but still receive presence
    broadcasts. Every operation is synchronous: state changes apply in one
    step on the event loop and outbound frames are queued, never awaited.
    """

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        tracker: TypingTracker | None = None,
        broadcaster: PresenceBroadcaster | None = None,
        *,
        typing_timeout_seconds: float = 3.0,
    ) -> None:
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.tracker = (
            tracker
            if tracker is not None
            else TypingTracker(timeout_seconds=typing_timeout_seconds)
        )
        # Expired signals are delivered through the same targeted emit path.
        if self.tracker.on_expire is None:
            self.tracker.on_expire = self.emit
        self.broadcaster = (
            broadcaster if broadcaster is not None else PresenceBroadcaster(self.registry)
        )

    @classmethod
    def from_settings(cls, app_settings: Settings) -> EventRouter:
        return cls(typing_timeout_seconds=app_settings.typing_timeout_seconds)

    @property
    def outbox(self) -> Outbox:
        return self.broadcaster.outbox

    def connect(self, user_id: str | None, handle: ConnectionHandle) -> None:
        """Bring a connection online and announce the new online set."""
        self.broadcaster.attach(handle)
        if user_id:
            replaced = self.registry.lookup(user_id)
            self.registry.register(user_id, handle)
            if replaced is not None and replaced is not handle:
                logger.info("User %s reconnected; newer connection takes over", user_id)
            else:
                logger.info("User connected: %s", user_id)
        else:
            logger.info("Anonymous connection opened")
        self.broadcaster.announce()

    def handle_event(self, user_id: str | None, event: str, data: Any) -> bool:
        """Dispatch one inbound event. Returns False when it was ignored."""
        if not user_id:
            logger.debug("Ignoring %r from anonymous connection", event)
            return False
        if event not in (TYPING, STOP_TYPING):
            logger.debug("Ignoring unknown event %r from user %s", event, user_id)
            return False
        try:
            payload = TypingEventIn.model_validate(data)
        except ValidationError:
            logger.debug("Ignoring malformed %r from user %s", event, user_id)
            return False

        if event == TYPING:
            logger.debug("User %s typing to %s", user_id, payload.receiverId)
            emission = self.tracker.start_typing(user_id, payload.receiverId)
        else:
            logger.debug("User %s stopped typing to %s", user_id, payload.receiverId)
            emission = self.tracker.stop_typing(user_id)

        if emission is not None:
            self.emit(emission)
        return True

    def disconnect(self, user_id: str | None, handle: ConnectionHandle) -> None:
        """Tear down a connection and announce the updated online set.

        A connection that was superseded by a newer one for the same user
        leaves the user's registry entry and typing signal alone.
        """
        self.broadcaster.detach(handle)
        if user_id and self.registry.is_current(user_id, handle):
            emission = self.tracker.clear_on_disconnect(user_id)
            self.registry.unregister(user_id, handle)
            logger.info("User disconnected: %s", user_id)
            if emission is not None:
                self.emit(emission)
        elif user_id:
            logger.info("Superseded connection closed for user %s", user_id)
        else:
            logger.info("Anonymous connection closed")
        self.broadcaster.announce()

    def emit(self, emission: Emission) -> bool:
        """Queue a targeted event if the recipient is online."""
        handle = self.registry.lookup(emission.target_user_id)
        if handle is None:
            logger.debug(
                "Skipping %s: user %s is not online",
                emission.event,
                emission.target_user_id,
            )
            return False
        return self.outbox.post(handle, emission.event, emission.payload)

    def deliver_message(self, receiver_id: str, message: dict[str, Any]) -> bool:
        """Push a persisted message to its receiver's live connection."""
        return self.emit(Emission(NEW_MESSAGE, receiver_id, message))

    async def flush(self) -> None:
        """Wait until every queued frame has reached its transport."""
        await self.outbox.flush()

    def shutdown(self) -> None:
        self.tracker.close()
        self.outbox.close()


# Single instance shared across the application.
event_router = EventRouter.from_settings(settings)
