"""Realtime router: WebSocket endpoint for presence and typing indicators."""

import json
import logging
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.schemas.realtime import RealtimeFrameIn
from app.services.connection_registry import ConnectionHandle
from app.services.event_router import event_router

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

# Values browsers send when the client interpolates a missing id.
_ANONYMOUS_PLACEHOLDERS = {"null", "undefined"}


class WebSocketConnection(ConnectionHandle):
    """Connection handle that writes `{"event", "data"}` JSON frames."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, event: str, data: Any) -> None:
        await self._websocket.send_json({"event": event, "data": data})


def _resolve_user_id(raw: str | None) -> str | None:
    """Return the handshake identity, or None for an anonymous connection."""
    if raw is None:
        return None
    user_id = raw.strip()
    if not user_id or user_id.lower() in _ANONYMOUS_PLACEHOLDERS:
        return None
    return user_id


def _parse_frame(raw: str) -> RealtimeFrameIn | None:
    try:
        return RealtimeFrameIn.model_validate(json.loads(raw))
    except (ValueError, RecursionError, ValidationError):
        return None


@router.websocket("/ws")
async def websocket_presence(
    websocket: WebSocket,
    user_id: str | None = Query(default=None, alias="userId"),
):
    """WebSocket endpoint carrying presence broadcasts and typing events."""
    await websocket.accept()

    identity = _resolve_user_id(user_id)
    connection = WebSocketConnection(websocket)
    event_router.connect(identity, connection)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                logger.debug("Dropping binary frame from %s", identity or "anonymous")
                continue
            frame = _parse_frame(raw)
            if frame is None:
                logger.debug("Dropping malformed frame from %s", identity or "anonymous")
                continue
            event_router.handle_event(identity, frame.event, frame.data)
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.error("WebSocket error for user %s: %s", identity, exc)
        try:
            await websocket.close()
        except Exception:
            pass
    finally:
        event_router.disconnect(identity, connection)
