"""Liveness and presence status endpoints."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app.services.event_router import event_router

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/status", response_class=PlainTextResponse)
async def status_check() -> str:
    return "Server is live"


@router.get("/health")
async def presence_health_check() -> dict:
    """Report how many users and connections are currently live."""
    return {
        "status": "healthy",
        "online_users": len(event_router.registry),
        "open_connections": event_router.broadcaster.audience_size,
        "typing_signals": len(event_router.tracker),
    }
