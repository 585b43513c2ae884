from app.routers.health import router as health_router
from app.routers.messages import router as messages_router
from app.routers.realtime import router as realtime_router

__all__ = [
    "health_router",
    "messages_router",
    "realtime_router",
]
