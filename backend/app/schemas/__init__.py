from app.schemas.realtime import (
    MessageDeliveryIn,
    MessageDeliveryOut,
    RealtimeFrameIn,
    TypingEventIn,
)

__all__ = [
    "MessageDeliveryIn",
    "MessageDeliveryOut",
    "RealtimeFrameIn",
    "TypingEventIn",
]
