from typing import Any

from pydantic import BaseModel, Field


class RealtimeFrameIn(BaseModel):
    event: str = Field(min_length=1, max_length=64)
    data: dict[str, Any] = Field(default_factory=dict)


class TypingEventIn(BaseModel):
    receiverId: str = Field(min_length=1, max_length=256)


class MessageDeliveryIn(BaseModel):
    receiverId: str = Field(min_length=1, max_length=256)
    message: dict[str, Any]


class MessageDeliveryOut(BaseModel):
    delivered: bool
