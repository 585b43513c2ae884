"""Message delivery hook called after the message store persists a message."""

import logging

from fastapi import APIRouter

from app.schemas.realtime import MessageDeliveryIn, MessageDeliveryOut
from app.services.event_router import event_router

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post("/deliver", response_model=MessageDeliveryOut)
async def deliver_message(body: MessageDeliveryIn) -> MessageDeliveryOut:
    """Push a saved message to the receiver's live connection, if any."""
    delivered = event_router.deliver_message(body.receiverId, body.message)
    if not delivered:
        logger.debug("Receiver %s offline; message not pushed", body.receiverId)
    return MessageDeliveryOut(delivered=delivered)
