"""Message API endpoints."""

from fastapi import APIRouter, Depends, status

from courier.api.dependencies import get_current_identity, get_messaging_service
from courier.models.auth import Identity
from courier.models.message import ReadReceipt, SendMessageRequest
from courier.services.messaging_service import MessagingService

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.get("/{message_id}")
async def get_message(
    message_id: int,
    identity: Identity = Depends(get_current_identity),
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    """Get message detail with both participants resolved.

    Only the sender or recipient may view it.
    """
    message = await messaging.get_message(message_id, identity)
    return {"message": message.model_dump(mode="json")}


@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(
    request: SendMessageRequest,
    identity: Identity = Depends(get_current_identity),
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    """Send a message from the caller to another user."""
    message = await messaging.send_message(identity, request.to_username, request.body)
    return {"message": message.model_dump(mode="json")}


@router.post("/{message_id}/read")
async def mark_read(
    message_id: int,
    identity: Identity = Depends(get_current_identity),
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    """Mark a message read. Only the recipient may do this."""
    message = await messaging.mark_message_read(message_id, identity)
    receipt = ReadReceipt(id=message.id, read_at=message.read_at)
    return {"message": receipt.model_dump(mode="json")}
