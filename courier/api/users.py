"""User API endpoints."""

from fastapi import APIRouter, Depends

from courier.api.dependencies import get_current_identity, get_messaging_service
from courier.models.auth import Identity
from courier.services.messaging_service import MessagingService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("")
async def list_users(
    identity: Identity = Depends(get_current_identity),
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    """List all users: {users: [{username, first_name, last_name}, ...]}."""
    users = await messaging.list_users()
    return {"users": [u.model_dump() for u in users]}


@router.get("/{username}")
async def get_user(
    username: str,
    identity: Identity = Depends(get_current_identity),
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    """Get a user's profile: {user: {username, first_name, last_name, phone, join_at, last_login_at}}."""
    user = await messaging.get_user(username)
    return {"user": user.model_dump(mode="json")}


@router.get("/{username}/to")
async def list_received(
    username: str,
    identity: Identity = Depends(get_current_identity),
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    """Messages sent to the caller, each with its sender resolved."""
    messages = await messaging.list_received(username, identity)
    return {"messages": [m.model_dump(mode="json") for m in messages]}


@router.get("/{username}/from")
async def list_sent(
    username: str,
    identity: Identity = Depends(get_current_identity),
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    """Messages sent by the caller, each with its recipient resolved."""
    messages = await messaging.list_sent(username, identity)
    return {"messages": [m.model_dump(mode="json") for m in messages]}
