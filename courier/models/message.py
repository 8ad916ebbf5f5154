"""Message models and request validation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from courier.models.user import UserRef


class Message(BaseModel):
    """A stored message with bare participant usernames."""

    id: int
    from_username: str
    to_username: str
    body: str
    sent_at: datetime
    read_at: Optional[datetime] = None


class MessageDetail(BaseModel):
    """A message with both participants resolved."""

    id: int
    body: str
    sent_at: datetime
    read_at: Optional[datetime] = None
    from_user: UserRef
    to_user: UserRef


class SentMessage(BaseModel):
    """Entry in a user's outbox; the recipient is resolved."""

    id: int
    to_user: UserRef
    body: str
    sent_at: datetime
    read_at: Optional[datetime] = None


class ReceivedMessage(BaseModel):
    """Entry in a user's inbox; the sender is resolved."""

    id: int
    from_user: UserRef
    body: str
    sent_at: datetime
    read_at: Optional[datetime] = None


class ReadReceipt(BaseModel):
    """Response to marking a message read."""

    id: int
    read_at: datetime


class SendMessageRequest(BaseModel):
    """Payload for sending a message.

    Attributes:
        to_username: Recipient's username
        body: Message text (non-empty, max 8000 chars)
    """

    to_username: str = Field(..., min_length=1, max_length=100)
    body: str = Field(..., min_length=1, max_length=8000)

    @field_validator("body")
    @classmethod
    def body_not_empty(cls, v: str) -> str:
        """Ensure body is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Message body cannot be empty or whitespace only")
        return v
