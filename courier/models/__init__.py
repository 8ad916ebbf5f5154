"""Models package exports."""

from courier.models.auth import Identity, LoginRequest, RegisterRequest, TokenResponse
from courier.models.message import (
    Message,
    MessageDetail,
    ReadReceipt,
    ReceivedMessage,
    SendMessageRequest,
    SentMessage,
)
from courier.models.user import User, UserRef, UserSummary

__all__ = [
    "Identity",
    "LoginRequest",
    "Message",
    "MessageDetail",
    "ReadReceipt",
    "ReceivedMessage",
    "RegisterRequest",
    "SendMessageRequest",
    "SentMessage",
    "TokenResponse",
    "User",
    "UserRef",
    "UserSummary",
]
