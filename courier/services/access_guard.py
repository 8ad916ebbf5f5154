"""Authorization predicates for messages and mailboxes.

Pure functions: no I/O, no state. The ``ensure_*`` variants raise
AuthorizationError instead of returning False.
"""

from courier.errors import AuthorizationError
from courier.models.auth import Identity
from courier.models.message import MessageDetail


def can_view(identity: Identity, message: MessageDetail) -> bool:
    """True iff the caller sent or received the message."""
    return identity.username in (message.from_user.username, message.to_user.username)


def can_mark_read(identity: Identity, message: MessageDetail) -> bool:
    """True iff the caller is the recipient. Senders cannot mark their own messages."""
    return identity.username == message.to_user.username


def can_view_mailbox(identity: Identity, username: str) -> bool:
    """True iff the caller owns the mailbox."""
    return identity.username == username


def ensure_can_view(identity: Identity, message: MessageDetail) -> None:
    if not can_view(identity, message):
        raise AuthorizationError("Only the sender or recipient may view this message")


def ensure_can_mark_read(identity: Identity, message: MessageDetail) -> None:
    if not can_mark_read(identity, message):
        raise AuthorizationError("Only the recipient may mark this message as read")


def ensure_can_view_mailbox(identity: Identity, username: str) -> None:
    if not can_view_mailbox(identity, username):
        raise AuthorizationError("Users may only list their own messages")
