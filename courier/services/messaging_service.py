"""Operations available to an authenticated caller.

Every message read or mutation consults the access guard first.
"""

from courier.models.auth import Identity
from courier.models.message import Message, MessageDetail, ReceivedMessage, SentMessage
from courier.models.user import User, UserSummary
from courier.services import access_guard
from courier.services.message_service import MessageService
from courier.services.user_service import UserService


class MessagingService:
    """Identity-carrying facade over the user directory and message store."""

    def __init__(self, users: UserService, messages: MessageService):
        self.users = users
        self.messages = messages

    async def get_message(self, message_id: int, identity: Identity) -> MessageDetail:
        """Fetch a message the caller participates in.

        Raises:
            NotFoundError: If the message id is unknown
            AuthorizationError: If the caller is neither sender nor recipient
        """
        message = await self.messages.get(message_id)
        access_guard.ensure_can_view(identity, message)
        return message

    async def send_message(self, identity: Identity, to_username: str, body: str) -> Message:
        """Send a message from the caller.

        Raises:
            NotFoundError: If the recipient does not exist
            ValidationError: If the body is empty
        """
        return await self.messages.create(identity.username, to_username, body)

    async def mark_message_read(self, message_id: int, identity: Identity) -> Message:
        """Mark a message read on behalf of its recipient.

        Raises:
            NotFoundError: If the message id is unknown
            AuthorizationError: If the caller is not the recipient
        """
        message = await self.messages.get(message_id)
        access_guard.ensure_can_mark_read(identity, message)
        return await self.messages.mark_read(message_id)

    async def list_users(self) -> list[UserSummary]:
        return await self.users.list_all()

    async def get_user(self, username: str) -> User:
        return await self.users.get(username)

    async def list_received(self, username: str, identity: Identity) -> list[ReceivedMessage]:
        """The caller's own inbox.

        Raises:
            AuthorizationError: If username is not the caller
            NotFoundError: If the username is unknown
        """
        access_guard.ensure_can_view_mailbox(identity, username)
        return await self.messages.list_received_by(username)

    async def list_sent(self, username: str, identity: Identity) -> list[SentMessage]:
        """The caller's own outbox.

        Raises:
            AuthorizationError: If username is not the caller
            NotFoundError: If the username is unknown
        """
        access_guard.ensure_can_view_mailbox(identity, username)
        return await self.messages.list_sent_by(username)
