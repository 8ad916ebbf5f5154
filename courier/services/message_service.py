"""Message store: creation, lookup, mailbox listings and read state."""

from datetime import datetime, timezone

import asyncpg
import structlog

from courier.errors import NotFoundError, ValidationError
from courier.models.message import Message, MessageDetail, ReceivedMessage, SentMessage
from courier.models.user import UserRef
from courier.services.user_service import UserService

logger = structlog.get_logger(__name__)

MESSAGE_COLUMNS = "id, from_username, to_username, body, sent_at, read_at"


def _message_from_row(row) -> Message:
    return Message(
        id=row["id"],
        from_username=row["from_username"],
        to_username=row["to_username"],
        body=row["body"],
        sent_at=row["sent_at"],
        read_at=row["read_at"],
    )


def _ref_from_row(row, prefix: str) -> UserRef:
    """Build a UserRef from columns aliased as ``<prefix>_username`` etc."""
    return UserRef(
        username=row[f"{prefix}_username"],
        first_name=row[f"{prefix}_first_name"],
        last_name=row[f"{prefix}_last_name"],
        phone=row[f"{prefix}_phone"],
    )


class MessageService:
    """Service for messages between registered users.

    A message starts unread (read_at is NULL). ``mark_read`` is the only
    transition and it happens at most once.
    """

    def __init__(self, pool: asyncpg.Pool, users: UserService):
        self.pool = pool
        self.users = users

    async def create(self, from_username: str, to_username: str, body: str) -> Message:
        """Store a new unread message.

        Args:
            from_username: Sender
            to_username: Recipient
            body: Message text

        Returns:
            The created Message with bare participant usernames

        Raises:
            ValidationError: If body is empty or whitespace only
            NotFoundError: If either participant does not exist
        """
        if not body or not body.strip():
            raise ValidationError("Message body cannot be empty", field="body")

        found = await self.users.existing([from_username, to_username])
        for username in (from_username, to_username):
            if username not in found:
                raise NotFoundError("User", username)

        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO messages (from_username, to_username, body, sent_at)
                    VALUES ($1, $2, $3, $4)
                    RETURNING {MESSAGE_COLUMNS}
                    """,
                    from_username,
                    to_username,
                    body,
                    datetime.now(timezone.utc),
                )
        except asyncpg.ForeignKeyViolationError:
            # FK on users backs the existence check above
            raise NotFoundError("User", to_username)

        message = _message_from_row(row)
        logger.info(
            "message_created",
            message_id=message.id,
            from_username=from_username,
            to_username=to_username,
        )
        return message

    async def get(self, message_id: int) -> MessageDetail:
        """Get a message with both participants resolved.

        Raises:
            NotFoundError: If the message id is unknown
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT m.id, m.body, m.sent_at, m.read_at,
                       f.username AS from_username,
                       f.first_name AS from_first_name,
                       f.last_name AS from_last_name,
                       f.phone AS from_phone,
                       t.username AS to_username,
                       t.first_name AS to_first_name,
                       t.last_name AS to_last_name,
                       t.phone AS to_phone
                FROM messages AS m
                JOIN users AS f ON f.username = m.from_username
                JOIN users AS t ON t.username = m.to_username
                WHERE m.id = $1
                """,
                message_id,
            )

        if row is None:
            raise NotFoundError("Message", message_id)

        return MessageDetail(
            id=row["id"],
            body=row["body"],
            sent_at=row["sent_at"],
            read_at=row["read_at"],
            from_user=_ref_from_row(row, "from"),
            to_user=_ref_from_row(row, "to"),
        )

    async def list_sent_by(self, username: str) -> list[SentMessage]:
        """Messages sent by a user, oldest first, with recipients resolved.

        Raises:
            NotFoundError: If the username is unknown
        """
        await self.users.ensure_exists(username)

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT m.id, m.body, m.sent_at, m.read_at,
                       u.username AS to_username,
                       u.first_name AS to_first_name,
                       u.last_name AS to_last_name,
                       u.phone AS to_phone
                FROM messages AS m
                JOIN users AS u ON u.username = m.to_username
                WHERE m.from_username = $1
                ORDER BY m.sent_at ASC, m.id ASC
                """,
                username,
            )

        return [
            SentMessage(
                id=row["id"],
                to_user=_ref_from_row(row, "to"),
                body=row["body"],
                sent_at=row["sent_at"],
                read_at=row["read_at"],
            )
            for row in rows
        ]

    async def list_received_by(self, username: str) -> list[ReceivedMessage]:
        """Messages sent to a user, oldest first, with senders resolved.

        Raises:
            NotFoundError: If the username is unknown
        """
        await self.users.ensure_exists(username)

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT m.id, m.body, m.sent_at, m.read_at,
                       u.username AS from_username,
                       u.first_name AS from_first_name,
                       u.last_name AS from_last_name,
                       u.phone AS from_phone
                FROM messages AS m
                JOIN users AS u ON u.username = m.from_username
                WHERE m.to_username = $1
                ORDER BY m.sent_at ASC, m.id ASC
                """,
                username,
            )

        return [
            ReceivedMessage(
                id=row["id"],
                from_user=_ref_from_row(row, "from"),
                body=row["body"],
                sent_at=row["sent_at"],
                read_at=row["read_at"],
            )
            for row in rows
        ]

    async def mark_read(self, message_id: int) -> Message:
        """Mark a message read, keeping the first read_at if already set.

        COALESCE makes the update conditional on the stored state, so
        repeated and concurrent calls all return the same read_at.

        Raises:
            NotFoundError: If the message id is unknown
        """
        now = datetime.now(timezone.utc)

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE messages
                SET read_at = COALESCE(read_at, $1)
                WHERE id = $2
                RETURNING {MESSAGE_COLUMNS}
                """,
                now,
                message_id,
            )

        if row is None:
            raise NotFoundError("Message", message_id)

        message = _message_from_row(row)
        if message.read_at == now:
            logger.info("message_marked_read", message_id=message_id)
        return message
