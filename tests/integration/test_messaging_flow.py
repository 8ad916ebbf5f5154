"""End-to-end messaging flow against a real Postgres.

Requires POSTGRES_URL to point at a disposable database; skipped otherwise.
Tables are truncated before each test.
"""

import asyncio
import os
from pathlib import Path

import asyncpg
import pytest

from courier.errors import AuthorizationError, ConflictError, CredentialError, NotFoundError
from courier.models.auth import Identity
from courier.services.auth_service import AuthService
from courier.services.credential_service import CredentialService
from courier.services.message_service import MessageService
from courier.services.messaging_service import MessagingService
from courier.services.token_service import TokenService
from courier.services.user_service import UserService

pytestmark = pytest.mark.integration

SCHEMA = Path(__file__).parents[2] / "migrations" / "001_initial_schema.sql"


@pytest.fixture
async def pool():
    try:
        pool = await asyncpg.create_pool(os.environ["POSTGRES_URL"], min_size=1, max_size=4, timeout=3)
    except (OSError, asyncpg.PostgresError, asyncio.TimeoutError) as e:
        pytest.skip(f"Postgres unavailable: {e}")

    async with pool.acquire() as conn:
        await conn.execute(SCHEMA.read_text())
        await conn.execute("TRUNCATE messages, users RESTART IDENTITY")

    yield pool
    await pool.close()


@pytest.fixture
def services(pool):
    users = UserService(pool, CredentialService(work_factor=4))
    messages = MessageService(pool, users)
    return AuthService(users, TokenService()), MessagingService(users, messages), messages


async def _register(auth, username, password):
    return await auth.register(username, password, username.title(), "Tester", "555-0100")


ALICE = Identity(username="alice")
BOB = Identity(username="bob")
CAROL = Identity(username="carol")


async def test_alice_sends_bob_reads(services):
    auth, messaging, _ = services
    await _register(auth, "alice", "pw1")
    await _register(auth, "bob", "pw2")

    sent = await messaging.send_message(ALICE, "bob", "hi")
    assert sent.read_at is None

    detail = await messaging.get_message(sent.id, BOB)
    assert detail.read_at is None
    assert detail.from_user.username == "alice"

    read = await messaging.mark_message_read(sent.id, BOB)
    assert read.read_at is not None

    with pytest.raises(AuthorizationError):
        await messaging.mark_message_read(sent.id, ALICE)


async def test_mark_read_is_idempotent_under_concurrency(services):
    auth, messaging, messages = services
    await _register(auth, "alice", "pw1")
    await _register(auth, "bob", "pw2")
    sent = await messaging.send_message(ALICE, "bob", "hi")

    results = await asyncio.gather(*(messaging.mark_message_read(sent.id, BOB) for _ in range(5)))
    again = await messages.mark_read(sent.id)

    assert len({m.read_at for m in results} | {again.read_at}) == 1


async def test_third_party_cannot_view(services):
    auth, messaging, _ = services
    for name in ("alice", "bob", "carol"):
        await _register(auth, name, "pw")
    sent = await messaging.send_message(ALICE, "bob", "hi")

    assert (await messaging.get_message(sent.id, ALICE)).id == sent.id
    assert (await messaging.get_message(sent.id, BOB)).id == sent.id
    with pytest.raises(AuthorizationError):
        await messaging.get_message(sent.id, CAROL)


async def test_unknown_recipient_leaves_store_unchanged(services, pool):
    auth, messaging, _ = services
    await _register(auth, "alice", "pw1")

    with pytest.raises(NotFoundError):
        await messaging.send_message(ALICE, "ghost", "hi")

    async with pool.acquire() as conn:
        assert await conn.fetchval("SELECT COUNT(*) FROM messages") == 0


async def test_login_round_trip_and_no_enumeration(services):
    auth, _, _ = services
    await _register(auth, "alice", "pw1")

    assert await auth.login("alice", "pw1")

    with pytest.raises(CredentialError) as wrong_password:
        await auth.login("alice", "pw2")
    with pytest.raises(CredentialError) as unknown_user:
        await auth.login("mallory", "pw1")

    assert wrong_password.value.to_response() == unknown_user.value.to_response()


async def test_duplicate_registration_conflicts(services, pool):
    auth, _, _ = services
    await _register(auth, "alice", "pw1")

    with pytest.raises(ConflictError):
        await _register(auth, "alice", "other")

    async with pool.acquire() as conn:
        assert await conn.fetchval("SELECT COUNT(*) FROM users") == 1


async def test_mailboxes_ordered_and_resolved(services):
    auth, messaging, _ = services
    await _register(auth, "alice", "pw1")
    await _register(auth, "bob", "pw2")
    await messaging.send_message(ALICE, "bob", "first")
    await messaging.send_message(ALICE, "bob", "second")

    inbox = await messaging.list_received("bob", BOB)
    outbox = await messaging.list_sent("alice", ALICE)

    assert [m.body for m in inbox] == ["first", "second"]
    assert inbox[0].from_user.username == "alice"
    assert [m.to_user.username for m in outbox] == ["bob", "bob"]


async def test_list_users_sorted(services):
    auth, messaging, _ = services
    for name in ("carol", "alice", "bob"):
        await _register(auth, name, "pw")

    users = await messaging.list_users()

    assert [u.username for u in users] == ["alice", "bob", "carol"]
