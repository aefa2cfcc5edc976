from datetime import datetime, timezone

import asyncpg
import pytest

from app.domain.chat.models import ConversationKey
from app.domain.common.errors import StoreUnavailableError
from app.infra.private_chat_repo import PostgresPrivateChatRepository

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _chat_row(chat_id: str, key: ConversationKey) -> dict:
    return {
        "id": chat_id,
        "user_a": key.user_a,
        "user_b": key.user_b,
        "last_message_id": None,
        "created_at": NOW,
        "updated_at": NOW,
    }


class ScriptedPool:
    """Replays queued fetchrow outcomes; exceptions are raised instead of returned."""

    def __init__(self, *outcomes) -> None:
        self._outcomes = list(outcomes)
        self.queries: list[str] = []

    async def fetchrow(self, query, *args):
        self.queries.append(" ".join(query.split()))
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.mark.asyncio
async def test_get_or_create_inserts_when_pair_is_new():
    key = ConversationKey.from_participants("bob", "alice")
    pool = ScriptedPool(None, _chat_row("chat-1", key))
    repo = PostgresPrivateChatRepository(pool)

    chat, created = await repo.get_or_create(key, now=NOW)

    assert created is True
    assert (chat.id, chat.user_a, chat.user_b) == ("chat-1", "alice", "bob")
    assert pool.queries[1].startswith("INSERT INTO private_chats")


@pytest.mark.asyncio
async def test_get_or_create_returns_existing_chat():
    key = ConversationKey.from_participants("alice", "bob")
    pool = ScriptedPool(_chat_row("chat-1", key))
    repo = PostgresPrivateChatRepository(pool)

    chat, created = await repo.get_or_create(key, now=NOW)

    assert created is False
    assert chat.id == "chat-1"
    assert len(pool.queries) == 1


@pytest.mark.asyncio
async def test_get_or_create_recovers_from_concurrent_insert():
    key = ConversationKey.from_participants("alice", "bob")
    pool = ScriptedPool(
        None,
        asyncpg.UniqueViolationError("duplicate key value violates unique constraint"),
        _chat_row("chat-winner", key),
    )
    repo = PostgresPrivateChatRepository(pool)

    chat, created = await repo.get_or_create(key, now=NOW)

    assert created is False
    assert chat.id == "chat-winner"


@pytest.mark.asyncio
async def test_store_errors_surface_as_store_unavailable():
    key = ConversationKey.from_participants("alice", "bob")
    pool = ScriptedPool(ConnectionRefusedError("db down"))
    repo = PostgresPrivateChatRepository(pool)

    with pytest.raises(StoreUnavailableError) as exc:
        await repo.get_or_create(key, now=NOW)
    assert exc.value.code == "STORE_UNAVAILABLE"
