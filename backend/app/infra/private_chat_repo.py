"""PostgreSQL-backed private chats and messages."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

import asyncpg
import ulid

from app.domain.chat.models import ConversationKey, PrivateChat, PrivateChatRepository, PrivateMessage
from app.infra.store_guard import store_guard

_CHAT_COLUMNS = "id, user_a, user_b, last_message_id, created_at, updated_at"
_MESSAGE_COLUMNS = "id, chat_id, sender_id, text, read_by, created_at"


def _affected(status: str) -> int:
	# asyncpg returns command tags such as "UPDATE 3"
	try:
		return int(status.split()[-1])
	except (AttributeError, IndexError, ValueError):
		return 0


class PostgresPrivateChatRepository(PrivateChatRepository):
	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def _fetch_pair(self, key: ConversationKey) -> Optional[asyncpg.Record]:
		return await self._pool.fetchrow(
			f"SELECT {_CHAT_COLUMNS} FROM private_chats WHERE user_a = $1 AND user_b = $2",
			key.user_a,
			key.user_b,
		)

	async def get_or_create(self, key: ConversationKey, *, now: datetime) -> Tuple[PrivateChat, bool]:
		async with store_guard("chats.get_or_create"):
			existing = await self._fetch_pair(key)
			if existing is not None:
				return PrivateChat.from_record(existing), False
			try:
				row = await self._pool.fetchrow(
					f"""
					INSERT INTO private_chats (id, user_a, user_b, created_at, updated_at)
					VALUES ($1, $2, $3, $4, $4)
					RETURNING {_CHAT_COLUMNS}
					""",
					str(ulid.new()),
					key.user_a,
					key.user_b,
					now,
				)
			except asyncpg.UniqueViolationError:
				# A concurrent request inserted the pair first
				winner = await self._fetch_pair(key)
				if winner is None:
					raise
				return PrivateChat.from_record(winner), False
		return PrivateChat.from_record(row), True

	async def get(self, chat_id: str) -> Optional[PrivateChat]:
		async with store_guard("chats.get"):
			row = await self._pool.fetchrow(f"SELECT {_CHAT_COLUMNS} FROM private_chats WHERE id = $1", chat_id)
		return PrivateChat.from_record(row) if row else None

	async def list_for_user(self, user_id: str) -> List[PrivateChat]:
		async with store_guard("chats.list_for_user"):
			rows = await self._pool.fetch(
				f"""
				SELECT {_CHAT_COLUMNS}
				FROM private_chats
				WHERE user_a = $1 OR user_b = $1
				ORDER BY updated_at DESC, id DESC
				""",
				user_id,
			)
		return [PrivateChat.from_record(row) for row in rows]

	async def add_message(self, chat_id: str, sender_id: str, text: str, *, now: datetime) -> PrivateMessage:
		async with store_guard("chats.add_message"):
			async with self._pool.acquire() as conn:
				async with conn.transaction():
					row = await conn.fetchrow(
						f"""
						INSERT INTO private_messages (id, chat_id, sender_id, text, read_by, created_at)
						VALUES ($1, $2, $3, $4, ARRAY[$3]::text[], $5)
						RETURNING {_MESSAGE_COLUMNS}
						""",
						str(ulid.new()),
						chat_id,
						sender_id,
						text,
						now,
					)
					await conn.execute(
						"UPDATE private_chats SET last_message_id = $2, updated_at = $3 WHERE id = $1",
						chat_id,
						row["id"],
						now,
					)
		return PrivateMessage.from_record(row)

	async def get_message(self, message_id: str) -> Optional[PrivateMessage]:
		async with store_guard("chats.get_message"):
			row = await self._pool.fetchrow(
				f"SELECT {_MESSAGE_COLUMNS} FROM private_messages WHERE id = $1",
				message_id,
			)
		return PrivateMessage.from_record(row) if row else None

	async def list_messages(self, chat_id: str, *, offset: int, limit: int) -> List[PrivateMessage]:
		async with store_guard("chats.list_messages"):
			rows = await self._pool.fetch(
				f"""
				SELECT {_MESSAGE_COLUMNS}
				FROM private_messages
				WHERE chat_id = $1
				ORDER BY created_at DESC, id DESC
				OFFSET $2 LIMIT $3
				""",
				chat_id,
				offset,
				limit,
			)
		return [PrivateMessage.from_record(row) for row in rows]

	async def count_messages(self, chat_id: str) -> int:
		async with store_guard("chats.count_messages"):
			total = await self._pool.fetchval("SELECT COUNT(*) FROM private_messages WHERE chat_id = $1", chat_id)
		return int(total or 0)

	async def count_unread(self, chat_id: str, reader_id: str) -> int:
		async with store_guard("chats.count_unread"):
			total = await self._pool.fetchval(
				"""
				SELECT COUNT(*)
				FROM private_messages
				WHERE chat_id = $1 AND sender_id <> $2 AND NOT ($2 = ANY(read_by))
				""",
				chat_id,
				reader_id,
			)
		return int(total or 0)

	async def mark_read(self, chat_id: str, reader_id: str) -> int:
		async with store_guard("chats.mark_read"):
			status = await self._pool.execute(
				"""
				UPDATE private_messages
				SET read_by = array_append(read_by, $2)
				WHERE chat_id = $1 AND sender_id <> $2 AND NOT ($2 = ANY(read_by))
				""",
				chat_id,
				reader_id,
			)
		return _affected(status)

	async def delete(self, chat_id: str) -> bool:
		async with store_guard("chats.delete"):
			async with self._pool.acquire() as conn:
				async with conn.transaction():
					await conn.execute("DELETE FROM private_messages WHERE chat_id = $1", chat_id)
					status = await conn.execute("DELETE FROM private_chats WHERE id = $1", chat_id)
		return _affected(status) > 0
