"""PostgreSQL lookups for the traveler directory."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

import asyncpg

from app.domain.users.models import User, UserRepository
from app.infra.store_guard import store_guard

_USER_COLUMNS = "id, name, interests, profile_image, bio, created_at"


class PostgresUserRepository(UserRepository):
	"""Reads rows from the users table."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def get(self, user_id: str) -> Optional[User]:
		async with store_guard("users.get"):
			row = await self._pool.fetchrow(
				f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1 AND deleted_at IS NULL",
				str(user_id),
			)
		return User.from_record(row) if row else None

	async def get_many(self, user_ids: Sequence[str]) -> Dict[str, User]:
		ids = list({str(uid) for uid in user_ids})
		if not ids:
			return {}
		async with store_guard("users.get_many"):
			rows = await self._pool.fetch(
				f"SELECT {_USER_COLUMNS} FROM users WHERE id = ANY($1::text[]) AND deleted_at IS NULL",
				ids,
			)
		return {str(row["id"]): User.from_record(row) for row in rows}
