"""PostgreSQL-backed follow graph."""

from __future__ import annotations

from datetime import datetime
from typing import List, Tuple

import asyncpg

from app.domain.social.models import FollowRelationship, FollowRepository
from app.infra.store_guard import store_guard


class PostgresFollowRepository(FollowRepository):
	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def add(self, follower_id: str, followee_id: str, *, now: datetime) -> bool:
		async with store_guard("follows.add"):
			row = await self._pool.fetchrow(
				"""
				INSERT INTO follows (follower_id, followee_id, created_at)
				VALUES ($1, $2, $3)
				ON CONFLICT (follower_id, followee_id) DO NOTHING
				RETURNING follower_id
				""",
				follower_id,
				followee_id,
				now,
			)
		return row is not None

	async def remove(self, follower_id: str, followee_id: str) -> bool:
		async with store_guard("follows.remove"):
			row = await self._pool.fetchrow(
				"DELETE FROM follows WHERE follower_id = $1 AND followee_id = $2 RETURNING follower_id",
				follower_id,
				followee_id,
			)
		return row is not None

	async def pair_status(self, user_id: str, other_id: str) -> Tuple[bool, bool]:
		async with store_guard("follows.pair_status"):
			rows = await self._pool.fetch(
				"""
				SELECT follower_id
				FROM follows
				WHERE (follower_id = $1 AND followee_id = $2)
				   OR (follower_id = $2 AND followee_id = $1)
				""",
				user_id,
				other_id,
			)
		followers = {str(row["follower_id"]) for row in rows}
		return user_id in followers, other_id in followers

	async def list_followers(self, user_id: str) -> List[FollowRelationship]:
		async with store_guard("follows.list_followers"):
			rows = await self._pool.fetch(
				"""
				SELECT follower_id, followee_id, created_at
				FROM follows
				WHERE followee_id = $1
				ORDER BY created_at DESC
				""",
				user_id,
			)
		return [FollowRelationship.from_record(row) for row in rows]

	async def list_following(self, user_id: str) -> List[FollowRelationship]:
		async with store_guard("follows.list_following"):
			rows = await self._pool.fetch(
				"""
				SELECT follower_id, followee_id, created_at
				FROM follows
				WHERE follower_id = $1
				ORDER BY created_at DESC
				""",
				user_id,
			)
		return [FollowRelationship.from_record(row) for row in rows]

	async def count_followers(self, user_id: str) -> int:
		async with store_guard("follows.count_followers"):
			total = await self._pool.fetchval("SELECT COUNT(*) FROM follows WHERE followee_id = $1", user_id)
		return int(total or 0)
