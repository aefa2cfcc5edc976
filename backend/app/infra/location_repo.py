"""PostgreSQL-backed location store."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import asyncpg

from app.domain.proximity.geo import BoundingBox
from app.domain.proximity.models import LocationRepository, UserLocation
from app.infra.store_guard import store_guard

_LOCATION_COLUMNS = "l.user_id, l.latitude, l.longitude, l.city, l.country, l.last_updated"


class PostgresLocationRepository(LocationRepository):
	"""One row per user in `user_locations`, overwritten on every update."""

	def __init__(self, pool: asyncpg.Pool) -> None:
		self._pool = pool

	async def upsert(
		self,
		user_id: str,
		latitude: float,
		longitude: float,
		*,
		city: Optional[str],
		country: Optional[str],
		now: datetime,
	) -> UserLocation:
		async with store_guard("locations.upsert"):
			row = await self._pool.fetchrow(
				"""
				INSERT INTO user_locations AS l (user_id, latitude, longitude, city, country, last_updated)
				VALUES ($1, $2, $3, $4, $5, $6)
				ON CONFLICT (user_id) DO UPDATE
				SET latitude = EXCLUDED.latitude,
					longitude = EXCLUDED.longitude,
					city = COALESCE(EXCLUDED.city, l.city),
					country = COALESCE(EXCLUDED.country, l.country),
					last_updated = EXCLUDED.last_updated
				RETURNING user_id, latitude, longitude, city, country, last_updated
				""",
				user_id,
				latitude,
				longitude,
				city,
				country,
				now,
			)
		return UserLocation.from_record(row)

	async def get(self, user_id: str) -> Optional[UserLocation]:
		async with store_guard("locations.get"):
			row = await self._pool.fetchrow(
				f"SELECT {_LOCATION_COLUMNS} FROM user_locations l WHERE l.user_id = $1",
				user_id,
			)
		return UserLocation.from_record(row) if row else None

	async def list_candidates(
		self,
		exclude_user_id: str,
		box: Optional[BoundingBox] = None,
	) -> List[UserLocation]:
		clauses = ["l.user_id <> $1", "u.deleted_at IS NULL"]
		params: list[object] = [exclude_user_id]
		if box is not None:
			params.extend([box.min_lat, box.max_lat])
			clauses.append(f"l.latitude BETWEEN ${len(params) - 1} AND ${len(params)}")
			if box.min_lon is not None and box.max_lon is not None:
				params.extend([box.min_lon, box.max_lon])
				clauses.append(f"l.longitude BETWEEN ${len(params) - 1} AND ${len(params)}")
		query = f"""
			SELECT {_LOCATION_COLUMNS}
			FROM user_locations l
			JOIN users u ON u.id = l.user_id
			WHERE {' AND '.join(clauses)}
		"""
		async with store_guard("locations.list_candidates"):
			rows = await self._pool.fetch(query, *params)
		return [UserLocation.from_record(row) for row in rows]

	async def count_located(self, exclude_user_id: str) -> int:
		async with store_guard("locations.count"):
			total = await self._pool.fetchval(
				"""
				SELECT COUNT(*)
				FROM user_locations l
				JOIN users u ON u.id = l.user_id
				WHERE l.user_id <> $1 AND u.deleted_at IS NULL
				""",
				exclude_user_id,
			)
		return int(total or 0)
