"""AsyncPG pool management for the backend."""

from __future__ import annotations

from typing import Optional

import asyncpg

from app.settings import settings

_pool: Optional[asyncpg.pool.Pool] = None


async def init_pool() -> Optional[asyncpg.pool.Pool]:
	global _pool
	if settings.uses_memory_store():
		return None
	if _pool is None:
		# Force 127.0.0.1 instead of localhost to avoid IPv6 resolution issues
		dsn = settings.postgres_url.replace("localhost", "127.0.0.1")
		_pool = await asyncpg.create_pool(
			dsn=dsn,
			min_size=settings.postgres_min_pool_size,
			max_size=settings.postgres_max_pool_size,
			ssl="require" if settings.postgres_ssl else "disable",
		)
	return _pool


async def close_pool() -> None:
	global _pool
	if _pool is not None:
		await _pool.close()
		_pool = None


def peek_pool() -> Optional[asyncpg.pool.Pool]:
	"""Return the pool if one was created, without opening a new one."""
	return _pool
