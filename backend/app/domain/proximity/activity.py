"""Last-activity timestamps kept in Redis.

Each authenticated request refreshes `activity:user:{id}` with the current time in
epoch milliseconds. A traveler counts as online while that timestamp is newer than
the configured online window.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from redis.exceptions import RedisError

from app.infra.redis import redis_client
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

_KEY_PREFIX = "activity:user:"


def activity_key(user_id: str) -> str:
	return f"{_KEY_PREFIX}{user_id}"


def _now_ms() -> int:
	return int(time.time() * 1000)


def from_ms(value: int) -> datetime:
	return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)


async def touch(user_id: str, *, now_ms: Optional[int] = None) -> None:
	"""Record activity for a user. Failures are logged and never raised."""
	stamp = now_ms if now_ms is not None else _now_ms()
	try:
		await redis_client.set(activity_key(user_id), str(stamp), ex=settings.activity_ttl_seconds)
	except (RedisError, OSError):
		obs_metrics.inc_activity_failure("touch")
		logger.warning("activity touch failed user_id=%s", user_id, exc_info=True)


async def last_active_map(user_ids: Iterable[str]) -> Dict[str, int]:
	"""Return epoch-ms timestamps for the users that have any recorded activity.

	A Redis failure yields an empty map, so everyone reads as offline.
	"""
	ids = list(dict.fromkeys(str(uid) for uid in user_ids))
	if not ids:
		return {}
	try:
		found = await redis_client.mget_map([activity_key(uid) for uid in ids])
	except (RedisError, OSError):
		obs_metrics.inc_activity_failure("read")
		logger.warning("activity lookup failed for %d users", len(ids), exc_info=True)
		return {}
	result: Dict[str, int] = {}
	for key, raw in found.items():
		try:
			result[key[len(_KEY_PREFIX):]] = int(raw)
		except (TypeError, ValueError):
			continue
	return result


def is_online(last_active_ms: Optional[int], *, now_ms: int, window_seconds: Optional[int] = None) -> bool:
	if last_active_ms is None:
		return False
	window = settings.nearby_online_window_seconds if window_seconds is None else window_seconds
	return now_ms - last_active_ms <= window * 1000
