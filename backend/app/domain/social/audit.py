"""Audit helpers for follow graph changes."""

from __future__ import annotations

import logging
from typing import Dict

from redis.exceptions import RedisError

from app.infra.redis import redis_client
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

FOLLOW_EVENTS_STREAM = "x:follows.events"


async def log_follow_event(event: str, fields: Dict[str, str]) -> None:
	payload = {"event": event, **fields}
	try:
		await redis_client.xadd(FOLLOW_EVENTS_STREAM, payload, maxlen=10_000, approximate=True)
	except (RedisError, OSError):
		# The edge is already committed; a lost audit entry must not fail the request
		logger.warning("follow audit append failed event=%s", event, exc_info=True)


def inc_follow_action(action: str) -> None:
	obs_metrics.inc_follow_action(action)
