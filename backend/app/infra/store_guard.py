"""Translate persistence failures into the domain's StoreUnavailableError."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import asyncpg

from app.domain.common.errors import StoreUnavailableError
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


@asynccontextmanager
async def store_guard(operation: str) -> AsyncIterator[None]:
	try:
		yield
	except _STORE_ERRORS as exc:
		obs_metrics.inc_store_failure(operation)
		logger.error("store failure op=%s error=%s", operation, exc.__class__.__name__)
		raise StoreUnavailableError(operation) from exc
