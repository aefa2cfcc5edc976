"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import follows, nearby_users, ops, private_chat
from app.api.errors import install_error_handlers
from app.api.middleware_request_id import RequestIdMiddleware
from app.domain import container
from app.infra import postgres
from app.obs import init as obs_init
from app.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	pool = await postgres.init_pool()
	if pool is None:
		container.configure_memory()
		logger.warning("running with in-memory repositories; data is not persisted")
	else:
		container.configure_postgres(pool)
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="Wayfarer Travel Companion API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins:
	allow_origins = ["http://localhost:3000", "http://localhost:5173"] if settings.is_dev() else []
# Starlette disallows wildcard '*' with allow_credentials=True
allow_credentials = "*" not in allow_origins
app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=allow_credentials,
	allow_methods=["*"],
	allow_headers=["*"],
)

obs_init(app)
app.add_middleware(RequestIdMiddleware)

app.include_router(ops.router)
app.include_router(nearby_users.router)
app.include_router(follows.router)
app.include_router(private_chat.router)
