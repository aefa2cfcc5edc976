import asyncio
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from app.domain import container
from app.domain.users.models import InMemoryUserRepository, User
from app.infra import postgres
from app.main import app
from app.settings import settings


if hasattr(asyncio, "WindowsSelectorEventLoopPolicy"):
	asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from app.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""API tests authenticate via the X-User-Id header, which is only honoured in dev."""
	original_env = settings.environment
	original_limit = settings.nearby_rate_limit_per_minute
	settings.environment = "dev"
	settings.nearby_rate_limit_per_minute = 1000
	try:
		yield
	finally:
		settings.environment = original_env
		settings.nearby_rate_limit_per_minute = original_limit


TRAVELERS = (
	User(id="alice", name="Alice", interests=("Hiking", "Photography", "Beach")),
	User(id="bob", name="Bob", interests=("Hiking", "Nightlife")),
	User(id="carol", name="Carol", interests=("Photography", "Beach", "Hiking")),
	User(id="dave", name="Dave", interests=("Shopping",)),
	User(id="erin", name="Erin", interests=()),
)


@pytest.fixture
def directory() -> InMemoryUserRepository:
	"""Fresh in-memory repositories wired into the container, seeded with travelers."""
	users = InMemoryUserRepository()
	for traveler in TRAVELERS:
		users.add(User(id=traveler.id, name=traveler.name, interests=traveler.interests))
	container.configure_memory(users)
	return users


@pytest.fixture
def proximity(directory):
	return container.get_proximity_service()


@pytest.fixture
def follows(directory):
	return container.get_follow_service()


@pytest.fixture
def chats(directory):
	return container.get_chat_service()


@pytest_asyncio.fixture
async def api_client(directory):
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
