import pytest


@pytest.mark.asyncio
async def test_health(api_client):
	response = await api_client.get("/health")
	assert response.status_code == 200
	assert response.json() == {"status": "ok"}
	assert response.headers.get("X-Request-Id")


@pytest.mark.asyncio
async def test_request_id_is_echoed(api_client):
	response = await api_client.get("/health", headers={"X-Request-Id": "abc-123"})
	assert response.headers["X-Request-Id"] == "abc-123"


@pytest.mark.asyncio
async def test_metrics_exposes_request_counters(api_client):
	await api_client.get("/nearby-users/interests", headers={"X-User-Id": "alice"})
	response = await api_client.get("/metrics")
	assert response.status_code == 200
	assert "wayfarer_http_requests_total" in response.text


@pytest.mark.asyncio
async def test_readiness_uses_memory_backend_without_pool(api_client):
	response = await api_client.get("/health/ready")
	assert response.status_code == 200
	assert response.json()["checks"]["postgres"]["backend"] == "memory"
