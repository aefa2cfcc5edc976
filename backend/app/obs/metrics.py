"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary

REQUEST_COUNTER = Counter(
	"wayfarer_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"wayfarer_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

LOCATION_UPDATES = Counter(
	"wayfarer_location_updates_total",
	"Location updates accepted",
)

NEARBY_QUERIES = Counter(
	"wayfarer_nearby_queries_total",
	"Nearby traveler searches",
	["sort_by"],
)

NEARBY_RESULTS = Summary(
	"wayfarer_nearby_results",
	"Nearby query result sizes",
)

NEARBY_STATS_FALLBACKS = Counter(
	"wayfarer_nearby_stats_fallback_total",
	"Nearby stats requests answered with zeroed defaults",
)

RATE_LIMITED_EVENTS = Counter(
	"wayfarer_rate_limited_total",
	"Requests rejected by rate limiting",
	["kind"],
)

FOLLOW_ACTIONS = Counter(
	"wayfarer_follow_actions_total",
	"Follow graph mutations",
	["action"],
)

CHAT_STARTS = Counter(
	"wayfarer_private_chat_starts_total",
	"Private chat start attempts",
	["result"],
)

CHAT_MESSAGES_SENT = Counter(
	"wayfarer_private_messages_sent_total",
	"Private messages persisted",
)

CHAT_READS = Counter(
	"wayfarer_private_chat_reads_total",
	"Private chat mark-read operations",
)

STORE_FAILURES = Counter(
	"wayfarer_store_failures_total",
	"Persistence operations that failed and surfaced STORE_UNAVAILABLE",
	["operation"],
)

ACTIVITY_FAILURES = Counter(
	"wayfarer_activity_failures_total",
	"Last-activity reads or writes that hit a Redis error",
	["operation"],
)

REDIS_UP = Gauge("wayfarer_redis_up", "Redis availability (1=up)")
POSTGRES_UP = Gauge("wayfarer_postgres_up", "Postgres availability (1=up)")

REDIS_LATENCY = Histogram(
	"wayfarer_redis_ping_seconds",
	"Redis ping latency in seconds",
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

POSTGRES_LATENCY = Histogram(
	"wayfarer_postgres_ping_seconds",
	"Postgres ping latency in seconds",
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_location_update() -> None:
	LOCATION_UPDATES.inc()


def inc_nearby_query(sort_by: str) -> None:
	NEARBY_QUERIES.labels(sort_by=sort_by).inc()


def observe_nearby_results(count: int) -> None:
	NEARBY_RESULTS.observe(count)


def inc_stats_fallback() -> None:
	NEARBY_STATS_FALLBACKS.inc()


def inc_rate_limited(kind: str) -> None:
	RATE_LIMITED_EVENTS.labels(kind=kind).inc()


def inc_follow_action(action: str) -> None:
	FOLLOW_ACTIONS.labels(action=action).inc()


def inc_chat_start(result: str) -> None:
	CHAT_STARTS.labels(result=result).inc()


def inc_chat_send() -> None:
	CHAT_MESSAGES_SENT.inc()


def inc_chat_read() -> None:
	CHAT_READS.inc()


def inc_store_failure(operation: str) -> None:
	STORE_FAILURES.labels(operation=operation).inc()


def inc_activity_failure(operation: str) -> None:
	ACTIVITY_FAILURES.labels(operation=operation).inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
