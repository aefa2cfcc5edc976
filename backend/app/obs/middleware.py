"""ASGI middleware for metrics and request logging."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.obs import logging as obs_logging
from app.obs import metrics
from app.settings import settings

# Probe and scrape traffic is counted but not logged
_QUIET_PATHS = frozenset({"/health", "/metrics"})


def _route_template(request: Request) -> str:
	# The router sets scope["route"] during dispatch, so call this after call_next
	route = request.scope.get("route")
	if route and getattr(route, "path", None):
		return route.path  # type: ignore[return-value]
	return request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
	"""Bind request context for logs, time the request, and feed Prometheus."""

	def __init__(self, app, *, enabled: bool = True) -> None:
		super().__init__(app)
		self._enabled = enabled
		self._logger = obs_logging.get_logger("wayfarer.http")

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		if not settings.obs_enabled or not self._enabled:
			return await call_next(request)

		request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-Id") or str(uuid4())
		request.state.request_id = request_id
		client_ip = request.client.host if request.client else None
		token = obs_logging.bind_context(request_id=request_id, route=request.url.path, client_ip=client_ip)
		start = time.perf_counter()
		status_code = 500
		try:
			response = await call_next(request)
			status_code = response.status_code
		except Exception:
			self._logger.exception("http_request_error", extra={"method": request.method})
			raise
		finally:
			elapsed = time.perf_counter() - start
			route = _route_template(request)
			metrics.observe_request(route, request.method, status_code, elapsed)
			if request.url.path not in _QUIET_PATHS:
				fields = {
					"status": status_code,
					"method": request.method,
					"latency_ms": round(elapsed * 1000, 3),
					"route": route,
				}
				# Set by the auth dependency once the caller is resolved
				user_id = getattr(request.state, "user_id", None)
				if user_id:
					fields["user_id"] = user_id
				self._logger.info("http_request", extra=fields)
			obs_logging.reset_context(token)

		response.headers.setdefault("X-Request-Id", request_id)
		return response


def install(app, *, enabled: bool = True) -> None:
	app.add_middleware(ObservabilityMiddleware, enabled=enabled)
