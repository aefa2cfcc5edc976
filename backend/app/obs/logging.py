"""JSON logging for the Wayfarer API.

Request-scoped fields live in one context variable so the HTTP middleware and the
auth dependency can each add to it. Coordinates, place names and private message
bodies are never written to the log stream.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from app.settings import settings

_LOGGER_NAME = "wayfarer"

_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar("wayfarer_log_context", default=MappingProxyType({}))

# Context key -> output field
_CONTEXT_FIELDS = (
	("request_id", "request_id"),
	("route", "route"),
	("user_id", "user_id"),
	("client_ip", "ip"),
)

# Traveler whereabouts and chat content
_REDACTED_KEYS = frozenset({"latitude", "longitude", "lat", "lon", "lng", "city", "country", "text"})
# Credentials may appear under many names (access_token, x_secret, ...)
_REDACTED_FRAGMENTS = ("token", "secret", "password", "authorization", "cookie")

_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

_MAX_STRING_LENGTH = 256
_MAX_COLLECTION_ITEMS = 10
_HANDLER_NAME = "wayfarer-json"


def bind_context(**fields: Optional[str]) -> Token:
	"""Merge non-empty fields into the current request context."""
	merged = dict(_CONTEXT.get())
	merged.update({key: str(value) for key, value in fields.items() if value})
	return _CONTEXT.set(MappingProxyType(merged))


def reset_context(token: Token) -> None:
	_CONTEXT.reset(token)


def bind_user(user_id: str) -> None:
	"""Tag the rest of this request's log lines with the authenticated traveler."""
	bind_context(user_id=user_id)


def current_context() -> Mapping[str, str]:
	return _CONTEXT.get()


def _is_redacted(key: str) -> bool:
	lowered = key.lower()
	return lowered in _REDACTED_KEYS or any(fragment in lowered for fragment in _REDACTED_FRAGMENTS)


def _clip(value: Any) -> Any:
	if isinstance(value, str):
		return value if len(value) <= _MAX_STRING_LENGTH else value[:_MAX_STRING_LENGTH] + "…"
	if isinstance(value, Mapping):
		items = list(value.items())
		clipped = {str(k): ("[redacted]" if _is_redacted(str(k)) else _clip(v)) for k, v in items[:_MAX_COLLECTION_ITEMS]}
		if len(items) > _MAX_COLLECTION_ITEMS:
			clipped["…"] = f"+{len(items) - _MAX_COLLECTION_ITEMS} keys"
		return clipped
	if isinstance(value, (list, tuple, set, frozenset)):
		items = [_clip(item) for item in value]
		if len(items) > _MAX_COLLECTION_ITEMS:
			items = items[:_MAX_COLLECTION_ITEMS] + ["…"]
		return items
	return value


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per line: base fields, request context, then `extra=` fields."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		context = _CONTEXT.get()
		for key, field in _CONTEXT_FIELDS:
			if context.get(key):
				payload[field] = context[key]
		for key, value in record.__dict__.items():
			if key in _RESERVED_ATTRS or key.startswith("_"):
				continue
			payload[key] = "[redacted]" if _is_redacted(key) else _clip(value)
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Sample routine info lines. Domain events (records with `event`) are always kept."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO or getattr(record, "event", None):
			return True
		rate = max(0.0, min(1.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	"""Install the JSON handler on the root logger once."""
	root = logging.getLogger()
	if not any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
		root.handlers.clear()
		handler = logging.StreamHandler()
		handler.set_name(_HANDLER_NAME)
		handler.setFormatter(JSONLogFormatter())
		handler.addFilter(InfoSamplingFilter())
		root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	# ObservabilityMiddleware already writes one line per request
	logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
