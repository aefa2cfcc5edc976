"""Domain-level exceptions shared by discovery, follows and private chat."""

from __future__ import annotations


class DomainError(Exception):
	"""Base class for errors surfaced to API callers with a machine-readable code."""

	code: str = "DOMAIN_ERROR"
	reason: str = "unknown"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class ValidationError(DomainError):
	code = "VALIDATION_ERROR"
	reason = "invalid_input"


class LocationRequiredError(DomainError):
	code = "LOCATION_REQUIRED"
	reason = "Please update your location first to find nearby users"


class NotMutualFollowError(DomainError):
	code = "NOT_MUTUAL_FOLLOW"
	reason = "You can only chat with users who follow you back"


class NotFoundError(DomainError):
	code = "NOT_FOUND"
	reason = "not_found"


class ConflictError(DomainError):
	code = "CONFLICT"
	reason = "conflict"


class AlreadyFollowingError(ConflictError):
	code = "ALREADY_FOLLOWING"
	reason = "Already following this user"


class NotFollowingError(ConflictError):
	code = "NOT_FOLLOWING"
	reason = "Not following this user"


class StoreUnavailableError(DomainError):
	code = "STORE_UNAVAILABLE"
	reason = "store_unavailable"
