"""Traveler directory records.

Accounts are created by the registration flow that lives outside this service;
discovery, follows and chat only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Protocol, Sequence


@dataclass(slots=True)
class User:
	id: str
	name: str
	interests: tuple[str, ...] = ()
	profile_image: Optional[str] = None
	bio: Optional[str] = None
	created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	@classmethod
	def from_record(cls, record) -> "User":
		return cls(
			id=str(record["id"]),
			name=record["name"],
			interests=normalize_interests(record.get("interests") or ()),
			profile_image=record.get("profile_image"),
			bio=record.get("bio"),
			created_at=record["created_at"],
		)


def normalize_interests(raw: Iterable[str]) -> tuple[str, ...]:
	"""Strip blanks and duplicates while keeping the caller's order."""
	seen: list[str] = []
	for item in raw:
		tag = str(item).strip()
		if tag and tag not in seen:
			seen.append(tag)
	return tuple(seen)


class UserRepository(Protocol):
	async def get(self, user_id: str) -> Optional[User]:
		...

	async def get_many(self, user_ids: Sequence[str]) -> Dict[str, User]:
		...


class InMemoryUserRepository(UserRepository):
	def __init__(self) -> None:
		self.store: Dict[str, User] = {}

	def add(self, user: User) -> User:
		self.store[user.id] = user
		return user

	async def get(self, user_id: str) -> Optional[User]:
		return self.store.get(str(user_id))

	async def get_many(self, user_ids: Sequence[str]) -> Dict[str, User]:
		return {uid: self.store[uid] for uid in {str(u) for u in user_ids} if uid in self.store}
