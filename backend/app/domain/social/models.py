"""Follow graph records and the mutual-follow relationship derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Protocol, Tuple


class RelationshipState(str, Enum):
	"""How two travelers relate through the follow graph."""

	NONE = "none"
	ONE_WAY = "one_way"
	MUTUAL = "mutual"


@dataclass(slots=True)
class FollowRelationship:
	"""Directed edge: `follower_id` follows `followee_id`."""

	follower_id: str
	followee_id: str
	created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	@classmethod
	def from_record(cls, record) -> "FollowRelationship":
		return cls(
			follower_id=str(record["follower_id"]),
			followee_id=str(record["followee_id"]),
			created_at=record["created_at"],
		)


@dataclass(slots=True, frozen=True)
class MutualFollowStatus:
	current_user_follows: bool = False
	other_user_follows: bool = False

	@property
	def is_mutual_follow(self) -> bool:
		return self.current_user_follows and self.other_user_follows

	@property
	def state(self) -> RelationshipState:
		if self.is_mutual_follow:
			return RelationshipState.MUTUAL
		if self.current_user_follows or self.other_user_follows:
			return RelationshipState.ONE_WAY
		return RelationshipState.NONE

	@property
	def message(self) -> str:
		if self.is_mutual_follow:
			return "You can chat with this user"
		if self.current_user_follows:
			return "Waiting for this user to follow you back"
		if self.other_user_follows:
			return "Follow this user back to start chatting"
		return "Follow each other to start chatting"


class FollowRepository(Protocol):
	async def add(self, follower_id: str, followee_id: str, *, now: datetime) -> bool:
		"""Insert the edge; False when it already exists."""
		...

	async def remove(self, follower_id: str, followee_id: str) -> bool:
		"""Delete the edge; False when it did not exist."""
		...

	async def pair_status(self, user_id: str, other_id: str) -> Tuple[bool, bool]:
		"""Return (user follows other, other follows user) in a single read."""
		...

	async def list_followers(self, user_id: str) -> List[FollowRelationship]:
		...

	async def list_following(self, user_id: str) -> List[FollowRelationship]:
		...

	async def count_followers(self, user_id: str) -> int:
		...


class InMemoryFollowRepository(FollowRepository):
	def __init__(self) -> None:
		self.edges: Dict[Tuple[str, str], FollowRelationship] = {}

	async def add(self, follower_id: str, followee_id: str, *, now: datetime) -> bool:
		key = (follower_id, followee_id)
		if key in self.edges:
			return False
		self.edges[key] = FollowRelationship(follower_id, followee_id, now)
		return True

	async def remove(self, follower_id: str, followee_id: str) -> bool:
		return self.edges.pop((follower_id, followee_id), None) is not None

	async def pair_status(self, user_id: str, other_id: str) -> Tuple[bool, bool]:
		return (user_id, other_id) in self.edges, (other_id, user_id) in self.edges

	async def list_followers(self, user_id: str) -> List[FollowRelationship]:
		rows = [edge for (_, followee), edge in self.edges.items() if followee == user_id]
		return sorted(rows, key=lambda e: e.created_at, reverse=True)

	async def list_following(self, user_id: str) -> List[FollowRelationship]:
		rows = [edge for (follower, _), edge in self.edges.items() if follower == user_id]
		return sorted(rows, key=lambda e: e.created_at, reverse=True)

	async def count_followers(self, user_id: str) -> int:
		return sum(1 for (_, followee) in self.edges if followee == user_id)
