"""Follow graph operations and the mutual-follow connection gate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

from app.domain.common.errors import (
	AlreadyFollowingError,
	NotFollowingError,
	NotFoundError,
	NotMutualFollowError,
	ValidationError,
)
from app.domain.social import audit
from app.domain.social.models import FollowRelationship, FollowRepository, MutualFollowStatus
from app.domain.users.models import UserRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FollowOutcome:
	is_following: bool
	followers_count: int


class FollowService:
	def __init__(self, follows: FollowRepository, users: UserRepository) -> None:
		self._follows = follows
		self._users = users

	async def _ensure_user(self, user_id: str) -> None:
		if await self._users.get(user_id) is None:
			raise NotFoundError("User not found")

	async def follow(self, user_id: str, target_id: str) -> FollowOutcome:
		if user_id == target_id:
			raise ValidationError("You cannot follow yourself")
		await self._ensure_user(target_id)
		created = await self._follows.add(user_id, target_id, now=datetime.now(timezone.utc))
		if not created:
			raise AlreadyFollowingError()
		audit.inc_follow_action("follow")
		await audit.log_follow_event("follow", {"follower_id": user_id, "followee_id": target_id})
		logger.info("follow created", extra={"event": "follow", "target": target_id})
		return FollowOutcome(True, await self._follows.count_followers(target_id))

	async def unfollow(self, user_id: str, target_id: str) -> FollowOutcome:
		if user_id == target_id:
			raise ValidationError("You cannot unfollow yourself")
		await self._ensure_user(target_id)
		removed = await self._follows.remove(user_id, target_id)
		if not removed:
			raise NotFollowingError()
		audit.inc_follow_action("unfollow")
		await audit.log_follow_event("unfollow", {"follower_id": user_id, "followee_id": target_id})
		logger.info("follow removed", extra={"event": "unfollow", "target": target_id})
		return FollowOutcome(False, await self._follows.count_followers(target_id))

	async def list_followers(self, user_id: str) -> List[FollowRelationship]:
		await self._ensure_user(user_id)
		return await self._follows.list_followers(user_id)

	async def list_following(self, user_id: str) -> List[FollowRelationship]:
		await self._ensure_user(user_id)
		return await self._follows.list_following(user_id)

	async def check_mutual_follow(self, user_id: str, other_id: str) -> MutualFollowStatus:
		"""Read both directions of the pair; never cached."""
		if user_id == other_id:
			return MutualFollowStatus()
		await self._ensure_user(other_id)
		current_follows, other_follows = await self._follows.pair_status(user_id, other_id)
		return MutualFollowStatus(current_user_follows=current_follows, other_user_follows=other_follows)

	async def ensure_mutual_follow(self, user_id: str, other_id: str) -> MutualFollowStatus:
		status = await self.check_mutual_follow(user_id, other_id)
		if not status.is_mutual_follow:
			raise NotMutualFollowError()
		return status
