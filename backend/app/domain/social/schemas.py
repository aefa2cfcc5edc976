"""Pydantic schemas for follow graph endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List

from app.domain.common.schemas import CamelModel
from app.domain.social.models import FollowRelationship, MutualFollowStatus, RelationshipState


class FollowResponse(CamelModel):
	success: bool = True
	is_following: bool
	followers_count: int


class FollowRow(CamelModel):
	follower_id: str
	followee_id: str
	created_at: datetime

	@classmethod
	def from_model(cls, edge: FollowRelationship) -> "FollowRow":
		return cls(follower_id=edge.follower_id, followee_id=edge.followee_id, created_at=edge.created_at)


class FollowListResponse(CamelModel):
	success: bool = True
	count: int
	items: List[FollowRow]


class MutualFollowResponse(CamelModel):
	success: bool = True
	current_user_follows: bool
	other_user_follows: bool
	is_mutual_follow: bool
	relationship: RelationshipState
	message: str

	@classmethod
	def from_model(cls, status: MutualFollowStatus) -> "MutualFollowResponse":
		return cls(
			current_user_follows=status.current_user_follows,
			other_user_follows=status.other_user_follows,
			is_mutual_follow=status.is_mutual_follow,
			relationship=status.state,
			message=status.message,
		)
