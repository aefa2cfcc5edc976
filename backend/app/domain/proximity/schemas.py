"""Pydantic schemas for the nearby-users API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.domain.common.schemas import CamelModel
from app.domain.proximity.models import NearbyCandidate, NearbyStats, UserLocation


class LocationUpdateRequest(CamelModel):
	latitude: float
	longitude: float
	city: Optional[str] = Field(default=None, max_length=120)
	country: Optional[str] = Field(default=None, max_length=120)


class LocationOut(CamelModel):
	latitude: float
	longitude: float
	city: Optional[str] = None
	country: Optional[str] = None
	last_updated: datetime

	@classmethod
	def from_model(cls, location: UserLocation) -> "LocationOut":
		return cls(
			latitude=location.latitude,
			longitude=location.longitude,
			city=location.city,
			country=location.country,
			last_updated=location.last_updated,
		)


class LocationUpdateResponse(CamelModel):
	success: bool = True
	message: str = "Location updated successfully"
	location: LocationOut


class MyLocationResponse(CamelModel):
	success: bool = True
	location: Optional[LocationOut] = None


class NearbyUserOut(CamelModel):
	id: str
	name: str
	profile_image: Optional[str] = None
	bio: Optional[str] = None
	interests: List[str] = Field(default_factory=list)
	location: LocationOut
	distance_km: float
	mutual_interests: int
	mutual_interest_tags: List[str] = Field(default_factory=list)
	is_online: bool
	last_active: Optional[datetime] = None

	@classmethod
	def from_candidate(cls, candidate: NearbyCandidate) -> "NearbyUserOut":
		user = candidate.user
		return cls(
			id=user.id,
			name=user.name,
			profile_image=user.profile_image,
			bio=user.bio,
			interests=list(user.interests),
			location=LocationOut.from_model(candidate.location),
			distance_km=round(candidate.distance_km, 2),
			mutual_interests=candidate.mutual_interest_count,
			mutual_interest_tags=list(candidate.mutual_interests),
			is_online=candidate.is_online,
			last_active=candidate.last_active,
		)


class NearbyResponse(CamelModel):
	success: bool = True
	count: int
	total_users: int
	current_user_location: LocationOut
	users: List[NearbyUserOut]


class NearbyStatsOut(CamelModel):
	total_users: int
	nearby_users: int
	online_users: int
	users_with_same_interests: int
	message: Optional[str] = None

	@classmethod
	def from_model(cls, stats: NearbyStats) -> "NearbyStatsOut":
		return cls(
			total_users=stats.total_users,
			nearby_users=stats.nearby_users,
			online_users=stats.online_users,
			users_with_same_interests=stats.users_with_same_interests,
			message=stats.message,
		)


class NearbyStatsResponse(CamelModel):
	success: bool = True
	stats: NearbyStatsOut


class InterestCatalogResponse(CamelModel):
	success: bool = True
	interests: List[str]
