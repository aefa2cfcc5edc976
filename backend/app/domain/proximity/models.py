"""Domain models used by the proximity service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Protocol

from app.domain.proximity.geo import BoundingBox
from app.domain.users.models import User

SortBy = Literal["distance", "interests"]
SORT_OPTIONS: tuple[str, ...] = ("distance", "interests")


@dataclass(slots=True)
class UserLocation:
	"""Last reported position of a traveler; one row per user."""

	user_id: str
	latitude: float
	longitude: float
	city: Optional[str] = None
	country: Optional[str] = None
	last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	@classmethod
	def from_record(cls, record) -> "UserLocation":
		return cls(
			user_id=str(record["user_id"]),
			latitude=float(record["latitude"]),
			longitude=float(record["longitude"]),
			city=record.get("city"),
			country=record.get("country"),
			last_updated=record["last_updated"],
		)


@dataclass(slots=True)
class NearbyFilters:
	max_distance_km: Optional[float] = None
	min_distance_km: float = 0.0
	interests: tuple[str, ...] = ()
	sort_by: str = "distance"
	online_only: bool = False
	limit: Optional[int] = None


@dataclass(slots=True)
class NearbyCandidate:
	user: User
	location: UserLocation
	distance_km: float
	mutual_interests: tuple[str, ...]
	is_online: bool
	last_active: Optional[datetime] = None

	@property
	def mutual_interest_count(self) -> int:
		return len(self.mutual_interests)


@dataclass(slots=True)
class NearbyResult:
	origin: UserLocation
	users: List[NearbyCandidate]
	total_users: int

	@property
	def count(self) -> int:
		return len(self.users)


@dataclass(slots=True)
class NearbyStats:
	total_users: int = 0
	nearby_users: int = 0
	online_users: int = 0
	users_with_same_interests: int = 0
	message: Optional[str] = None


class LocationRepository(Protocol):
	async def upsert(
		self,
		user_id: str,
		latitude: float,
		longitude: float,
		*,
		city: Optional[str],
		country: Optional[str],
		now: datetime,
	) -> UserLocation:
		...

	async def get(self, user_id: str) -> Optional[UserLocation]:
		...

	async def list_candidates(
		self,
		exclude_user_id: str,
		box: Optional[BoundingBox] = None,
	) -> List[UserLocation]:
		...

	async def count_located(self, exclude_user_id: str) -> int:
		...


class InMemoryLocationRepository(LocationRepository):
	def __init__(self) -> None:
		self.store: Dict[str, UserLocation] = {}

	async def upsert(
		self,
		user_id: str,
		latitude: float,
		longitude: float,
		*,
		city: Optional[str],
		country: Optional[str],
		now: datetime,
	) -> UserLocation:
		previous = self.store.get(user_id)
		location = UserLocation(
			user_id=user_id,
			latitude=latitude,
			longitude=longitude,
			city=city if city is not None else (previous.city if previous else None),
			country=country if country is not None else (previous.country if previous else None),
			last_updated=now,
		)
		self.store[user_id] = location
		return location

	async def get(self, user_id: str) -> Optional[UserLocation]:
		return self.store.get(user_id)

	async def list_candidates(
		self,
		exclude_user_id: str,
		box: Optional[BoundingBox] = None,
	) -> List[UserLocation]:
		return [
			loc
			for uid, loc in self.store.items()
			if uid != exclude_user_id and (box is None or box.contains(loc.latitude, loc.longitude))
		]

	async def count_located(self, exclude_user_id: str) -> int:
		return sum(1 for uid in self.store if uid != exclude_user_id)
