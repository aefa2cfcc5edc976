"""Location store and nearby-traveler ranking."""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from redis.exceptions import RedisError

from app.domain.common.errors import LocationRequiredError, NotFoundError, StoreUnavailableError, ValidationError
from app.domain.proximity import activity
from app.domain.proximity.geo import bounding_box, haversine_km, validate_coordinates
from app.domain.proximity.models import (
	SORT_OPTIONS,
	LocationRepository,
	NearbyCandidate,
	NearbyFilters,
	NearbyResult,
	NearbyStats,
	UserLocation,
)
from app.domain.users.models import User, UserRepository, normalize_interests
from app.infra.rate_limit import RateLimitExceeded, allow
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

INTEREST_CATALOG: tuple[str, ...] = (
	"Hiking",
	"Camping",
	"Beach",
	"Mountains",
	"City Tours",
	"Food & Dining",
	"Photography",
	"Adventure Sports",
	"Cultural Heritage",
	"Wildlife",
	"Road Trips",
	"Sightseeing",
	"Shopping",
	"Nightlife",
	"Yoga & Wellness",
	"Historical Sites",
	"Art & Museums",
	"Music Festivals",
	"Local Cuisine",
	"Water Sports",
)

NO_LOCATION_STATS_MESSAGE = "Update location to see statistics"


def _clean_label(value: Optional[str]) -> Optional[str]:
	if value is None:
		return None
	value = value.strip()
	return value or None


def resolve_filters(filters: NearbyFilters) -> NearbyFilters:
	"""Apply defaults and bounds; raise ValidationError on nonsense input."""
	max_distance = settings.nearby_default_max_distance_km if filters.max_distance_km is None else float(filters.max_distance_km)
	min_distance = float(filters.min_distance_km or 0.0)
	if not (math.isfinite(max_distance) and math.isfinite(min_distance)):
		raise ValidationError("distance filters must be finite numbers")
	if max_distance < 0 or min_distance < 0:
		raise ValidationError("distance filters must be non-negative")
	if min_distance > max_distance:
		raise ValidationError("minDistance cannot exceed maxDistance")
	sort_by = (filters.sort_by or "distance").strip().lower()
	if sort_by not in SORT_OPTIONS:
		raise ValidationError(f"sortBy must be one of {', '.join(SORT_OPTIONS)}")
	limit = settings.nearby_default_limit if filters.limit is None else int(filters.limit)
	if limit < 1:
		raise ValidationError("limit must be at least 1")
	return NearbyFilters(
		max_distance_km=max_distance,
		min_distance_km=min_distance,
		interests=normalize_interests(filters.interests),
		sort_by=sort_by,
		online_only=bool(filters.online_only),
		limit=min(limit, settings.nearby_max_limit),
	)


def _sort_key(sort_by: str):
	if sort_by == "interests":
		return lambda c: (-c.mutual_interest_count, c.distance_km, c.user.id)
	return lambda c: (c.distance_km, -c.mutual_interest_count, c.user.id)


def rank_candidates(
	origin: UserLocation,
	requester_interests: Sequence[str],
	locations: Iterable[UserLocation],
	users: Dict[str, User],
	last_active: Dict[str, int],
	filters: NearbyFilters,
	*,
	now_ms: int,
) -> List[NearbyCandidate]:
	"""Filter and order candidates. `filters` must already be resolved."""
	wanted = set(filters.interests)
	mine = set(requester_interests)
	ranked: List[NearbyCandidate] = []
	for loc in locations:
		if loc.user_id == origin.user_id:
			continue
		user = users.get(loc.user_id)
		if user is None:
			continue
		distance = haversine_km(origin.latitude, origin.longitude, loc.latitude, loc.longitude)
		if distance > filters.max_distance_km or distance < filters.min_distance_km:
			continue
		if wanted and not wanted.intersection(user.interests):
			continue
		seen_ms = last_active.get(user.id)
		online = activity.is_online(seen_ms, now_ms=now_ms)
		if filters.online_only and not online:
			continue
		ranked.append(
			NearbyCandidate(
				user=user,
				location=loc,
				distance_km=distance,
				mutual_interests=tuple(tag for tag in user.interests if tag in mine),
				is_online=online,
				last_active=activity.from_ms(seen_ms) if seen_ms is not None else None,
			)
		)
	ranked.sort(key=_sort_key(filters.sort_by))
	return ranked[: filters.limit]


class ProximityService:
	def __init__(self, locations: LocationRepository, users: UserRepository) -> None:
		self._locations = locations
		self._users = users

	async def update_location(
		self,
		user_id: str,
		latitude,
		longitude,
		*,
		city: Optional[str] = None,
		country: Optional[str] = None,
	) -> UserLocation:
		lat, lon = validate_coordinates(latitude, longitude)
		if await self._users.get(user_id) is None:
			raise NotFoundError("User not found")
		location = await self._locations.upsert(
			user_id,
			lat,
			lon,
			city=_clean_label(city),
			country=_clean_label(country),
			now=datetime.now(timezone.utc),
		)
		obs_metrics.inc_location_update()
		logger.info("location updated", extra={"event": "location_update", "target": user_id})
		return location

	async def get_my_location(self, user_id: str) -> Optional[UserLocation]:
		return await self._locations.get(user_id)

	async def find_nearby(self, user_id: str, filters: NearbyFilters) -> NearbyResult:
		resolved = resolve_filters(filters)
		try:
			allowed = await allow("nearby", user_id, limit=settings.nearby_rate_limit_per_minute)
		except (RedisError, OSError) as exc:
			obs_metrics.inc_store_failure("nearby.rate_limit")
			logger.error("rate limit check failed", exc_info=True)
			raise StoreUnavailableError("rate_limit") from exc
		if not allowed:
			obs_metrics.inc_rate_limited("nearby")
			raise RateLimitExceeded("nearby")
		origin = await self._locations.get(user_id)
		if origin is None:
			raise LocationRequiredError()
		requester = await self._users.get(user_id)
		requester_interests = requester.interests if requester else ()

		box = bounding_box(origin.latitude, origin.longitude, resolved.max_distance_km)
		candidates = await self._locations.list_candidates(user_id, box)
		profiles = await self._users.get_many([loc.user_id for loc in candidates])
		last_active = await activity.last_active_map(profiles.keys())
		users = rank_candidates(
			origin,
			requester_interests,
			candidates,
			profiles,
			last_active,
			resolved,
			now_ms=int(time.time() * 1000),
		)
		total = await self._locations.count_located(user_id)
		obs_metrics.inc_nearby_query(resolved.sort_by)
		obs_metrics.observe_nearby_results(len(users))
		return NearbyResult(origin=origin, users=users, total_users=total)

	async def get_stats(self, user_id: str) -> NearbyStats:
		"""Aggregate counts around the caller. Failures degrade to zeroed stats."""
		try:
			return await self._compute_stats(user_id)
		except Exception:
			obs_metrics.inc_stats_fallback()
			logger.warning("nearby stats unavailable, returning defaults", exc_info=True)
			return NearbyStats()

	async def _compute_stats(self, user_id: str) -> NearbyStats:
		origin = await self._locations.get(user_id)
		if origin is None:
			return NearbyStats(message=NO_LOCATION_STATS_MESSAGE)
		requester = await self._users.get(user_id)
		mine = set(requester.interests) if requester else set()
		others = await self._locations.list_candidates(user_id)
		profiles = await self._users.get_many([loc.user_id for loc in others])
		last_active = await activity.last_active_map(loc.user_id for loc in others)
		now_ms = int(time.time() * 1000)
		radius = settings.nearby_stats_radius_km
		stats = NearbyStats(total_users=len(others))
		for loc in others:
			if haversine_km(origin.latitude, origin.longitude, loc.latitude, loc.longitude) <= radius:
				stats.nearby_users += 1
			if activity.is_online(last_active.get(loc.user_id), now_ms=now_ms):
				stats.online_users += 1
			profile = profiles.get(loc.user_id)
			if profile is not None and mine.intersection(profile.interests):
				stats.users_with_same_interests += 1
		return stats

	def list_interest_catalog(self) -> List[str]:
		return list(INTEREST_CATALOG)
