"""Great-circle helpers used by the location store and nearby ranking."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from app.domain.common.errors import ValidationError

EARTH_RADIUS_KM = 6371.0
_BOX_PAD = 1.001


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
	"""Return the great-circle distance between two points in kilometres."""

	phi1, phi2 = math.radians(lat1), math.radians(lat2)
	dphi = math.radians(lat2 - lat1)
	dlambda = math.radians(lon2 - lon1)
	a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
	# Rounding can push `a` a hair past 1.0 for antipodal points
	a = min(1.0, max(0.0, a))
	return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def validate_coordinates(latitude, longitude) -> tuple[float, float]:
	try:
		lat = float(latitude)
		lon = float(longitude)
	except (TypeError, ValueError):
		raise ValidationError("latitude and longitude must be numbers") from None
	if math.isnan(lat) or math.isnan(lon):
		raise ValidationError("latitude and longitude must be numbers")
	if not -90.0 <= lat <= 90.0:
		raise ValidationError("latitude must be between -90 and 90")
	if not -180.0 <= lon <= 180.0:
		raise ValidationError("longitude must be between -180 and 180")
	return lat, lon


@dataclass(slots=True, frozen=True)
class BoundingBox:
	"""Coarse lat/lon window used to pre-filter rows before exact haversine checks.

	`min_lon`/`max_lon` are None when the window wraps the antimeridian or a pole,
	in which case only the latitude band is usable.
	"""

	min_lat: float
	max_lat: float
	min_lon: Optional[float]
	max_lon: Optional[float]

	def contains(self, lat: float, lon: float) -> bool:
		if not self.min_lat <= lat <= self.max_lat:
			return False
		if self.min_lon is None or self.max_lon is None:
			return True
		return self.min_lon <= lon <= self.max_lon


def bounding_box(lat: float, lon: float, radius_km: float) -> BoundingBox:
	"""Smallest lat/lon window holding every point within `radius_km` of the origin."""
	# Angular radius on the same sphere haversine_km uses, padded for float error
	angle = max(0.0, radius_km) / EARTH_RADIUS_KM * _BOX_PAD
	dlat = math.degrees(angle)
	min_lat = lat - dlat
	max_lat = lat + dlat
	if min_lat <= -90.0 or max_lat >= 90.0:
		return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0), None, None)
	spread = math.sin(angle) / math.cos(math.radians(lat))
	if spread >= 1.0:
		return BoundingBox(min_lat, max_lat, None, None)
	dlon = math.degrees(math.asin(spread))
	min_lon = lon - dlon
	max_lon = lon + dlon
	if min_lon < -180.0 or max_lon > 180.0:
		return BoundingBox(min_lat, max_lat, None, None)
	return BoundingBox(min_lat, max_lat, min_lon, max_lon)
