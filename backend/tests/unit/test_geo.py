import math

import pytest

from app.domain.common.errors import ValidationError
from app.domain.proximity.geo import EARTH_RADIUS_KM, bounding_box, haversine_km, validate_coordinates


def test_haversine_zero_for_identical_points():
    assert haversine_km(19.076, 72.8777, 19.076, 72.8777) == 0.0


def test_haversine_is_symmetric():
    a = (28.6139, 77.2090)
    b = (19.0760, 72.8777)
    assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a))


def test_haversine_one_degree_of_latitude():
    assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(6371.0 * math.pi / 180, abs=1e-6)


def test_haversine_paris_to_london():
    assert haversine_km(48.8566, 2.3522, 51.5074, -0.1278) == pytest.approx(343.5, abs=1.0)


def test_haversine_antipodes_do_not_overflow():
    assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * 6371.0, rel=1e-9)


@pytest.mark.parametrize(
    "lat, lon",
    [(90.5, 0), (-91, 0), (0, 180.01), (0, -181), ("north", 0), (None, 0), (float("nan"), 0)],
)
def test_validate_coordinates_rejects_out_of_range(lat, lon):
    with pytest.raises(ValidationError):
        validate_coordinates(lat, lon)


def test_validate_coordinates_accepts_bounds_and_strings():
    assert validate_coordinates(90, -180) == (90.0, -180.0)
    assert validate_coordinates("12.5", "-3.25") == (12.5, -3.25)


def test_bounding_box_contains_points_within_radius():
    box = bounding_box(48.8566, 2.3522, 50)
    assert box.contains(48.8566, 2.3522)
    assert box.contains(49.2, 2.3522)
    assert not box.contains(51.5074, -0.1278)


def test_bounding_box_drops_longitude_across_antimeridian():
    box = bounding_box(0.0, 179.9, 100)
    assert box.min_lon is None and box.max_lon is None
    assert box.contains(0.0, -179.9)


def test_bounding_box_near_pole_keeps_only_latitude_band():
    box = bounding_box(89.9, 10.0, 50)
    assert box.max_lat == 90.0
    assert box.min_lon is None
    assert box.contains(89.8, -170.0)


def _destination(lat, lon, bearing_deg, distance_km):
    phi = math.radians(lat)
    delta = distance_km / EARTH_RADIUS_KM
    theta = math.radians(bearing_deg)
    phi2 = math.asin(math.sin(phi) * math.cos(delta) + math.cos(phi) * math.sin(delta) * math.cos(theta))
    lam2 = math.radians(lon) + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi),
        math.cos(delta) - math.sin(phi) * math.sin(phi2),
    )
    return math.degrees(phi2), math.degrees(lam2)


@pytest.mark.parametrize("origin", [(0.0, 0.0), (19.076, 72.8777), (60.0, 10.0), (-45.0, -70.0)])
@pytest.mark.parametrize("bearing", [0, 45, 90, 135, 180, 225, 270, 315])
def test_bounding_box_keeps_points_just_inside_radius(origin, bearing):
    lat, lon = _destination(*origin, bearing, 49.99)
    assert haversine_km(origin[0], origin[1], lat, lon) < 50
    assert bounding_box(origin[0], origin[1], 50).contains(lat, lon)
