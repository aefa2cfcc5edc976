import pytest

from app.domain.common.errors import NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_update_location_creates_then_overwrites(proximity):
    first = await proximity.update_location("alice", 19.076, 72.8777, city="Mumbai", country="India")
    second = await proximity.update_location("alice", 18.5204, 73.8567)

    stored = await proximity.get_my_location("alice")
    assert stored.latitude == pytest.approx(18.5204)
    assert stored.longitude == pytest.approx(73.8567)
    assert stored.last_updated >= first.last_updated
    assert second.user_id == "alice"


@pytest.mark.asyncio
async def test_update_location_keeps_city_and_country_when_omitted(proximity):
    await proximity.update_location("alice", 19.076, 72.8777, city="Mumbai", country="India")
    updated = await proximity.update_location("alice", 19.08, 72.88, city="  ")

    assert updated.city == "Mumbai"
    assert updated.country == "India"


@pytest.mark.asyncio
async def test_update_location_replaces_city_when_given(proximity):
    await proximity.update_location("alice", 19.076, 72.8777, city="Mumbai")
    updated = await proximity.update_location("alice", 18.5204, 73.8567, city="Pune")
    assert updated.city == "Pune"


@pytest.mark.asyncio
async def test_update_location_rejects_invalid_coordinates(proximity):
    with pytest.raises(ValidationError):
        await proximity.update_location("alice", 95, 10)
    assert await proximity.get_my_location("alice") is None


@pytest.mark.asyncio
async def test_update_location_requires_known_user(proximity):
    with pytest.raises(NotFoundError):
        await proximity.update_location("ghost", 10, 10)


@pytest.mark.asyncio
async def test_get_my_location_is_none_before_first_update(proximity):
    assert await proximity.get_my_location("bob") is None
