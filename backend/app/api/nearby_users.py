"""REST API surface for location updates and nearby traveler discovery."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_active_user, proximity_service
from app.domain.proximity.models import NearbyFilters
from app.domain.proximity.schemas import (
    InterestCatalogResponse,
    LocationOut,
    LocationUpdateRequest,
    LocationUpdateResponse,
    MyLocationResponse,
    NearbyResponse,
    NearbyStatsOut,
    NearbyStatsResponse,
    NearbyUserOut,
)
from app.domain.proximity.service import ProximityService
from app.infra.auth import AuthenticatedUser

router = APIRouter(prefix="/nearby-users", tags=["nearby-users"])


def _split_csv(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@router.put("/location", response_model=LocationUpdateResponse)
async def update_location(
    payload: LocationUpdateRequest,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: ProximityService = Depends(proximity_service),
) -> LocationUpdateResponse:
    location = await service.update_location(
        auth_user.id,
        payload.latitude,
        payload.longitude,
        city=payload.city,
        country=payload.country,
    )
    return LocationUpdateResponse(location=LocationOut.from_model(location))


@router.get("/my-location", response_model=MyLocationResponse)
async def my_location(
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: ProximityService = Depends(proximity_service),
) -> MyLocationResponse:
    location = await service.get_my_location(auth_user.id)
    return MyLocationResponse(location=LocationOut.from_model(location) if location else None)


@router.get("", response_model=NearbyResponse)
async def nearby_users(
    max_distance: Optional[float] = Query(default=None, alias="maxDistance"),
    min_distance: float = Query(default=0.0, alias="minDistance"),
    interests: Optional[str] = Query(default=None),
    sort_by: str = Query(default="distance", alias="sortBy"),
    show_online_only: bool = Query(default=False, alias="showOnlineOnly"),
    limit: Optional[int] = Query(default=None),
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: ProximityService = Depends(proximity_service),
) -> NearbyResponse:
    filters = NearbyFilters(
        max_distance_km=max_distance,
        min_distance_km=min_distance,
        interests=_split_csv(interests),
        sort_by=sort_by,
        online_only=show_online_only,
        limit=limit,
    )
    result = await service.find_nearby(auth_user.id, filters)
    return NearbyResponse(
        count=result.count,
        total_users=result.total_users,
        current_user_location=LocationOut.from_model(result.origin),
        users=[NearbyUserOut.from_candidate(candidate) for candidate in result.users],
    )


@router.get("/stats", response_model=NearbyStatsResponse)
async def nearby_stats(
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: ProximityService = Depends(proximity_service),
) -> NearbyStatsResponse:
    stats = await service.get_stats(auth_user.id)
    return NearbyStatsResponse(stats=NearbyStatsOut.from_model(stats))


@router.get("/interests", response_model=InterestCatalogResponse)
async def interest_catalog(
    _: AuthenticatedUser = Depends(get_active_user),
    service: ProximityService = Depends(proximity_service),
) -> InterestCatalogResponse:
    return InterestCatalogResponse(interests=service.list_interest_catalog())
