"""REST API surface for the follow graph."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import follow_service, get_active_user
from app.domain.social.schemas import FollowListResponse, FollowResponse, FollowRow
from app.domain.social.service import FollowService
from app.infra.auth import AuthenticatedUser

router = APIRouter(prefix="/users", tags=["follows"])


@router.post("/follow/{user_id}", response_model=FollowResponse)
async def follow_user(
    user_id: str,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: FollowService = Depends(follow_service),
) -> FollowResponse:
    outcome = await service.follow(auth_user.id, user_id)
    return FollowResponse(is_following=outcome.is_following, followers_count=outcome.followers_count)


@router.delete("/follow/{user_id}", response_model=FollowResponse)
async def unfollow_user(
    user_id: str,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: FollowService = Depends(follow_service),
) -> FollowResponse:
    outcome = await service.unfollow(auth_user.id, user_id)
    return FollowResponse(is_following=outcome.is_following, followers_count=outcome.followers_count)


@router.get("/{user_id}/followers", response_model=FollowListResponse)
async def list_followers(
    user_id: str,
    _: AuthenticatedUser = Depends(get_active_user),
    service: FollowService = Depends(follow_service),
) -> FollowListResponse:
    rows = await service.list_followers(user_id)
    return FollowListResponse(count=len(rows), items=[FollowRow.from_model(row) for row in rows])


@router.get("/{user_id}/following", response_model=FollowListResponse)
async def list_following(
    user_id: str,
    _: AuthenticatedUser = Depends(get_active_user),
    service: FollowService = Depends(follow_service),
) -> FollowListResponse:
    rows = await service.list_following(user_id)
    return FollowListResponse(count=len(rows), items=[FollowRow.from_model(row) for row in rows])
