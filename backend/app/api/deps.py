"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends, Request

from app.domain import container
from app.domain.chat.service import PrivateChatService
from app.domain.proximity import activity
from app.domain.proximity.service import ProximityService
from app.domain.social.service import FollowService
from app.infra.auth import AuthenticatedUser, get_current_user
from app.obs import logging as obs_logging


async def get_active_user(
    request: Request,
    auth_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Resolve the caller, tag logs with them and refresh their last-activity timestamp."""
    request.state.user_id = auth_user.id
    obs_logging.bind_user(auth_user.id)
    await activity.touch(auth_user.id)
    return auth_user


def proximity_service() -> ProximityService:
    return container.get_proximity_service()


def follow_service() -> FollowService:
    return container.get_follow_service()


def chat_service() -> PrivateChatService:
    return container.get_chat_service()
