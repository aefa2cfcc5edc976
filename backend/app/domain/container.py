"""Lightweight service container shared by the API routers."""

from __future__ import annotations

from typing import Optional

import asyncpg

from app.domain.chat.models import InMemoryPrivateChatRepository, PrivateChatRepository
from app.domain.chat.service import PrivateChatService
from app.domain.proximity.models import InMemoryLocationRepository, LocationRepository
from app.domain.proximity.service import ProximityService
from app.domain.social.models import FollowRepository, InMemoryFollowRepository
from app.domain.social.service import FollowService
from app.domain.users.models import InMemoryUserRepository, UserRepository
from app.infra.follow_repo import PostgresFollowRepository
from app.infra.location_repo import PostgresLocationRepository
from app.infra.private_chat_repo import PostgresPrivateChatRepository
from app.infra.user_repo import PostgresUserRepository

_user_repository: UserRepository = InMemoryUserRepository()
_location_repository: LocationRepository = InMemoryLocationRepository()
_follow_repository: FollowRepository = InMemoryFollowRepository()
_chat_repository: PrivateChatRepository = InMemoryPrivateChatRepository()
_proximity_service = ProximityService(_location_repository, _user_repository)
_follow_service = FollowService(_follow_repository, _user_repository)
_chat_service = PrivateChatService(_chat_repository, _follow_service)


def configure(
    *,
    users: Optional[UserRepository] = None,
    locations: Optional[LocationRepository] = None,
    follows: Optional[FollowRepository] = None,
    chats: Optional[PrivateChatRepository] = None,
) -> None:
    """Swap repositories and rebuild the services on top of them."""
    global _user_repository, _location_repository, _follow_repository, _chat_repository
    global _proximity_service, _follow_service, _chat_service
    if users is not None:
        _user_repository = users
    if locations is not None:
        _location_repository = locations
    if follows is not None:
        _follow_repository = follows
    if chats is not None:
        _chat_repository = chats
    _proximity_service = ProximityService(_location_repository, _user_repository)
    _follow_service = FollowService(_follow_repository, _user_repository)
    _chat_service = PrivateChatService(_chat_repository, _follow_service)


def configure_postgres(pool: asyncpg.Pool) -> None:
    configure(
        users=PostgresUserRepository(pool),
        locations=PostgresLocationRepository(pool),
        follows=PostgresFollowRepository(pool),
        chats=PostgresPrivateChatRepository(pool),
    )


def configure_memory(users: Optional[InMemoryUserRepository] = None) -> InMemoryUserRepository:
    """Reset every repository to a fresh in-memory instance."""
    directory = users or InMemoryUserRepository()
    configure(
        users=directory,
        locations=InMemoryLocationRepository(),
        follows=InMemoryFollowRepository(),
        chats=InMemoryPrivateChatRepository(),
    )
    return directory


def get_location_repository() -> LocationRepository:
    return _location_repository


def get_proximity_service() -> ProximityService:
    return _proximity_service


def get_follow_service() -> FollowService:
    return _follow_service


def get_chat_service() -> PrivateChatService:
    return _chat_service
