"""REST API surface for private chats between mutual followers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import chat_service, follow_service, get_active_user
from app.domain.chat.schemas import (
    ChatListResponse,
    ChatOut,
    ChatResponse,
    DeleteChatResponse,
    MarkReadResponse,
    MessageOut,
    MessagePageResponse,
    SendMessageRequest,
    StartChatRequest,
    StartChatResponse,
)
from app.domain.chat.service import DEFAULT_PAGE_SIZE, PrivateChatService
from app.domain.social.schemas import MutualFollowResponse
from app.domain.social.service import FollowService
from app.infra.auth import AuthenticatedUser

router = APIRouter(prefix="/private-chat", tags=["private-chat"])


@router.get("/check-mutual/{user_id}", response_model=MutualFollowResponse)
async def check_mutual(
    user_id: str,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: FollowService = Depends(follow_service),
) -> MutualFollowResponse:
    status_ = await service.check_mutual_follow(auth_user.id, user_id)
    return MutualFollowResponse.from_model(status_)


@router.post("", response_model=StartChatResponse)
async def start_chat(
    payload: StartChatRequest,
    response: Response,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: PrivateChatService = Depends(chat_service),
) -> StartChatResponse:
    summary, is_new = await service.start_private_chat(auth_user.id, payload.user_id.strip())
    response.status_code = status.HTTP_201_CREATED if is_new else status.HTTP_200_OK
    return StartChatResponse(
        chat_id=summary.chat.id,
        is_new=is_new,
        unread_count=summary.unread_count,
        chat=ChatOut.from_summary(summary, auth_user.id),
    )


@router.get("", response_model=ChatListResponse)
async def list_chats(
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: PrivateChatService = Depends(chat_service),
) -> ChatListResponse:
    summaries = await service.list_chats(auth_user.id)
    return ChatListResponse(
        count=len(summaries),
        chats=[ChatOut.from_summary(summary, auth_user.id) for summary in summaries],
    )


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: str,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: PrivateChatService = Depends(chat_service),
) -> ChatResponse:
    summary = await service.get_chat(auth_user.id, chat_id)
    return ChatResponse(chat=ChatOut.from_summary(summary, auth_user.id))


@router.delete("/{chat_id}", response_model=DeleteChatResponse)
async def delete_chat(
    chat_id: str,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: PrivateChatService = Depends(chat_service),
) -> DeleteChatResponse:
    await service.delete_chat(auth_user.id, chat_id)
    return DeleteChatResponse()


@router.get("/{chat_id}/messages", response_model=MessagePageResponse)
async def list_messages(
    chat_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1),
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: PrivateChatService = Depends(chat_service),
) -> MessagePageResponse:
    result = await service.list_messages(auth_user.id, chat_id, page=page, limit=limit)
    return MessagePageResponse.from_model(result)


@router.post("/{chat_id}/messages", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
    chat_id: str,
    payload: SendMessageRequest,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: PrivateChatService = Depends(chat_service),
) -> MessageOut:
    message = await service.send_message(auth_user.id, chat_id, payload.text)
    return MessageOut.from_model(message)


@router.put("/{chat_id}/read", response_model=MarkReadResponse)
async def mark_read(
    chat_id: str,
    auth_user: AuthenticatedUser = Depends(get_active_user),
    service: PrivateChatService = Depends(chat_service),
) -> MarkReadResponse:
    updated = await service.mark_read(auth_user.id, chat_id)
    return MarkReadResponse(updated=updated)
