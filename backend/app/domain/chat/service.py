"""Private chat between travelers who follow each other."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from app.domain.chat.models import (
	ChatSummary,
	ConversationKey,
	MessagePage,
	PrivateChat,
	PrivateChatRepository,
	PrivateMessage,
)
from app.domain.common.errors import NotFoundError, NotMutualFollowError, ValidationError
from app.domain.social.service import FollowService
from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


class PrivateChatService:
	def __init__(self, chats: PrivateChatRepository, follows: FollowService) -> None:
		self._chats = chats
		self._follows = follows

	async def _participant_chat(self, user_id: str, chat_id: str) -> PrivateChat:
		chat = await self._chats.get(chat_id)
		if chat is None or not chat.is_participant(user_id):
			raise NotFoundError("Chat not found")
		return chat

	async def _summarize(self, user_id: str, chat: PrivateChat) -> ChatSummary:
		last_message: Optional[PrivateMessage] = None
		if chat.last_message_id:
			last_message = await self._chats.get_message(chat.last_message_id)
		unread = await self._chats.count_unread(chat.id, user_id)
		return ChatSummary(chat=chat, unread_count=unread, last_message=last_message)

	async def start_private_chat(self, user_id: str, other_id: str) -> Tuple[ChatSummary, bool]:
		"""Open (or reopen) the pair's chat. Requires a mutual follow at call time."""
		if user_id == other_id:
			raise ValidationError("You cannot start a chat with yourself")
		try:
			await self._follows.ensure_mutual_follow(user_id, other_id)
		except NotMutualFollowError:
			obs_metrics.inc_chat_start("denied")
			raise
		key = ConversationKey.from_participants(user_id, other_id)
		chat, is_new = await self._chats.get_or_create(key, now=datetime.now(timezone.utc))
		obs_metrics.inc_chat_start("new" if is_new else "existing")
		if is_new:
			logger.info("private chat created", extra={"event": "chat_start", "chat_id": chat.id})
		return await self._summarize(user_id, chat), is_new

	async def list_chats(self, user_id: str) -> List[ChatSummary]:
		chats = await self._chats.list_for_user(user_id)
		return [await self._summarize(user_id, chat) for chat in chats]

	async def get_chat(self, user_id: str, chat_id: str) -> ChatSummary:
		chat = await self._participant_chat(user_id, chat_id)
		return await self._summarize(user_id, chat)

	async def list_messages(
		self,
		user_id: str,
		chat_id: str,
		*,
		page: int = 1,
		limit: int = DEFAULT_PAGE_SIZE,
	) -> MessagePage:
		"""Page 1 holds the newest messages; each page is returned oldest first."""
		if page < 1:
			raise ValidationError("page must be at least 1")
		if limit < 1:
			raise ValidationError("limit must be at least 1")
		limit = min(limit, settings.chat_page_max_limit)
		await self._participant_chat(user_id, chat_id)
		total = await self._chats.count_messages(chat_id)
		rows = await self._chats.list_messages(chat_id, offset=(page - 1) * limit, limit=limit)
		rows.reverse()
		return MessagePage(messages=rows, page=page, limit=limit, total_messages=total)

	async def send_message(self, user_id: str, chat_id: str, text: Optional[str]) -> PrivateMessage:
		chat = await self._participant_chat(user_id, chat_id)
		body = (text or "").strip()
		if not body:
			raise ValidationError("Message cannot be empty")
		if len(body) > settings.chat_message_max_length:
			raise ValidationError(f"Message cannot exceed {settings.chat_message_max_length} characters")
		# An unfollow on either side revokes messaging immediately
		await self._follows.ensure_mutual_follow(user_id, chat.other_participant(user_id))
		message = await self._chats.add_message(chat.id, user_id, body, now=datetime.now(timezone.utc))
		obs_metrics.inc_chat_send()
		return message

	async def mark_read(self, user_id: str, chat_id: str) -> int:
		await self._participant_chat(user_id, chat_id)
		updated = await self._chats.mark_read(chat_id, user_id)
		obs_metrics.inc_chat_read()
		return updated

	async def delete_chat(self, user_id: str, chat_id: str) -> None:
		await self._participant_chat(user_id, chat_id)
		if not await self._chats.delete(chat_id):
			raise NotFoundError("Chat not found")
		logger.info("private chat deleted", extra={"event": "chat_delete", "chat_id": chat_id})
