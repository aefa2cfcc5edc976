"""Pydantic schemas for private chat endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.domain.chat.models import ChatSummary, MessagePage, PrivateMessage
from app.domain.common.schemas import CamelModel


class StartChatRequest(CamelModel):
	user_id: str = Field(min_length=1)


class SendMessageRequest(CamelModel):
	text: str


class MessageOut(CamelModel):
	id: str
	chat_id: str
	sender_id: str
	text: str
	read_by: List[str]
	created_at: datetime

	@classmethod
	def from_model(cls, message: PrivateMessage) -> "MessageOut":
		return cls(
			id=message.id,
			chat_id=message.chat_id,
			sender_id=message.sender_id,
			text=message.text,
			read_by=sorted(message.read_by),
			created_at=message.created_at,
		)


class ChatOut(CamelModel):
	id: str
	participants: List[str]
	other_participant_id: str
	unread_count: int
	last_message: Optional[MessageOut] = None
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_summary(cls, summary: ChatSummary, viewer_id: str) -> "ChatOut":
		chat = summary.chat
		return cls(
			id=chat.id,
			participants=[chat.user_a, chat.user_b],
			other_participant_id=chat.other_participant(viewer_id),
			unread_count=summary.unread_count,
			last_message=MessageOut.from_model(summary.last_message) if summary.last_message else None,
			created_at=chat.created_at,
			updated_at=chat.updated_at,
		)


class StartChatResponse(CamelModel):
	success: bool = True
	chat_id: str
	is_new: bool
	unread_count: int
	chat: ChatOut


class ChatListResponse(CamelModel):
	success: bool = True
	count: int
	chats: List[ChatOut]


class ChatResponse(CamelModel):
	success: bool = True
	chat: ChatOut


class MessagePageResponse(CamelModel):
	success: bool = True
	messages: List[MessageOut]
	page: int
	total_pages: int
	total_messages: int

	@classmethod
	def from_model(cls, page: MessagePage) -> "MessagePageResponse":
		return cls(
			messages=[MessageOut.from_model(m) for m in page.messages],
			page=page.page,
			total_pages=page.total_pages,
			total_messages=page.total_messages,
		)


class MarkReadResponse(CamelModel):
	success: bool = True
	updated: int


class DeleteChatResponse(CamelModel):
	success: bool = True
