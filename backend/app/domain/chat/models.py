"""Domain models for private 1:1 chats between mutual followers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Protocol, Tuple

import ulid


@dataclass(slots=True, frozen=True)
class ConversationKey:
	"""Canonical unordered pair of participants."""

	user_a: str
	user_b: str

	@classmethod
	def from_participants(cls, user_one: str, user_two: str) -> "ConversationKey":
		ordered = tuple(sorted((str(user_one), str(user_two))))
		return cls(user_a=ordered[0], user_b=ordered[1])

	def participants(self) -> Tuple[str, str]:
		return (self.user_a, self.user_b)


@dataclass(slots=True)
class PrivateChat:
	id: str
	user_a: str
	user_b: str
	created_at: datetime
	updated_at: datetime
	last_message_id: Optional[str] = None

	@classmethod
	def from_record(cls, record) -> "PrivateChat":
		return cls(
			id=str(record["id"]),
			user_a=str(record["user_a"]),
			user_b=str(record["user_b"]),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
			last_message_id=record.get("last_message_id"),
		)

	@property
	def key(self) -> ConversationKey:
		return ConversationKey(self.user_a, self.user_b)

	def is_participant(self, user_id: str) -> bool:
		return user_id in (self.user_a, self.user_b)

	def other_participant(self, user_id: str) -> str:
		return self.user_b if user_id == self.user_a else self.user_a


@dataclass(slots=True)
class PrivateMessage:
	id: str
	chat_id: str
	sender_id: str
	text: str
	created_at: datetime
	read_by: FrozenSet[str] = field(default_factory=frozenset)

	@classmethod
	def from_record(cls, record) -> "PrivateMessage":
		return cls(
			id=str(record["id"]),
			chat_id=str(record["chat_id"]),
			sender_id=str(record["sender_id"]),
			text=record["text"],
			created_at=record["created_at"],
			read_by=frozenset(record.get("read_by") or ()),
		)


@dataclass(slots=True)
class ChatSummary:
	chat: PrivateChat
	unread_count: int
	last_message: Optional[PrivateMessage] = None


@dataclass(slots=True)
class MessagePage:
	messages: List[PrivateMessage]
	page: int
	limit: int
	total_messages: int

	@property
	def total_pages(self) -> int:
		if self.total_messages == 0:
			return 0
		return -(-self.total_messages // self.limit)


class PrivateChatRepository(Protocol):
	async def get_or_create(self, key: ConversationKey, *, now: datetime) -> Tuple[PrivateChat, bool]:
		"""Return the pair's chat and whether this call inserted it."""
		...

	async def get(self, chat_id: str) -> Optional[PrivateChat]:
		...

	async def list_for_user(self, user_id: str) -> List[PrivateChat]:
		...

	async def add_message(self, chat_id: str, sender_id: str, text: str, *, now: datetime) -> PrivateMessage:
		"""Insert the message and advance the chat's last message pointer."""
		...

	async def get_message(self, message_id: str) -> Optional[PrivateMessage]:
		...

	async def list_messages(self, chat_id: str, *, offset: int, limit: int) -> List[PrivateMessage]:
		"""Newest first."""
		...

	async def count_messages(self, chat_id: str) -> int:
		...

	async def count_unread(self, chat_id: str, reader_id: str) -> int:
		...

	async def mark_read(self, chat_id: str, reader_id: str) -> int:
		...

	async def delete(self, chat_id: str) -> bool:
		...


class InMemoryPrivateChatRepository(PrivateChatRepository):
	def __init__(self) -> None:
		self._lock = asyncio.Lock()
		self.chats: Dict[str, PrivateChat] = {}
		self.by_pair: Dict[ConversationKey, str] = {}
		self.messages: Dict[str, List[PrivateMessage]] = {}
		# Monotonic tie-break for chats touched within the same clock tick
		self._touched: Dict[str, int] = {}
		self._tick = 0

	def _touch(self, chat_id: str) -> None:
		self._tick += 1
		self._touched[chat_id] = self._tick

	async def get_or_create(self, key: ConversationKey, *, now: datetime) -> Tuple[PrivateChat, bool]:
		async with self._lock:
			existing = self.by_pair.get(key)
			if existing is not None:
				return self.chats[existing], False
			chat = PrivateChat(
				id=str(ulid.new()),
				user_a=key.user_a,
				user_b=key.user_b,
				created_at=now,
				updated_at=now,
			)
			self.chats[chat.id] = chat
			self.by_pair[key] = chat.id
			self.messages[chat.id] = []
			self._touch(chat.id)
			return chat, True

	async def get(self, chat_id: str) -> Optional[PrivateChat]:
		return self.chats.get(chat_id)

	async def list_for_user(self, user_id: str) -> List[PrivateChat]:
		rows = [chat for chat in self.chats.values() if chat.is_participant(user_id)]
		return sorted(rows, key=lambda c: (c.updated_at, self._touched.get(c.id, 0)), reverse=True)

	async def add_message(self, chat_id: str, sender_id: str, text: str, *, now: datetime) -> PrivateMessage:
		async with self._lock:
			message = PrivateMessage(
				id=str(ulid.new()),
				chat_id=chat_id,
				sender_id=sender_id,
				text=text,
				created_at=now,
				read_by=frozenset({sender_id}),
			)
			self.messages.setdefault(chat_id, []).append(message)
			chat = self.chats[chat_id]
			chat.last_message_id = message.id
			chat.updated_at = now
			self._touch(chat_id)
			return message

	async def get_message(self, message_id: str) -> Optional[PrivateMessage]:
		for thread in self.messages.values():
			for message in thread:
				if message.id == message_id:
					return message
		return None

	async def list_messages(self, chat_id: str, *, offset: int, limit: int) -> List[PrivateMessage]:
		thread = list(reversed(self.messages.get(chat_id, [])))
		return thread[offset : offset + limit]

	async def count_messages(self, chat_id: str) -> int:
		return len(self.messages.get(chat_id, []))

	async def count_unread(self, chat_id: str, reader_id: str) -> int:
		return sum(
			1
			for m in self.messages.get(chat_id, [])
			if m.sender_id != reader_id and reader_id not in m.read_by
		)

	async def mark_read(self, chat_id: str, reader_id: str) -> int:
		async with self._lock:
			updated = 0
			for m in self.messages.get(chat_id, []):
				if m.sender_id != reader_id and reader_id not in m.read_by:
					m.read_by = m.read_by | {reader_id}
					updated += 1
			return updated

	async def delete(self, chat_id: str) -> bool:
		async with self._lock:
			chat = self.chats.pop(chat_id, None)
			if chat is None:
				return False
			self.by_pair.pop(chat.key, None)
			self._touched.pop(chat_id, None)
			self.messages.pop(chat_id, None)
			return True
