"""Chat domain exports."""

from .models import ConversationKey, PrivateChat, PrivateMessage
from .service import PrivateChatService

__all__ = [
	"ConversationKey",
	"PrivateChat",
	"PrivateChatService",
	"PrivateMessage",
]
