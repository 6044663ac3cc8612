from .threads import ChatThreadService
from .memory_store import MemoryChatStore, memory_chat_store
from .chat import ChatService
from .documents import DocumentService
from .users import UserService

__all__ = ["ChatThreadService", "MemoryChatStore", "memory_chat_store", "ChatService",
           "DocumentService", "UserService"]
