from .chats import Base, ChatThread, ChatMessage, MessageSender
from .users import User
from .documents import Document, DocumentStatus, FileType

__all__ = ["Base", "ChatThread", "ChatMessage", "MessageSender", "User", "Document", "DocumentStatus", "FileType"]
