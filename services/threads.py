"""Chat thread service for primary store operations."""
from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy.orm import Session, selectinload

from models.chats import ChatThread, ChatMessage, MessageSender


class ChatThreadService:
    """Service class for chat thread persistence in the primary store."""

    @staticmethod
    def get_thread(db: Session, user_id: str) -> Optional[ChatThread]:
        """Retrieve the thread owned by a user, with its messages loaded."""
        return db.query(ChatThread).options(
            selectinload(ChatThread.messages)
        ).filter(ChatThread.user_id == user_id).first()

    @staticmethod
    def new_thread(user_id: str) -> ChatThread:
        """Build an unsaved, empty thread for a user."""
        return ChatThread(user_id=user_id, messages=[])

    @staticmethod
    def append_message(thread: ChatThread, sender: MessageSender, content: str) -> ChatMessage:
        """Append a message to a thread without saving it."""
        message = ChatMessage(sender=sender, content=content)
        thread.messages.append(message)
        thread.updated_at = datetime.now(timezone.utc)
        return message

    @staticmethod
    def save_thread(db: Session, thread: ChatThread) -> ChatThread:
        """Create or update a thread."""
        db.add(thread)
        db.commit()
        return thread

    @staticmethod
    def get_messages(db: Session, user_id: str) -> List[ChatMessage]:
        """Retrieve the ordered messages of a user's thread, or an empty list."""
        thread = ChatThreadService.get_thread(db, user_id)
        if not thread:
            return []
        return list(thread.messages)
