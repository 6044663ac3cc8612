"""Process-local chat store used when the primary store is unavailable."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from models.chats import MessageSender

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MemoryMessage:
    sender: MessageSender
    content: str
    timestamp: datetime = field(default_factory=_now)


@dataclass
class MemoryThread:
    user_id: str
    messages: List[MemoryMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)


class MemoryChatStore:
    """
    In-memory chat threads keyed by user identifier.

    Mirrors the get-or-create / append surface of ``ChatThreadService``.
    Contents are lost on restart and are not shared between processes.
    Concurrent appends for the same user are not serialized.
    """

    def __init__(self):
        self._threads: Dict[str, MemoryThread] = {}

    def get_thread(self, user_id: str) -> Optional[MemoryThread]:
        """Return the thread for a user, if one exists."""
        return self._threads.get(user_id)

    def get_or_create_thread(self, user_id: str) -> MemoryThread:
        """Return the thread for a user, creating an empty one if needed."""
        thread = self._threads.get(user_id)
        if thread is None:
            thread = MemoryThread(user_id=user_id)
            self._threads[user_id] = thread
            logger.info(f"Created in-memory chat thread for user {user_id}")
        return thread

    def append_message(self, user_id: str, sender: MessageSender, content: str) -> MemoryMessage:
        """Append a message to the user's thread, creating the thread if needed."""
        thread = self.get_or_create_thread(user_id)
        message = MemoryMessage(sender=sender, content=content)
        thread.messages.append(message)
        thread.updated_at = message.timestamp
        return message

    def record_exchange(self, user_id: str, user_message: str, reply: str) -> bool:
        """
        Store a user message and its reply as a fresh two-message thread.

        Only writes when the user has no in-memory thread yet; an existing
        thread is left untouched.

        Returns:
            bool: True if the exchange was written, False otherwise
        """
        if user_id in self._threads:
            logger.warning(f"In-memory thread already exists for user {user_id}; exchange not recorded")
            return False

        thread = MemoryThread(
            user_id=user_id,
            messages=[
                MemoryMessage(sender=MessageSender.USER, content=user_message),
                MemoryMessage(sender=MessageSender.SYSTEM, content=reply),
            ],
        )
        self._threads[user_id] = thread
        return True

    def thread_count(self) -> int:
        return len(self._threads)

    def clear(self) -> None:
        self._threads.clear()


# Global instance
memory_chat_store = MemoryChatStore()
