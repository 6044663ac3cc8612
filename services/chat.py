"""Chat service: record a message, obtain a reply, record the reply.

Store and provider failures are absorbed here so that a valid message always
gets a reply. Degradations are logged and counted in ``fallback_counters``.
"""
import logging
from collections import Counter
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.chats import ChatMessage, MessageSender
from services.memory_store import MemoryChatStore
from services.threads import ChatThreadService

logger = logging.getLogger(__name__)

# Process-local degradation counters, exposed by /health/detailed
fallback_counters: Counter = Counter()


async def generate_reply(reply_graph, user_message: str) -> str:
    """Run the reply graph for one user message and return the reply text."""
    result = await reply_graph.ainvoke(
        {"user_message": user_message, "reply": None, "provider_error": None}
    )
    return result["reply"]


def _safe_rollback(db: Session) -> None:
    try:
        db.rollback()
    except SQLAlchemyError as e:
        logger.error(f"Rollback failed: {e}")


class ChatService:
    """Service class for the chat send and history operations."""

    @staticmethod
    async def send_message(
        db: Session,
        memory_store: MemoryChatStore,
        reply_graph,
        user_id: str,
        message: str,
    ) -> str:
        """
        Record a user message, generate a reply and record the reply.

        Args:
            db: Database session for the primary store
            memory_store: In-memory store used when the primary store fails
            reply_graph: Compiled reply graph
            user_id: Opaque user identifier
            message: Non-empty user message

        Returns:
            The generated or fallback reply text
        """
        memory_mode = False
        thread = None

        # Thread tier: a failed lookup is treated like a missing thread
        try:
            thread = ChatThreadService.get_thread(db, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Error finding chat thread for user {user_id}: {e}")
            _safe_rollback(db)

        try:
            if thread is None:
                thread = ChatThreadService.new_thread(user_id)
            ChatThreadService.append_message(thread, MessageSender.USER, message)
            ChatThreadService.save_thread(db, thread)
        except SQLAlchemyError as e:
            logger.error(f"Database error for user {user_id}, using in-memory storage: {e}")
            _safe_rollback(db)
            memory_mode = True
            fallback_counters["store_fallbacks"] += 1
            memory_store.append_message(user_id, MessageSender.USER, message)

        # Reply tier: provider failures are handled inside the graph
        reply = await generate_reply(reply_graph, message)

        # Reply-persistence tier
        if memory_mode:
            memory_store.append_message(user_id, MessageSender.SYSTEM, reply)
        else:
            try:
                ChatThreadService.append_message(thread, MessageSender.SYSTEM, reply)
                ChatThreadService.save_thread(db, thread)
            except SQLAlchemyError as e:
                logger.error(f"Error saving reply for user {user_id}, falling back to memory: {e}")
                _safe_rollback(db)
                fallback_counters["reply_persist_fallbacks"] += 1
                memory_store.record_exchange(user_id, message, reply)

        return reply

    @staticmethod
    def get_history(db: Session, user_id: str) -> List[ChatMessage]:
        """
        Return the primary-store messages of a user's thread.

        The in-memory store is not consulted, so exchanges recorded there
        during an outage do not appear here.
        """
        return ChatThreadService.get_messages(db, user_id)
