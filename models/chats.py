"""Chat thread and message models for conversation persistence."""
import enum

from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, func, Enum
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class MessageSender(str, enum.Enum):
    """Enum for the author of a chat message."""
    USER = "user"
    SYSTEM = "system"


class ChatThread(Base):
    """
    SQLAlchemy model for chat threads.

    One thread per user identifier. Messages are appended in order and never
    edited.
    """
    __tablename__ = "chat_threads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    messages = relationship(
        "ChatMessage",
        back_populates="thread",
        order_by="ChatMessage.id",
        cascade="all, delete-orphan",
    )


class ChatMessage(Base):
    """SQLAlchemy model for a single message within a chat thread."""
    __tablename__ = "chat_messages"

    # Autoincrement id doubles as the insertion order of the thread
    id = Column(Integer, primary_key=True, autoincrement=True)
    thread_id = Column(Integer, ForeignKey("chat_threads.id", ondelete="CASCADE"), nullable=False, index=True)
    sender = Column(Enum(MessageSender), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    thread = relationship("ChatThread", back_populates="messages")
