"""User model for registered accounts."""
from sqlalchemy import Column, String, DateTime, Uuid, func
from uuid import uuid4
from .chats import Base


class User(Base):
    """
    SQLAlchemy model for users.

    Stores profile information and an Argon2 password hash.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid4, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
