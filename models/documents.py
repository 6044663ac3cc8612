"""Document model for uploaded file metadata."""
from sqlalchemy import Column, String, DateTime, Integer, Text, JSON, Uuid, func, Enum
from uuid import uuid4
from .chats import Base
import enum


class DocumentStatus(enum.Enum):
    """Enum for document verification status."""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class FileType(enum.Enum):
    """Coarse file classification derived from the file extension."""
    PDF = "pdf"
    IMAGE = "image"
    DOC = "doc"
    OTHER = "other"


class Document(Base):
    """
    SQLAlchemy model for uploaded documents.

    Stores metadata about a file written to local upload storage together with
    the outcome of its (simulated) verification.
    """
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid4, index=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    file_url = Column(String, unique=True, nullable=False)  # Path in local upload storage
    original_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)  # Size in bytes
    mimetype = Column(String, nullable=False)
    department = Column(String, nullable=False, default="general")
    file_type = Column(Enum(FileType), nullable=False)
    status = Column(Enum(DocumentStatus), default=DocumentStatus.PENDING, nullable=False)
    verification_results = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
