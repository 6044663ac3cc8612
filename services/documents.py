"""Document service for upload metadata and verification."""
from typing import Optional, List, BinaryIO
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import desc
import os
import logging

from models.documents import Document, DocumentStatus, FileType
from services.storage import LocalFileStorage
from services.verification import VerificationStrategy

logger = logging.getLogger(__name__)


# Extension → coarse file type; anything else is "other"
FILE_TYPE_BY_EXTENSION = {
    'jpg': FileType.IMAGE,
    'jpeg': FileType.IMAGE,
    'png': FileType.IMAGE,
    'gif': FileType.IMAGE,
    'pdf': FileType.PDF,
    'doc': FileType.DOC,
    'docx': FileType.DOC,
    'txt': FileType.DOC,
}

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_DEPARTMENT = "general"


class DocumentNotPendingError(Exception):
    """Raised when verifying a document that was already verified or rejected."""


class DocumentService:
    """Service class for document metadata operations."""

    @staticmethod
    def classify_file(filename: str) -> FileType:
        """Derive the coarse file type from a filename's extension."""
        file_extension = os.path.splitext(filename)[1].lower().lstrip('.')
        return FILE_TYPE_BY_EXTENSION.get(file_extension, FileType.OTHER)

    @staticmethod
    def upload_document(
        db: Session,
        storage: LocalFileStorage,
        user_id: str,
        filename: str,
        file_data: BinaryIO,
        file_size: int,
        content_type: str,
        title: str,
        description: str,
        department: Optional[str] = None
    ) -> Optional[Document]:
        """
        Store an uploaded file on disk and save its metadata.

        Args:
            db: Database session
            storage: Local file storage
            user_id: Owning user identifier
            filename: Original filename
            file_data: File binary data
            file_size: File size in bytes
            content_type: MIME type
            title: Document title
            description: Document description
            department: Department tag, "general" when empty

        Returns:
            Document object if successful, None if the file could not be stored

        Raises:
            ValueError: If the file exceeds the size limit
        """
        if file_size > MAX_FILE_SIZE:
            raise ValueError(f"File size exceeds maximum allowed size of {MAX_FILE_SIZE // 1024 // 1024}MB")

        object_name = storage.generate_object_name(filename)
        file_url = storage.save_file(file_data, object_name)
        if not file_url:
            return None

        db_document = Document(
            user_id=user_id,
            title=title,
            description=description,
            file_url=file_url,
            original_name=filename,
            file_size=file_size,
            mimetype=content_type,
            department=department or DEFAULT_DEPARTMENT,
            file_type=DocumentService.classify_file(filename),
            status=DocumentStatus.PENDING,
            verification_results={},
        )

        try:
            db.add(db_document)
            db.commit()
        except Exception:
            db.rollback()
            # Do not leave an orphaned file behind
            storage.delete_file(file_url)
            raise
        db.refresh(db_document)

        logger.info(f"Stored document {db_document.id} ({db_document.file_type.value}) for user {user_id}")
        return db_document

    @staticmethod
    def get_document(db: Session, document_id: UUID) -> Optional[Document]:
        """Get a document by ID."""
        return db.query(Document).filter(Document.id == document_id).first()

    @staticmethod
    def get_user_documents(
        db: Session,
        user_id: str,
        skip: int = 0,
        limit: int = 20
    ) -> List[Document]:
        """Get all documents for a user, newest first."""
        return db.query(Document).filter(
            Document.user_id == user_id
        ).order_by(
            desc(Document.created_at)
        ).offset(skip).limit(limit).all()

    @staticmethod
    def count_user_documents(db: Session, user_id: str) -> int:
        """Count total documents for a user."""
        return db.query(Document).filter(
            Document.user_id == user_id
        ).count()

    @staticmethod
    def verify_document(
        db: Session,
        document_id: UUID,
        strategy: VerificationStrategy
    ) -> Optional[Document]:
        """
        Run verification on a pending document and record the outcome.

        Returns:
            The updated document, or None if it does not exist

        Raises:
            DocumentNotPendingError: If the document was already verified or rejected
        """
        document = DocumentService.get_document(db, document_id)
        if not document:
            return None

        if document.status != DocumentStatus.PENDING:
            raise DocumentNotPendingError(
                f"Document {document_id} is already {document.status.value}"
            )

        result = strategy.verify(document)
        document.status = DocumentStatus.VERIFIED if result.verified else DocumentStatus.REJECTED
        document.verification_results = result.model_dump(mode="json")

        db.commit()
        db.refresh(document)

        logger.info(f"Document {document_id} {document.status.value} with score {result.score}")
        return document
