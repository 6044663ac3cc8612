"""Document schemas for upload requests and responses."""
from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field, ConfigDict
from uuid import UUID
from models.documents import DocumentStatus, FileType


class DocumentResponse(BaseModel):
    """Schema for document responses."""
    id: UUID
    user_id: str
    title: str
    description: str
    file_url: str
    original_name: str
    file_size: int
    mimetype: str
    department: str
    file_type: FileType
    status: DocumentStatus
    verification_results: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DocumentListResponse(BaseModel):
    """Schema for paginated document list."""
    documents: List[DocumentResponse]
    total: int
    page: int = Field(default=1)
    page_size: int = Field(default=20)


class VerificationResult(BaseModel):
    """Outcome of a document verification run."""
    verified: bool
    score: int = Field(..., ge=0, le=100)
    issues: List[str] = Field(default_factory=list)
    timestamp: datetime
