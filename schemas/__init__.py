from .envelope import Ok, Err
from .chats import (
    MessageResponse, ChatReply, ChatHistory, ApiKeyResponse, GoogleApiResponse,
    ModelProbeResponse, SearchProbeResponse,
)
from .documents import DocumentResponse, DocumentListResponse, VerificationResult
from .users import UserCreate, UserLogin, UserResponse

__all__ = ["Ok", "Err",
           "MessageResponse", "ChatReply", "ChatHistory", "ApiKeyResponse", "GoogleApiResponse",
           "ModelProbeResponse", "SearchProbeResponse",
           "DocumentResponse", "DocumentListResponse", "VerificationResult",
           "UserCreate", "UserLogin", "UserResponse"]
