"""Response envelopes shared by every endpoint."""
from typing import Generic, Literal, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class Ok(BaseModel, Generic[T]):
    """Successful response carrying a payload."""
    success: Literal[True] = True
    data: T


class Err(BaseModel):
    """Error response carrying the HTTP status code and a message."""
    success: Literal[False] = False
    code: int = Field(..., description="HTTP status code")
    error: str = Field(..., description="Human readable error message")
