"""Pydantic schemas for chat requests and responses."""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from models.chats import MessageSender


class MessageResponse(BaseModel):
    """Schema for a single chat message."""
    sender: MessageSender
    content: str
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ChatReply(BaseModel):
    """Schema for the reply to a chat message."""
    message: str


class ChatHistory(BaseModel):
    """Schema for a user's chat history."""
    messages: List[MessageResponse]


class ApiKeyResponse(BaseModel):
    """Schema for a provider key passthrough."""
    api_key: Optional[str] = Field(default=None, alias="apiKey")

    model_config = ConfigDict(populate_by_name=True)


class GoogleApiResponse(BaseModel):
    """Schema for the search key passthrough."""
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    search_engine_id: Optional[str] = Field(default=None, alias="searchEngineId")

    model_config = ConfigDict(populate_by_name=True)


class ModelProbeResponse(BaseModel):
    """Schema for the chat model connectivity probe."""
    message: str
    model: str


class SearchProbeResponse(BaseModel):
    """Schema for the search provider connectivity probe."""
    items: List[Dict[str, Any]] = Field(default_factory=list)
    search_information: Optional[Dict[str, Any]] = Field(default=None, alias="searchInformation")

    model_config = ConfigDict(populate_by_name=True)
