from .chat_request import ChatRequest, ANONYMOUS_USER

__all__ = ["ChatRequest", "ANONYMOUS_USER"]
