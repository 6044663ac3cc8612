"""Application settings loaded from the environment.

Secrets have no defaults: a missing or blank value fails validation at
startup instead of silently falling back to a development credential.
"""
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_ALLOWED_ORIGINS = "http://localhost:5173,http://localhost:5174,http://localhost:5175"

REQUIRED_SECRETS = {
    "database_url": "DATABASE_URL",
    "gemini_api_key": "GEMINI_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
    "google_api_key": "GOOGLE_API_KEY",
    "search_engine_id": "SEARCH_ENGINE_ID",
}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime configuration for the AURA API.

    Attributes:
        database_url: SQLAlchemy URL of the primary store.
        gemini_api_key: Key for the Gemini chat model.
        openai_api_key: Key for the OpenAI connectivity probe.
        google_api_key: Key for the Custom Search JSON API.
        search_engine_id: Programmable Search Engine identifier (cx).
        chat_model: Model identifier passed to ``init_chat_model``.
        chat_model_provider: LangChain provider name for ``chat_model``.
        openai_probe_model: Model used by the OpenAI connectivity probe.
        upload_dir: Local directory receiving uploaded files.
        expose_provider_keys: Whether the key passthrough endpoints answer.
    """

    # Factories return raw environment strings; validation converts and bounds them
    model_config = ConfigDict(validate_default=True)

    database_url: str = Field(default_factory=lambda: os.getenv("DATABASE_URL", ""))
    gemini_api_key: str = Field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))
    openai_api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    google_api_key: str = Field(default_factory=lambda: os.getenv("GOOGLE_API_KEY", ""))
    search_engine_id: str = Field(default_factory=lambda: os.getenv("SEARCH_ENGINE_ID", ""))

    chat_model: str = Field(default_factory=lambda: os.getenv("CHAT_MODEL", "gemini-2.5-flash"))
    chat_model_provider: str = Field(
        default_factory=lambda: os.getenv("CHAT_MODEL_PROVIDER", "google_genai")
    )
    chat_temperature: float = Field(
        default_factory=lambda: os.getenv("CHAT_TEMPERATURE", "0.7"),
        ge=0.0,
        le=2.0,
    )
    chat_max_tokens: int = Field(
        default_factory=lambda: os.getenv("CHAT_MAX_TOKENS", "1024"),
        ge=1,
        le=128000,
    )
    openai_probe_model: str = Field(
        default_factory=lambda: os.getenv("OPENAI_PROBE_MODEL", "gpt-3.5-turbo")
    )

    upload_dir: str = Field(default_factory=lambda: os.getenv("UPLOAD_DIR", "uploads"))
    allowed_origins: List[str] = Field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS).split(",")
            if origin.strip()
        ]
    )
    expose_provider_keys: bool = Field(default_factory=lambda: _env_flag("EXPOSE_PROVIDER_KEYS"))

    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: os.getenv("PORT", "5000"), ge=1, le=65535)
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    @field_validator(*REQUIRED_SECRETS.keys())
    @classmethod
    def require_secret(cls, v: str, info) -> str:
        """Reject missing or blank secrets, naming the environment variable."""
        if not v or not v.strip():
            raise ValueError(f"{REQUIRED_SECRETS[info.field_name]} is required")
        return v.strip()


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process.

    Raises:
        pydantic.ValidationError: If a required secret is not set.
    """
    return Settings()
