"""Runtime configuration for the study assistant service."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

_ENV_KEYS = (
    "GEMINI_API_KEY",
    "GEMINI_BASE_URL",
    "GEMINI_EMBEDDING_MODEL",
    "GEMINI_GENERATION_MODEL",
    "PINECONE_API_KEY",
    "PINECONE_HOST",
    "RAG_TOP_K",
    "HTTP_TIMEOUT",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "HISTORY_TABLE",
    "MEMO_TABLE",
)


class Settings(BaseModel):
    """Configuration contract shared by every remote client.

    Built once per process by :func:`get_settings` and handed explicitly to
    each component, so tests can construct their own instance.
    """

    model_config = ConfigDict(populate_by_name=True)

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        alias="GEMINI_BASE_URL",
    )
    embedding_model: str = Field(default="text-embedding-004", alias="GEMINI_EMBEDDING_MODEL")
    generation_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_GENERATION_MODEL")

    pinecone_api_key: Optional[str] = Field(default=None, alias="PINECONE_API_KEY")
    pinecone_host: Optional[str] = Field(default=None, alias="PINECONE_HOST")
    rag_top_k: int = Field(default=3, alias="RAG_TOP_K", ge=1)

    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT", gt=0)

    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    history_table: str = Field(default="gpt_history", alias="HISTORY_TABLE")
    memo_table: str = Field(default="memos", alias="MEMO_TABLE")

    @property
    def supabase_api_key(self) -> Optional[str]:
        return self.supabase_service_role_key

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_api_key)

    @property
    def pinecone_base_url(self) -> Optional[str]:
        if not self.pinecone_host:
            return None
        host = self.pinecone_host.strip().rstrip("/")
        if not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return host


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment (and ``.env``) once per process."""

    load_dotenv()

    env_values = {
        key: value
        for key in _ENV_KEYS
        if (value := os.getenv(key)) is not None
    }

    return Settings(**env_values)


__all__ = ["Settings", "get_settings"]
