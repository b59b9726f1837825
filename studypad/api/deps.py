"""FastAPI dependencies shared across routers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from studypad.core.config import get_settings
from studypad.services.notes_repository import build_notes_repository
from studypad.services.rag.service import RAGService


@dataclass
class AuthenticatedUser:
    username: str


def get_current_user(
    user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> AuthenticatedUser:
    """Resolve the caller from the identity header set by the session layer.

    Authentication happens upstream; this service only needs a stable
    username to scope history, memos and memo index ids.
    """

    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
        )

    return AuthenticatedUser(username=user_id.strip())


@lru_cache(maxsize=1)
def get_rag_service() -> RAGService:
    """Single service instance shared by the question and memo routers."""

    settings = get_settings()
    return RAGService(settings, repository=build_notes_repository(settings))


AuthenticatedUserDependency = Depends(get_current_user)


__all__ = [
    "AuthenticatedUser",
    "AuthenticatedUserDependency",
    "get_current_user",
    "get_rag_service",
]
