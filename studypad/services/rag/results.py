"""Explicit outcomes of the best-effort enrichment steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from studypad.core.errors import RetrievalError
from studypad.services.rag.vector_client import RetrievedContext


@dataclass(frozen=True)
class RetrievalResult:
    context: RetrievedContext = field(default_factory=list)
    error: Optional[RetrievalError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, context: RetrievedContext) -> "RetrievalResult":
        return cls(context=list(context))

    @classmethod
    def failure(cls, error: RetrievalError) -> "RetrievalResult":
        return cls(error=error)


@dataclass(frozen=True)
class SyncResult:
    record_id: str
    error: Optional[RetrievalError] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = ["RetrievalResult", "SyncResult"]
