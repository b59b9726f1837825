"""Storage for question/answer history and per-user memos."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional, Protocol

from supabase import Client, create_client

from studypad.core.config import Settings
from studypad.core.errors import PersistenceFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryRecord:
    """A persisted question/answer pair."""

    id: int
    question: str
    answer: str
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "HistoryRecord":
        return cls(
            id=int(row["id"]),
            question=str(row.get("question") or ""),
            answer=str(row.get("answer") or ""),
            created_at=str(row.get("created_at") or ""),
        )


class NotesRepository(Protocol):
    def save_question_answer(self, user: str, question: str, answer: str) -> HistoryRecord: ...

    def save_or_replace_memo(self, user: str, content: str) -> None: ...

    def get_memo(self, user: str) -> Optional[str]: ...

    def list_history(self, user: str) -> List[HistoryRecord]: ...


class SupabaseNotesRepository:
    """Wrapper around the ``gpt_history`` and ``memos`` tables."""

    def __init__(
        self,
        client: Client,
        *,
        history_table: str = "gpt_history",
        memo_table: str = "memos",
    ) -> None:
        self._client = client
        self._history_table = history_table
        self._memo_table = memo_table

    def save_question_answer(self, user: str, question: str, answer: str) -> HistoryRecord:
        payload = {"username": user, "question": question, "answer": answer}
        try:
            response = self._client.table(self._history_table).insert(payload).execute()
        except Exception as exc:
            logger.exception("Could not insert history row | user=%s", user)
            raise PersistenceFailure(f"history insert failed: {exc}") from exc

        rows = getattr(response, "data", None) or []
        if not rows or rows[0].get("id") is None:
            raise PersistenceFailure("history insert returned no generated id")

        row = dict(rows[0])
        if not row.get("created_at"):
            row["created_at"] = _utc_now()
        return HistoryRecord.from_row(row)

    def save_or_replace_memo(self, user: str, content: str) -> None:
        payload = {"username": user, "content": content}
        try:
            self._client.table(self._memo_table).upsert(payload, on_conflict="username").execute()
        except Exception as exc:
            logger.exception("Could not upsert memo | user=%s", user)
            raise PersistenceFailure(f"memo save failed: {exc}") from exc

    def get_memo(self, user: str) -> Optional[str]:
        try:
            response = (
                self._client.table(self._memo_table)
                .select("content")
                .eq("username", user)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            logger.exception("Could not read memo | user=%s", user)
            raise PersistenceFailure(f"memo lookup failed: {exc}") from exc

        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        return rows[0].get("content")

    def list_history(self, user: str) -> List[HistoryRecord]:
        try:
            response = (
                self._client.table(self._history_table)
                .select("id, question, answer, created_at")
                .eq("username", user)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as exc:
            logger.exception("Could not read history | user=%s", user)
            raise PersistenceFailure(f"history lookup failed: {exc}") from exc

        rows = getattr(response, "data", None) or []
        return [HistoryRecord.from_row(row) for row in rows]


class InMemoryNotesRepository:
    """Process-local store used when Supabase is not configured."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._history: Dict[str, List[HistoryRecord]] = {}
        self._memos: Dict[str, str] = {}

    def save_question_answer(self, user: str, question: str, answer: str) -> HistoryRecord:
        with self._lock:
            record = HistoryRecord(
                id=next(self._ids),
                question=question,
                answer=answer,
                created_at=_utc_now(),
            )
            self._history.setdefault(user, []).append(record)
        return record

    def save_or_replace_memo(self, user: str, content: str) -> None:
        with self._lock:
            self._memos[user] = content

    def get_memo(self, user: str) -> Optional[str]:
        with self._lock:
            return self._memos.get(user)

    def list_history(self, user: str) -> List[HistoryRecord]:
        with self._lock:
            return list(self._history.get(user, []))


@lru_cache(maxsize=4)
def _supabase_client(url: str, api_key: str) -> Client:
    return create_client(url, api_key)


def build_notes_repository(settings: Settings) -> NotesRepository:
    """Supabase-backed store when credentials exist, in-process store otherwise."""

    if not settings.supabase_configured:
        logger.warning("Supabase not configured; history and memos are kept in memory")
        return InMemoryNotesRepository()

    return SupabaseNotesRepository(
        _supabase_client(settings.supabase_url, settings.supabase_api_key),
        history_table=settings.history_table,
        memo_table=settings.memo_table,
    )


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


__all__ = [
    "HistoryRecord",
    "InMemoryNotesRepository",
    "NotesRepository",
    "SupabaseNotesRepository",
    "build_notes_repository",
]
