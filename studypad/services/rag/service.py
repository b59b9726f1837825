"""Orchestrates retrieval, prompt composition, generation and persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from studypad.core.config import Settings
from studypad.core.errors import InvalidInput, RetrievalError
from studypad.services.notes_repository import HistoryRecord, NotesRepository
from studypad.services.rag.embedding_client import EmbeddingClient
from studypad.services.rag.generation_client import GenerationClient
from studypad.services.rag.prompt import compose_prompt
from studypad.services.rag.results import RetrievalResult, SyncResult
from studypad.services.rag.vector_client import VectorIndexClient
from studypad.workflows.ask import build_ask_workflow

logger = logging.getLogger(__name__)


def memo_index_id(user: str) -> str:
    """Index id of a user's memo pad; one record per user, overwritten on save."""

    return f"memo_{user}"


def index_text(
    embedding_client: EmbeddingClient,
    vector_client: VectorIndexClient,
    record_id: str,
    text: str,
) -> None:
    """Embed ``text`` and upsert it under ``record_id``. Failures propagate."""

    vector = embedding_client.embed(text)
    vector_client.upsert(record_id, text, vector)


@dataclass(frozen=True)
class MemoOutcome:
    user: str
    content: str


class RAGService:
    """Coordinates the "ask a question" and "save a memo" flows.

    Answer generation and storage are the contract of each flow and fail
    loudly. Embedding and index calls only enrich it: their failures are
    logged and turned into empty results.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        repository: NotesRepository,
        embedding_client: Optional[EmbeddingClient] = None,
        vector_client: Optional[VectorIndexClient] = None,
        generation_client: Optional[GenerationClient] = None,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._embedding_client = embedding_client or EmbeddingClient(settings)
        self._vector_client = vector_client or VectorIndexClient(settings)
        self._generation_client = generation_client or GenerationClient(settings)
        self._ask_workflow = build_ask_workflow(
            retrieve=self.retrieve_context,
            compose=compose_prompt,
            generate=self._generation_client.generate,
            persist=self._repository.save_question_answer,
        )

    def ask(self, *, user: str, question: Optional[str]) -> HistoryRecord:
        """Answer ``question`` and return the stored history record."""

        if question is None or not question.strip():
            raise InvalidInput("question must not be empty")

        logger.info("Answering question | user=%s | chars=%d", user, len(question))
        state = self._ask_workflow.invoke({"user": user, "question": question, "logs": []})
        logger.debug("Ask pipeline finished | user=%s | steps=%s", user, state.get("logs"))
        return state["record"]

    def save_memo(self, *, user: str, content: Optional[str]) -> MemoOutcome:
        """Persist the user's memo, then mirror it into the vector index if possible."""

        content = content or ""
        self._repository.save_or_replace_memo(user, content)
        logger.info("Memo saved | user=%s | chars=%d", user, len(content))

        sync = self.sync_memo(user, content)
        if not sync.ok:
            logger.warning(
                "Memo index sync failed; memo is saved regardless | user=%s | id=%s | reason=%s",
                user,
                sync.record_id,
                sync.error,
            )
        return MemoOutcome(user=user, content=content)

    def memo(self, user: str) -> str:
        return self._repository.get_memo(user) or ""

    def history(self, user: str) -> List[HistoryRecord]:
        return self._repository.list_history(user)

    def retrieve_context(self, question: str) -> RetrievalResult:
        """Embed the question and fetch related notes. Never raises on index errors."""

        try:
            vector = self._embedding_client.embed(question)
            context = self._vector_client.query(vector, top_k=self._settings.rag_top_k)
        except RetrievalError as exc:
            logger.warning("Context retrieval failed; answering without notes | reason=%s", exc)
            return RetrievalResult.failure(exc)

        logger.info("Context retrieved | matches=%d", len(context))
        return RetrievalResult.success(context)

    def sync_memo(self, user: str, content: str) -> SyncResult:
        record_id = memo_index_id(user)
        if not content.strip():
            return SyncResult(record_id=record_id, skipped=True)

        try:
            index_text(self._embedding_client, self._vector_client, record_id, content)
        except RetrievalError as exc:
            return SyncResult(record_id=record_id, error=exc)

        logger.info("Memo synced to vector index | user=%s | id=%s", user, record_id)
        return SyncResult(record_id=record_id)


__all__ = ["MemoOutcome", "RAGService", "index_text", "memo_index_id"]
