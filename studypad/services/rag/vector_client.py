"""HTTP client for the Pinecone vector index."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx
from pydantic import ValidationError

from studypad.core.config import Settings
from studypad.core.errors import IndexQueryFailure, IndexWriteFailure
from studypad.services.rag.schemas import (
    QueryMatch,
    QueryRequest,
    QueryResponse,
    UpsertRequest,
    VectorMetadata,
    VectorRecord,
)

logger = logging.getLogger(__name__)

# Transport failures plus errors raised while encoding the request (e.g. lone
# surrogates that cannot be encoded as UTF-8).
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


@dataclass(frozen=True)
class RetrievedMatch:
    """A stored text returned by a similarity query, ranked from 1."""

    rank: int
    text: str
    id: Optional[str] = None
    score: Optional[float] = None


RetrievedContext = List[RetrievedMatch]


class VectorIndexClient:
    """Thin wrapper around the index's upsert and query endpoints."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self._base_url = settings.pinecone_base_url
        self._api_key = settings.pinecone_api_key
        self._default_top_k = settings.rag_top_k
        self._client = client or httpx.Client(
            base_url=self._base_url or "",
            timeout=settings.http_timeout,
        )

        if not self._base_url:
            logger.warning("PINECONE_HOST not configured; vector index disabled")

    def close(self) -> None:
        self._client.close()

    def upsert(self, record_id: str, text: str, vector: List[float]) -> None:
        """Store ``text`` under ``record_id``, replacing any previous record."""

        if not self._base_url:
            raise IndexWriteFailure("vector index host is not configured")

        payload = UpsertRequest(
            vectors=[
                VectorRecord(id=record_id, values=vector, metadata=VectorMetadata(text=text))
            ]
        )

        try:
            response = self._client.post(
                "/vectors/upsert",
                json=payload.model_dump(exclude_none=True),
                headers=self._headers(),
            )
        except _REQUEST_ERRORS as exc:
            raise IndexWriteFailure(f"upsert request failed: {exc}") from exc

        if response.status_code != 200:
            raise IndexWriteFailure(
                f"index upsert returned HTTP {response.status_code}: {response.text}"
            )

        logger.info("Vector upserted | id=%s | dimension=%d", record_id, len(vector))

    def query(self, vector: List[float], top_k: Optional[int] = None) -> RetrievedContext:
        """Return up to ``top_k`` stored texts ranked by similarity.

        An index with no matches yields an empty list, not an error.
        """

        if not self._base_url:
            raise IndexQueryFailure("vector index host is not configured")

        if top_k is None:
            top_k = self._default_top_k
        payload = QueryRequest(vector=vector, top_k=top_k)

        try:
            response = self._client.post(
                "/query",
                json=payload.model_dump(by_alias=True),
                headers=self._headers(),
            )
        except _REQUEST_ERRORS as exc:
            raise IndexQueryFailure(f"query request failed: {exc}") from exc

        if response.status_code != 200:
            raise IndexQueryFailure(
                f"index query returned HTTP {response.status_code}: {response.text}"
            )

        try:
            body = QueryResponse.model_validate_json(response.text)
        except ValidationError as exc:
            raise IndexQueryFailure(f"malformed query response: {response.text}") from exc

        context = _to_context(body.matches or [])
        logger.info("Vector index returned %d matches", len(context))
        return context

    def _headers(self) -> dict[str, str]:
        return {
            "Api-Key": self._api_key or "",
            "Content-Type": "application/json",
        }


def _to_context(matches: List[QueryMatch]) -> RetrievedContext:
    context: RetrievedContext = []
    for match in matches:
        text = match.metadata.text if match.metadata else None
        if not text:
            continue
        context.append(
            RetrievedMatch(rank=len(context) + 1, text=text, id=match.id, score=match.score)
        )
    return context


__all__ = ["RetrievedContext", "RetrievedMatch", "VectorIndexClient"]
