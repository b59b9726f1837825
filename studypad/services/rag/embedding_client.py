"""HTTP client for the Gemini embedding endpoint."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx
from pydantic import ValidationError

from studypad.core.config import Settings
from studypad.core.errors import EmbeddingFailure
from studypad.services.rag.schemas import Content, EmbedContentRequest, EmbedContentResponse

logger = logging.getLogger(__name__)

# Transport failures plus errors raised while encoding the request (e.g. lone
# surrogates that cannot be encoded as UTF-8).
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)

_API_VERSION = "v1beta"


class EmbeddingClient:
    """Turns a text into the model's fixed-dimension vector.

    No retries happen here; callers decide whether a failure is fatal.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.embedding_model
        self._path = f"/{_API_VERSION}/models/{self._model}:embedContent"
        self._client = client or httpx.Client(
            base_url=settings.gemini_base_url.rstrip("/"),
            timeout=settings.http_timeout,
        )

        if not self._api_key:
            logger.warning("GEMINI_API_KEY not configured; embedding calls will be rejected")

    def close(self) -> None:
        self._client.close()

    def embed(self, text: str) -> List[float]:
        payload = EmbedContentRequest(
            model=f"models/{self._model}",
            content=Content.from_text(text),
        )

        try:
            response = self._client.post(
                self._path,
                params={"key": self._api_key or ""},
                json=payload.model_dump(exclude_none=True),
            )
        except _REQUEST_ERRORS as exc:
            raise EmbeddingFailure(f"embedding request failed: {exc}") from exc

        if response.status_code != 200:
            raise EmbeddingFailure(
                f"embedding service returned HTTP {response.status_code}: {response.text}"
            )

        try:
            body = EmbedContentResponse.model_validate_json(response.text)
        except ValidationError as exc:
            raise EmbeddingFailure(f"malformed embedding response: {response.text}") from exc

        logger.debug(
            "Embedding generated | model=%s | dimension=%d",
            self._model,
            len(body.embedding.values),
        )
        return body.embedding.values


__all__ = ["EmbeddingClient"]
