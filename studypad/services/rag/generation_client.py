"""HTTP client for the Gemini text-generation endpoint."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from studypad.core.config import Settings
from studypad.core.errors import GenerationFailure
from studypad.services.rag.schemas import Content, GenerateContentRequest, GenerateContentResponse

logger = logging.getLogger(__name__)

# Transport failures plus errors raised while encoding the request (e.g. lone
# surrogates that cannot be encoded as UTF-8).
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)

_API_VERSION = "v1"

UNPARSEABLE_RESPONSE_PREFIX = "Failed to parse generation response: "


class GenerationClient:
    """Sends a composed prompt to the model and extracts the answer text."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.generation_model
        self._path = f"/{_API_VERSION}/models/{self._model}:generateContent"
        self._client = client or httpx.Client(
            base_url=settings.gemini_base_url.rstrip("/"),
            timeout=settings.http_timeout,
        )

    def close(self) -> None:
        self._client.close()

    def generate(self, prompt: str) -> str:
        """Return the first candidate's text.

        A successful call whose body does not carry the expected fields returns
        a diagnostic string containing the raw body, so the caller still has
        something to show.
        """

        payload = GenerateContentRequest(contents=[Content.from_text(prompt)])

        try:
            response = self._client.post(
                self._path,
                params={"key": self._api_key or ""},
                json=payload.model_dump(exclude_none=True),
            )
        except _REQUEST_ERRORS as exc:
            raise GenerationFailure(f"generation request failed: {exc}") from exc

        if response.status_code != 200:
            raise GenerationFailure(
                f"generation service returned HTTP {response.status_code}: {response.text}"
            )

        try:
            text = GenerateContentResponse.model_validate_json(response.text).first_text()
        except ValidationError:
            text = None

        if text is None:
            logger.warning("Unexpected generation response shape | model=%s", self._model)
            return f"{UNPARSEABLE_RESPONSE_PREFIX}{response.text}"

        logger.info("Generation completed | model=%s | chars=%d", self._model, len(text))
        return text


__all__ = ["GenerationClient", "UNPARSEABLE_RESPONSE_PREFIX"]
