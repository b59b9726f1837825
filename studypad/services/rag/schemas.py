"""Request/response shapes for the Gemini and Pinecone REST endpoints.

Every payload sent to or read from a remote service goes through one of these
models; the clients never assemble JSON trees by hand.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Part(BaseModel):
    text: Optional[str] = None


class Content(BaseModel):
    parts: List[Part] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "Content":
        return cls(parts=[Part(text=text)])


# Gemini embedContent


class EmbedContentRequest(BaseModel):
    model: str
    content: Content


class EmbeddingValues(BaseModel):
    values: List[float]


class EmbedContentResponse(BaseModel):
    embedding: EmbeddingValues


# Gemini generateContent


class GenerateContentRequest(BaseModel):
    contents: List[Content]


class Candidate(BaseModel):
    content: Optional[Content] = None


class GenerateContentResponse(BaseModel):
    candidates: Optional[List[Candidate]] = None

    def first_text(self) -> Optional[str]:
        """Text of the first part of the first candidate, if the model produced one."""

        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text


# Pinecone data plane


class VectorMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: Optional[str] = None


class VectorRecord(BaseModel):
    id: str
    values: List[float]
    metadata: VectorMetadata


class UpsertRequest(BaseModel):
    vectors: List[VectorRecord]


class QueryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vector: List[float]
    top_k: int = Field(alias="topK")
    include_metadata: bool = Field(default=True, alias="includeMetadata")


class QueryMatch(BaseModel):
    id: Optional[str] = None
    score: Optional[float] = None
    metadata: Optional[VectorMetadata] = None


class QueryResponse(BaseModel):
    matches: Optional[List[QueryMatch]] = None


__all__ = [
    "Candidate",
    "Content",
    "EmbedContentRequest",
    "EmbedContentResponse",
    "EmbeddingValues",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "Part",
    "QueryMatch",
    "QueryRequest",
    "QueryResponse",
    "UpsertRequest",
    "VectorMetadata",
    "VectorRecord",
]
