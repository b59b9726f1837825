"""Error kinds raised across the question and memo pipelines."""

from __future__ import annotations


class StudypadError(RuntimeError):
    """Base class for every failure the service reports."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidInput(StudypadError):
    """Raised when the user's request is rejected before any remote call."""


class RetrievalError(StudypadError):
    """Failures of the enrichment layer (embedding and vector index)."""


class EmbeddingFailure(RetrievalError):
    """The embedding service answered with an error or an unusable body."""


class IndexWriteFailure(RetrievalError):
    """The vector index rejected an upsert."""


class IndexQueryFailure(RetrievalError):
    """The vector index could not be queried."""


class GenerationFailure(StudypadError):
    """The text-generation endpoint could not produce an answer."""


class PersistenceFailure(StudypadError):
    """The history or memo store did not accept the write."""


__all__ = [
    "EmbeddingFailure",
    "GenerationFailure",
    "IndexQueryFailure",
    "IndexWriteFailure",
    "InvalidInput",
    "PersistenceFailure",
    "RetrievalError",
    "StudypadError",
]
