"""Configuration and error primitives."""

from .config import Settings, get_settings
from .errors import (
    EmbeddingFailure,
    GenerationFailure,
    IndexQueryFailure,
    IndexWriteFailure,
    InvalidInput,
    PersistenceFailure,
    RetrievalError,
    StudypadError,
)

__all__ = [
    "EmbeddingFailure",
    "GenerationFailure",
    "IndexQueryFailure",
    "IndexWriteFailure",
    "InvalidInput",
    "PersistenceFailure",
    "RetrievalError",
    "Settings",
    "StudypadError",
    "get_settings",
]
