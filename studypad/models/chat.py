from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from studypad.services.notes_repository import HistoryRecord


class PromptRequest(BaseModel):
    prompt: Optional[str] = Field(default=None, description="Question typed by the user")


class HistoryItem(BaseModel):
    id: int
    question: str
    answer: str
    created_at: str

    @classmethod
    def from_record(cls, record: HistoryRecord) -> "HistoryItem":
        return cls(
            id=record.id,
            question=record.question,
            answer=record.answer,
            created_at=record.created_at,
        )


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None
