from typing import Optional

from pydantic import BaseModel, Field


class MemoSaveRequest(BaseModel):
    content: Optional[str] = Field(default=None, description="Full memo pad text")


class MemoResponse(BaseModel):
    success: bool
    message: str
    content: Optional[str] = None
