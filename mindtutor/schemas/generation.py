"""
Generation schemas for mindtutor.

Wire models for the backend one-shot generation endpoint (POST /tutor/generate).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .progress import Understanding


class GenerateType(str, Enum):
    EXPLAIN = "explain"
    SUMMARY = "summary"
    UNDERSTANDING_QUESTION = "understanding_question"
    HOMEWORK = "homework"
    RENDER_BLOCK = "render_block"   # rewrites one raw paragraph into a readable block


class GenerateRequest(BaseModel):
    type: GenerateType
    series_id: str
    lesson_id: str
    chunk_index: int = Field(..., ge=0)
    user_input: Optional[str] = None            # free-text question (explain)
    understanding: Optional[Understanding] = None  # homework personalization

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class GenerateResponse(BaseModel):
    type: GenerateType
    content: str = Field(..., min_length=1)
    lesson_id: str
    chunk_index: int
