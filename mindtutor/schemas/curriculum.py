"""
Curriculum schemas for mindtutor.

Defines Pydantic models for curriculum content fetched from the backend:
- Static per-series metadata
- Series with ordered lessons
- Lessons with ordered paragraphs
"""

from typing import Optional

from pydantic import BaseModel, Field

from .progress import SeriesId

# Shown when the backend gives a lesson without any readable paragraph
PLACEHOLDER_PARAGRAPH = "(This content could not be loaded.)"


class SeriesInfo(BaseModel):
    title: str
    description: str
    available: bool = True   # whether the first lesson may be opened from another series
    display_name: str        # used for "continue to the next series" prompts


SERIES_INFO: dict[SeriesId, SeriesInfo] = {
    SeriesId.OT: SeriesInfo(
        title="Orientation",
        description="The first step of the journey with your coach",
        display_name="Orientation",
    ),
    SeriesId.U: SeriesInfo(
        title="Understanding",
        description="Time to understand your own mind more deeply",
        display_name="UNDER (Understanding)",
    ),
    SeriesId.L: SeriesInfo(
        title="Lesson",
        description="Concrete training for putting things into practice",
        display_name="LESSON (Practice)",
    ),
    SeriesId.C: SeriesInfo(
        title="Complete",
        description="Applying what you learned to everyday life",
        display_name="COMPLETE (Application)",
    ),
}


class Lesson(BaseModel):
    series_id: SeriesId
    lesson_id: str           # "{series}-{ordinal}", e.g. "OT-2"
    title: str
    description: Optional[str] = None
    paragraphs: list[str] = Field(..., min_length=1)

    @property
    def last_paragraph_index(self) -> int:
        return len(self.paragraphs) - 1


class Series(BaseModel):
    series_id: SeriesId
    title: str
    description: str = ""
    lessons: list[Lesson]
