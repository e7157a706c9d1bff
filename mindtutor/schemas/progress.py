"""
Progress tracking schemas for mindtutor.

Defines Pydantic models for learner progress including:
- Series identifiers and their fixed order
- Derived lesson status (never persisted)
- Self-reported understanding levels
- The durable progress record
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SeriesId(str, Enum):
    OT = "OT"
    U = "U"
    L = "L"
    C = "C"


# Strict progression order: OT → U → L → C
SERIES_ORDER: tuple[SeriesId, ...] = (SeriesId.OT, SeriesId.U, SeriesId.L, SeriesId.C)


def series_value(series_id: "SeriesId | str") -> str:
    """Plain string form of a series id, whether given as enum or str."""
    return series_id.value if isinstance(series_id, SeriesId) else str(series_id)


class LessonStatus(str, Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    AVAILABLE = "available"
    LOCKED = "locked"


class Understanding(str, Enum):
    """
    Self-assessed comprehension, used to personalize homework.

    - understood: can recall without explanation
    - partial: would understand if reviewed again
    - not_yet: needs more practice
    """
    UNDERSTOOD = "understood"
    PARTIAL = "partial"
    NOT_YET = "not_yet"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Progress(BaseModel):
    """
    One learner's curriculum position, stored as a single JSON blob.

    Serialized with camelCase keys (currentSeriesId, completedLessonIds, ...).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_series_id: SeriesId = SeriesId.OT
    completed_lesson_ids: list[str] = []   # e.g. ["OT-1", "OT-2", "U-1"]
    current_lesson_id: Optional[str] = None
    current_paragraph_index: int = Field(0, ge=0)
    last_updated: datetime = Field(default_factory=_utcnow)  # advisory only

    @field_validator("completed_lesson_ids")
    @classmethod
    def dedupe_completed(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
