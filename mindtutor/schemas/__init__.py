"""
mindtutor Schemas - Pydantic models for the tutor lesson-progression engine.

This module exports all schema classes for:
- Progress: series ids, lesson status, understanding, progress record
- Curriculum: series metadata, series, lessons
- Generation: generation request/response wire models
"""

# Progress schemas
from .progress import (
    SeriesId,
    SERIES_ORDER,
    series_value,
    LessonStatus,
    Understanding,
    Progress,
)

# Curriculum schemas
from .curriculum import (
    SeriesInfo,
    SERIES_INFO,
    PLACEHOLDER_PARAGRAPH,
    Lesson,
    Series,
)

# Generation schemas
from .generation import (
    GenerateType,
    GenerateRequest,
    GenerateResponse,
)

__all__ = [
    # Progress
    'SeriesId',
    'SERIES_ORDER',
    'series_value',
    'LessonStatus',
    'Understanding',
    'Progress',
    # Curriculum
    'SeriesInfo',
    'SERIES_INFO',
    'PLACEHOLDER_PARAGRAPH',
    'Lesson',
    'Series',
    # Generation
    'GenerateType',
    'GenerateRequest',
    'GenerateResponse',
]
