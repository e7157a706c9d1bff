"""
mindtutor Classroom - Runtime components for tracking and navigating lessons.

This module provides:
- KeyValueStore backends: MemoryStore, SqliteStore
- ProgressStore: Persist learner progress
- Series policy: Sequential unlock rules and sanitizing
- CatalogLoader: Fetch series content from the backend
- Navigator: Lesson status and sequencing
"""

from .storage import (
    KeyValueStore,
    MemoryStore,
    SqliteStore,
    StorageError,
    StorageFullError,
    DEFAULT_DATA_DIR,
    DEFAULT_DB_PATH,
)

from .progress import (
    ProgressStore,
    PROGRESS_KEY,
    SESSION_KEY,
    infer_series_from_lesson_id,
)

from .policy import (
    get_series_index,
    has_completed_lesson_in_series,
    is_series_reachable,
    is_lesson_reachable,
    get_first_reachable_series,
    sanitize_progress,
    load_sanitized_progress,
    get_next_series_id,
    is_series_completed,
)

from .loader import (
    CatalogLoader,
    CatalogFetchError,
    normalize_series_id,
    extract_series,
    find_lesson_by_id,
    find_lesson_index,
    find_next_lesson_id,
)

from .navigator import (
    Navigator,
    NavigationLesson,
    NavigationSeries,
    ResumePoint,
    NextStep,
    calculate_lesson_status,
)

__all__ = [
    # Storage
    "KeyValueStore",
    "MemoryStore",
    "SqliteStore",
    "StorageError",
    "StorageFullError",
    "DEFAULT_DATA_DIR",
    "DEFAULT_DB_PATH",
    # Progress
    "ProgressStore",
    "PROGRESS_KEY",
    "SESSION_KEY",
    "infer_series_from_lesson_id",
    # Policy
    "get_series_index",
    "has_completed_lesson_in_series",
    "is_series_reachable",
    "is_lesson_reachable",
    "get_first_reachable_series",
    "sanitize_progress",
    "load_sanitized_progress",
    "get_next_series_id",
    "is_series_completed",
    # Loader
    "CatalogLoader",
    "CatalogFetchError",
    "normalize_series_id",
    "extract_series",
    "find_lesson_by_id",
    "find_lesson_index",
    "find_next_lesson_id",
    # Navigator
    "Navigator",
    "NavigationLesson",
    "NavigationSeries",
    "ResumePoint",
    "NextStep",
    "calculate_lesson_status",
]
