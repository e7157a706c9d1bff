"""
Series policy - sequential progression enforcement (OT → U → L → C).

Pure functions over a Progress record and the fixed series order. A series
opens only when every series before it has at least one completed lesson.
"""

import logging
from typing import Optional

from mindtutor.schemas import SERIES_ORDER, Progress, Series, SeriesId

from .progress import ProgressStore


logger = logging.getLogger(__name__)


def get_series_index(series_id: SeriesId) -> int:
    """Position of a series in the progression order."""
    return SERIES_ORDER.index(SeriesId(series_id))


def has_completed_lesson_in_series(series_id: SeriesId, completed_lesson_ids: list[str]) -> bool:
    """Check if any completed lesson belongs to the series ("OT-" prefix match)."""
    prefix = f"{SeriesId(series_id).value}-"
    return any(lesson_id.startswith(prefix) for lesson_id in completed_lesson_ids)


def is_series_reachable(series_id: SeriesId, progress: Progress) -> bool:
    """
    Check if a series may be entered.

    The first series is always reachable. Any later series requires ALL
    previous series to have at least one completed lesson, not just the
    immediately preceding one.
    """
    target_index = get_series_index(series_id)
    for previous in SERIES_ORDER[:target_index]:
        if not has_completed_lesson_in_series(previous, progress.completed_lesson_ids):
            return False
    return True


def is_lesson_reachable(
    series_id: SeriesId,
    lesson_id: str,
    lesson_index: int,
    progress: Progress,
) -> bool:
    """
    Check if a specific lesson may be opened.

    Requires the series to be reachable, and then any of: the lesson is
    completed, it is the current lesson, it is the first lesson of the series,
    or the lesson right before it is completed.
    """
    if not is_series_reachable(series_id, progress):
        return False
    if lesson_id in progress.completed_lesson_ids:
        return True
    if progress.current_lesson_id == lesson_id:
        return True
    if lesson_index == 0:
        return True
    # Ordinals are 1-based: index 2 (e.g. "OT-3") needs "OT-2"
    previous_id = f"{SeriesId(series_id).value}-{lesson_index}"
    return previous_id in progress.completed_lesson_ids


def get_first_reachable_series(progress: Progress) -> SeriesId:
    """First reachable series that has no completed lesson yet (OT as fallback)."""
    for series_id in SERIES_ORDER:
        if not is_series_reachable(series_id, progress):
            break
        if not has_completed_lesson_in_series(series_id, progress.completed_lesson_ids):
            return series_id
    return SeriesId.OT


def sanitize_progress(progress: Progress) -> Progress:
    """
    Ensure the current series is reachable.

    Returns the same object when it is valid, otherwise a corrected copy
    pointing at the first reachable series with cleared lesson/paragraph.
    """
    if is_series_reachable(progress.current_series_id, progress):
        return progress

    valid_series = get_first_reachable_series(progress)
    logger.warning(
        f"Invalid progress: series {progress.current_series_id.value} is not reachable, "
        f"resetting to {valid_series.value}"
    )
    return progress.model_copy(update={
        "current_series_id": valid_series,
        "current_lesson_id": None,
        "current_paragraph_index": 0,
    })


def load_sanitized_progress(progress_store: ProgressStore) -> Progress:
    """
    Load and sanitize progress, persisting only if sanitizing changed it.

    Use this instead of ProgressStore.load() for safe access.
    """
    progress = progress_store.load()
    sanitized = sanitize_progress(progress)
    if sanitized is not progress:
        sanitized = progress_store.save(sanitized)
    return sanitized


def get_next_series_id(series_id: SeriesId) -> Optional[SeriesId]:
    """Next series in order, or None after the last one."""
    index = get_series_index(series_id)
    if index + 1 >= len(SERIES_ORDER):
        return None
    return SERIES_ORDER[index + 1]


def is_series_completed(series: Series, completed_lesson_ids: list[str]) -> bool:
    """Check if every lesson of a (non-empty) series is completed."""
    if not series.lessons:
        return False
    completed = set(completed_lesson_ids)
    return all(lesson.lesson_id in completed for lesson in series.lessons)
