"""
Navigator - Lesson status, sequencing, and series transitions.

Provides:
- Per-lesson display status (completed/current/available/locked)
- Series views with status indicators
- Resume / open / advance / complete actions backed by the progress store
- Series transitions when a series runs out of lessons
"""

import logging
from dataclasses import dataclass
from typing import Optional

from mindtutor.schemas import (
    SERIES_INFO,
    SERIES_ORDER,
    Lesson,
    LessonStatus,
    Progress,
    Series,
    SeriesId,
)

from .loader import CatalogLoader, find_lesson_by_id, find_lesson_index, find_next_lesson_id
from .policy import (
    get_next_series_id,
    has_completed_lesson_in_series,
    is_series_completed,
    is_series_reachable,
    load_sanitized_progress,
)
from .progress import ProgressStore, infer_series_from_lesson_id


logger = logging.getLogger(__name__)


def parse_lesson_ordinal(lesson_id: str) -> Optional[int]:
    """Parse the 1-based ordinal from a lesson ID ("OT-2" -> 2)."""
    _, sep, ordinal = lesson_id.rpartition("-")
    if sep and ordinal.isdigit():
        return int(ordinal)
    return None


def calculate_lesson_status(
    lesson_id: str,
    lesson_index: int,
    series_id: SeriesId,
    current_series_id: SeriesId,
    current_lesson_id: Optional[str],
    completed_lesson_ids: list[str],
    *,
    current_index: Optional[int] = None,
    series_available: Optional[bool] = None,
) -> LessonStatus:
    """
    Derive the display status of one lesson.

    Rules, in priority order:
    1. Completed lessons are completed.
    2. In another series only the first lesson can be available, and only if
       that series is marked available or already has a completed lesson.
    3. The current lesson is current.
    4. Without a current lesson in this series, only the first lesson is available.
    5. Otherwise every lesson up to and including the one right after the
       current lesson is available; the rest are locked.

    Args:
        current_index: Position of the current lesson in this series. Parsed
            from the current lesson ID ordinal when not given.
        series_available: Overrides SERIES_INFO[series_id].available
    """
    if lesson_id in completed_lesson_ids:
        return LessonStatus.COMPLETED

    series_id = SeriesId(series_id)
    if series_id != SeriesId(current_series_id):
        if lesson_index == 0:
            available = SERIES_INFO[series_id].available if series_available is None else series_available
            if available or has_completed_lesson_in_series(series_id, completed_lesson_ids):
                return LessonStatus.AVAILABLE
        return LessonStatus.LOCKED

    if lesson_id == current_lesson_id:
        return LessonStatus.CURRENT

    first_only = LessonStatus.AVAILABLE if lesson_index == 0 else LessonStatus.LOCKED
    if not current_lesson_id or not current_lesson_id.startswith(f"{series_id.value}-"):
        return first_only

    if current_index is None:
        ordinal = parse_lesson_ordinal(current_lesson_id)
        if not ordinal:
            return first_only
        current_index = ordinal - 1

    # Linear pacing: passed lessons stay revisitable, only one step ahead opens
    if lesson_index <= current_index + 1:
        return LessonStatus.AVAILABLE
    return LessonStatus.LOCKED


STATUS_INDICATORS = {
    LessonStatus.COMPLETED: "✓",
    LessonStatus.CURRENT: "→",
    LessonStatus.AVAILABLE: "○",
    LessonStatus.LOCKED: "◌",
}


@dataclass
class NavigationLesson:
    """Lesson with navigation metadata."""
    lesson: Lesson
    index: int
    status: LessonStatus
    is_current: bool


@dataclass
class NavigationSeries:
    """Series with lessons and navigation metadata."""
    series: Series
    lessons: list[NavigationLesson]
    reachable: bool
    completed_count: int
    total_count: int


@dataclass
class ResumePoint:
    """Where the learner should continue reading."""
    series: Series
    lesson: Lesson
    paragraph_index: int


@dataclass
class NextStep:
    """What follows a completed lesson."""
    next_lesson_id: Optional[str]
    next_series_id: Optional[SeriesId]
    series_completed: bool


class Navigator:
    """
    Navigate through the curriculum with sequential-unlock checking.

    Combines CatalogLoader (content) with ProgressStore (learner state).
    """

    def __init__(self, catalog: CatalogLoader, progress: ProgressStore, unlock_all: bool = False):
        """
        Initialize navigator.

        Args:
            catalog: CatalogLoader for series content
            progress: ProgressStore for learner progress
            unlock_all: Development flag that bypasses series/lesson locking
        """
        self.catalog = catalog
        self.progress = progress
        self.unlock_all = unlock_all

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def _status_for(self, series: Series, index: int, progress: Progress) -> LessonStatus:
        current_index = None
        if progress.current_lesson_id:
            found = find_lesson_index(series, progress.current_lesson_id)
            current_index = found if found >= 0 else None
        lesson = series.lessons[index]
        status = calculate_lesson_status(
            lesson.lesson_id,
            index,
            series.series_id,
            progress.current_series_id,
            progress.current_lesson_id,
            progress.completed_lesson_ids,
            current_index=current_index,
        )
        if status == LessonStatus.LOCKED and self.unlock_all:
            return LessonStatus.AVAILABLE
        return status

    def get_series_view(self, series_id: str | SeriesId) -> NavigationSeries:
        """
        Get a series with every lesson annotated with its status.

        Raises:
            CatalogFetchError: If the series cannot be fetched
        """
        progress = load_sanitized_progress(self.progress)
        series = self.catalog.get_series(series_id)

        lessons = []
        completed_count = 0
        for index, lesson in enumerate(series.lessons):
            status = self._status_for(series, index, progress)
            if status == LessonStatus.COMPLETED:
                completed_count += 1
            lessons.append(NavigationLesson(
                lesson=lesson,
                index=index,
                status=status,
                is_current=lesson.lesson_id == progress.current_lesson_id,
            ))

        return NavigationSeries(
            series=series,
            lessons=lessons,
            reachable=self.unlock_all or is_series_reachable(series.series_id, progress),
            completed_count=completed_count,
            total_count=len(series.lessons),
        )

    @staticmethod
    def get_status_indicator(status: LessonStatus) -> str:
        """
        Get status indicator for list display.

        Returns:
            ✓ for completed
            → for current
            ○ for available
            ◌ for locked
        """
        return STATUS_INDICATORS[status]

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def resume(self) -> ResumePoint:
        """
        Find where the learner left off.

        Falls back to the first lesson of the current series when the saved
        lesson is missing or belongs to another series.
        """
        progress = load_sanitized_progress(self.progress)
        series = self.catalog.get_series(progress.current_series_id)

        lesson = None
        paragraph_index = 0
        current_id = progress.current_lesson_id
        if current_id and current_id.startswith(f"{series.series_id.value}-"):
            lesson = find_lesson_by_id(series, current_id)
            if lesson:
                paragraph_index = min(progress.current_paragraph_index, lesson.last_paragraph_index)
        if lesson is None:
            lesson = series.lessons[0]

        return ResumePoint(series=series, lesson=lesson, paragraph_index=paragraph_index)

    def open_lesson(self, series_id: str | SeriesId, lesson_id: str) -> Optional[Lesson]:
        """
        Open a lesson if it is not locked.

        Returns the lesson, or None if it is unknown or locked.
        """
        view = self.get_series_view(series_id)
        for nav in view.lessons:
            if nav.lesson.lesson_id != lesson_id:
                continue
            if nav.status == LessonStatus.LOCKED:
                logger.info(f"Lesson {lesson_id} is locked")
                return None
            self.progress.update_position(lesson_id, 0)
            return nav.lesson
        logger.warning(f"Lesson {lesson_id} not found in series {view.series.series_id.value}")
        return None

    def advance(self, lesson_id: str, paragraph_index: int) -> Progress:
        """Record the paragraph the learner has reached."""
        return self.progress.update_position(lesson_id, paragraph_index)

    def complete_lesson(self, lesson_id: str) -> NextStep:
        """
        Complete a lesson and work out what comes next.

        Returns the next lesson in the same series, or, when the series has
        no more lessons, the next series to move on to (None after the last).
        """
        progress = self.progress.mark_completed(lesson_id)
        series = self.catalog.get_series(infer_series_from_lesson_id(lesson_id))

        next_lesson_id = find_next_lesson_id(series, lesson_id)
        if next_lesson_id is not None:
            return NextStep(next_lesson_id=next_lesson_id, next_series_id=None, series_completed=False)

        return NextStep(
            next_lesson_id=None,
            next_series_id=get_next_series_id(series.series_id),
            series_completed=is_series_completed(series, progress.completed_lesson_ids),
        )

    def start_series(self, series_id: str | SeriesId) -> Optional[Lesson]:
        """
        Move to the first lesson of a series if it is reachable.

        Returns the first lesson, or None if the series is still locked.
        """
        series = self.catalog.get_series(series_id)
        progress = load_sanitized_progress(self.progress)
        if not self.unlock_all and not is_series_reachable(series.series_id, progress):
            logger.info(f"Series {series.series_id.value} is not reachable yet")
            return None

        first = series.lessons[0]
        self.progress.update_position(first.lesson_id, 0)
        return first

    # -------------------------------------------------------------------------
    # Progress Summary
    # -------------------------------------------------------------------------

    def get_progress_summary(self) -> dict:
        """Get progress summary for display (no network access)."""
        progress = load_sanitized_progress(self.progress)
        series_stats = []
        for series_id in SERIES_ORDER:
            prefix = f"{series_id.value}-"
            series_stats.append({
                "id": series_id.value,
                "title": SERIES_INFO[series_id].title,
                "completed": sum(1 for lid in progress.completed_lesson_ids if lid.startswith(prefix)),
                "reachable": is_series_reachable(series_id, progress),
            })

        return {
            "current_series_id": progress.current_series_id.value,
            "current_lesson_id": progress.current_lesson_id,
            "current_paragraph_index": progress.current_paragraph_index,
            "completed": len(progress.completed_lesson_ids),
            "series": series_stats,
            "last_updated": progress.last_updated.isoformat(),
        }
