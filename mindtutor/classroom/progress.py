"""
ProgressStore - Persist learner progress as a single JSON record.

Stores the learner's curriculum position in a key-value store:
- Current series, lesson and paragraph
- Completed lesson IDs
- The ephemeral tutor session pointer (wiped together with progress)
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from mindtutor.schemas import Progress, SeriesId

from .storage import KeyValueStore, StorageError


logger = logging.getLogger(__name__)

PROGRESS_KEY = "tutor_progress_v1"
SESSION_KEY = "tutor_session_id"

_SERIES_VALUES = {series.value for series in SeriesId}


def infer_series_from_lesson_id(lesson_id: Optional[str]) -> SeriesId:
    """Infer the series from a lesson ID prefix ("U-3" -> U). Defaults to OT."""
    if not lesson_id or not isinstance(lesson_id, str):
        return SeriesId.OT
    prefix = lesson_id.split("-")[0].upper()
    if prefix in _SERIES_VALUES:
        return SeriesId(prefix)
    return SeriesId.OT


class ProgressStore:
    """
    Load and save one learner's Progress record.

    The store object is created by the application entry point and passed to
    whatever needs it; nothing here is module-level state.
    """

    def __init__(self, store: KeyValueStore):
        """
        Initialize progress store.

        Args:
            store: Key-value backend (SqliteStore for durable use, MemoryStore in tests)
        """
        self.store = store

    # -------------------------------------------------------------------------
    # Load / Save
    # -------------------------------------------------------------------------

    def load(self) -> Progress:
        """
        Load progress, creating and persisting defaults when none exists.

        Unreadable records fall back to defaults. Records from the old schema
        (no currentSeriesId) are migrated in place.
        """
        try:
            raw = self.store.get(PROGRESS_KEY)
        except StorageError as e:
            logger.warning(f"Failed to read progress, using defaults: {e}")
            return Progress()

        if raw is None:
            return self.save(Progress())

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
        except ValueError as e:
            logger.warning(f"Stored progress is malformed, resetting to defaults: {e}")
            return self.save(Progress())

        migrated = False
        stored_series = data.get("currentSeriesId")
        if not isinstance(stored_series, str) or stored_series not in _SERIES_VALUES:
            inferred = infer_series_from_lesson_id(data.get("currentLessonId"))
            data["currentSeriesId"] = inferred.value
            migrated = True

        try:
            progress = Progress.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Stored progress failed validation, resetting to defaults: {e}")
            return self.save(Progress())

        if migrated:
            logger.info(f"Migrated progress: added currentSeriesId = {progress.current_series_id.value}")
            progress = self.save(progress)

        return progress

    def save(self, progress: Progress) -> Progress:
        """Persist the full record, stamping lastUpdated. Returns the stamped copy."""
        updated = progress.model_copy(update={"last_updated": datetime.now(timezone.utc)})
        try:
            self.store.set(PROGRESS_KEY, updated.to_json())
            logger.debug(f"Progress saved: {updated.to_json()}")
        except StorageError as e:
            logger.error(f"Failed to save progress: {e}")
        return updated

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def mark_completed(self, lesson_id: str) -> Progress:
        """Add a lesson to the completed set (idempotent)."""
        progress = self.load()
        if lesson_id not in progress.completed_lesson_ids:
            progress = progress.model_copy(
                update={"completed_lesson_ids": [*progress.completed_lesson_ids, lesson_id]}
            )
        return self.save(progress)

    def update_position(self, lesson_id: str, paragraph_index: int) -> Progress:
        """Set the current lesson and paragraph; the series follows the lesson ID prefix."""
        if paragraph_index < 0:
            raise ValueError(f"paragraph_index must be >= 0, got {paragraph_index}")
        progress = self.load().model_copy(update={
            "current_lesson_id": lesson_id,
            "current_paragraph_index": paragraph_index,
            "current_series_id": infer_series_from_lesson_id(lesson_id),
        })
        return self.save(progress)

    def reset(self):
        """Wipe progress and the session pointer entirely."""
        try:
            self.store.delete(PROGRESS_KEY)
            self.store.delete(SESSION_KEY)
            logger.info("Progress and session reset")
        except StorageError as e:
            logger.error(f"Failed to reset progress: {e}")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_lesson_completed(self, lesson_id: str) -> bool:
        """Check if a lesson is completed."""
        return lesson_id in self.load().completed_lesson_ids

    # -------------------------------------------------------------------------
    # Session pointer
    # -------------------------------------------------------------------------

    def get_session_id(self) -> Optional[str]:
        """Get the opaque tutor session ID, if any."""
        try:
            return self.store.get(SESSION_KEY)
        except StorageError as e:
            logger.warning(f"Failed to read session id: {e}")
            return None

    def set_session_id(self, session_id: str):
        """Remember the opaque tutor session ID."""
        try:
            self.store.set(SESSION_KEY, session_id)
        except StorageError as e:
            logger.error(f"Failed to save session id: {e}")
