"""Tests for sequential series unlocking and progress sanitizing."""

from mindtutor.classroom import (
    MemoryStore,
    ProgressStore,
    get_first_reachable_series,
    get_next_series_id,
    get_series_index,
    has_completed_lesson_in_series,
    is_lesson_reachable,
    is_series_completed,
    is_series_reachable,
    load_sanitized_progress,
    sanitize_progress,
)
from mindtutor.schemas import Progress, SeriesId


class CountingStore(MemoryStore):
    """MemoryStore that counts writes."""

    def __init__(self):
        super().__init__()
        self.set_count = 0

    def set(self, key, value):
        self.set_count += 1
        super().set(key, value)


class TestSeriesReachability:

    def test_series_index(self):
        assert [get_series_index(s) for s in ("OT", "U", "L", "C")] == [0, 1, 2, 3]

    def test_completed_prefix_match(self):
        assert has_completed_lesson_in_series(SeriesId.U, ["OT-1", "U-3"])
        assert not has_completed_lesson_in_series(SeriesId.OT, ["U-1", "L-1"])

    def test_first_series_always_reachable(self):
        assert is_series_reachable(SeriesId.OT, Progress())

    def test_next_series_needs_completion(self):
        assert not is_series_reachable(SeriesId.U, Progress())
        assert is_series_reachable(SeriesId.U, Progress(completed_lesson_ids=["OT-1"]))

    def test_all_prior_series_required(self):
        # U done but OT skipped: L stays locked
        progress = Progress(completed_lesson_ids=["U-1", "U-2"])
        assert not is_series_reachable(SeriesId.U, progress)
        assert not is_series_reachable(SeriesId.L, progress)

    def test_last_series(self):
        assert not is_series_reachable(SeriesId.C, Progress(completed_lesson_ids=["OT-1", "U-1"]))
        assert is_series_reachable(SeriesId.C, Progress(completed_lesson_ids=["OT-1", "U-1", "L-1"]))

    def test_next_series_id(self):
        assert get_next_series_id(SeriesId.OT) == SeriesId.U
        assert get_next_series_id(SeriesId.L) == SeriesId.C
        assert get_next_series_id(SeriesId.C) is None


class TestLessonReachability:

    def test_first_lesson_of_reachable_series(self):
        assert is_lesson_reachable(SeriesId.OT, "OT-1", 0, Progress())

    def test_locked_series_blocks_first_lesson(self):
        assert not is_lesson_reachable(SeriesId.U, "U-1", 0, Progress())

    def test_previous_lesson_must_be_completed(self):
        assert not is_lesson_reachable(SeriesId.OT, "OT-3", 2, Progress(completed_lesson_ids=["OT-1"]))
        assert is_lesson_reachable(SeriesId.OT, "OT-3", 2, Progress(completed_lesson_ids=["OT-2"]))

    def test_current_and_completed_lessons(self):
        progress = Progress(completed_lesson_ids=["OT-2"], current_lesson_id="OT-4")
        assert is_lesson_reachable(SeriesId.OT, "OT-4", 3, progress)
        assert is_lesson_reachable(SeriesId.OT, "OT-2", 1, progress)


class TestSeriesCompletion:

    def test_all_lessons_completed(self, make_series):
        series = make_series("OT", count=2)
        assert is_series_completed(series, ["OT-1", "OT-2", "U-1"])
        assert not is_series_completed(series, ["OT-1"])


class TestSanitize:

    def test_first_reachable_series(self):
        assert get_first_reachable_series(Progress()) == SeriesId.OT
        assert get_first_reachable_series(Progress(completed_lesson_ids=["OT-1"])) == SeriesId.U
        assert get_first_reachable_series(Progress(completed_lesson_ids=["OT-1", "U-1"])) == SeriesId.L

    def test_first_reachable_series_falls_back_to_ot(self):
        progress = Progress(completed_lesson_ids=["OT-1", "U-1", "L-1", "C-1"])
        assert get_first_reachable_series(progress) == SeriesId.OT

    def test_valid_progress_returned_unchanged(self):
        progress = Progress(current_series_id=SeriesId.U, completed_lesson_ids=["OT-1"], current_lesson_id="U-1")
        assert sanitize_progress(progress) is progress

    def test_unreachable_series_reset_to_ot(self):
        progress = Progress(current_series_id=SeriesId.L, current_lesson_id="L-2", current_paragraph_index=4)
        sanitized = sanitize_progress(progress)
        assert sanitized.current_series_id == SeriesId.OT
        assert sanitized.current_lesson_id is None
        assert sanitized.current_paragraph_index == 0
        assert progress.current_series_id == SeriesId.L

    def test_unreachable_series_moves_to_first_without_progress(self):
        progress = Progress(current_series_id=SeriesId.C, completed_lesson_ids=["OT-1"], current_lesson_id="C-1")
        assert sanitize_progress(progress).current_series_id == SeriesId.U

    def test_load_sanitized_persists_only_when_changed(self):
        store = CountingStore()
        progress_store = ProgressStore(store)
        progress_store.save(Progress(current_series_id=SeriesId.L, current_lesson_id="L-1"))
        writes = store.set_count

        progress = load_sanitized_progress(progress_store)
        assert progress.current_series_id == SeriesId.OT
        assert store.set_count == writes + 1
        assert progress_store.load().current_series_id == SeriesId.OT

        writes = store.set_count
        load_sanitized_progress(progress_store)
        assert store.set_count == writes
