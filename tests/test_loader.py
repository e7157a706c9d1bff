"""Tests for catalog fetching and response parsing."""

from urllib.error import URLError

import pytest

from mindtutor.classroom import (
    CatalogFetchError,
    CatalogLoader,
    extract_series,
    find_lesson_by_id,
    find_lesson_index,
    find_next_lesson_id,
    normalize_series_id,
)
from mindtutor.classroom.loader import extract_lesson, extract_paragraphs, find_lesson_list
from mindtutor.schemas import PLACEHOLDER_PARAGRAPH, SERIES_INFO, SeriesId

from conftest import BASE_URL, FakeOpener, catalog_routes, lessons_payload, series_url


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestNormalizeSeriesId:

    def test_aliases(self):
        assert normalize_series_id("ot") == SeriesId.OT
        assert normalize_series_id("Orientation") == SeriesId.OT
        assert normalize_series_id("under") == SeriesId.U
        assert normalize_series_id("UNDERSTANDING") == SeriesId.U
        assert normalize_series_id("lesson") == SeriesId.L
        assert normalize_series_id("complete") == SeriesId.C
        assert normalize_series_id(" challenge ") == SeriesId.C

    def test_enum_passthrough(self):
        assert normalize_series_id(SeriesId.L) == SeriesId.L

    def test_unknown_falls_back_to_ot(self):
        assert normalize_series_id("advanced") == SeriesId.OT


class TestResponseShapes:

    def test_top_level_list(self):
        assert find_lesson_list([{"id": "OT-1"}]) == [{"id": "OT-1"}]

    @pytest.mark.parametrize("key", ["lessons", "data", "items"])
    def test_wrapped_list(self, key):
        assert find_lesson_list({key: [{"id": "OT-1"}]}) == [{"id": "OT-1"}]

    def test_lessons_key_wins(self):
        assert find_lesson_list({"data": [{"id": "b"}], "lessons": [{"id": "a"}]}) == [{"id": "a"}]

    def test_no_list(self):
        assert find_lesson_list({"title": "OT"}) is None
        assert find_lesson_list({"lessons": "OT-1"}) is None
        assert find_lesson_list("nope") is None


class TestParagraphExtraction:

    def test_chunk_strings(self):
        assert extract_paragraphs({"chunks": ["one", "two"]}) == ["one", "two"]

    def test_chunk_objects(self):
        raw = {"chunks": [{"text": "one"}, {"content": "two"}, {"body": "three"}]}
        assert extract_paragraphs(raw) == ["one", "two", "three"]

    def test_content_and_paragraphs_lists(self):
        assert extract_paragraphs({"content": ["a", "b"]}) == ["a", "b"]
        assert extract_paragraphs({"paragraphs": ["c"]}) == ["c"]

    def test_chunks_take_priority(self):
        assert extract_paragraphs({"chunks": ["a"], "paragraphs": ["b"]}) == ["a"]

    def test_body_split_on_blank_lines(self):
        assert extract_paragraphs({"body": "first\n\nsecond\n\n\n\nthird"}) == ["first", "second", "third"]
        assert extract_paragraphs({"text": "only"}) == ["only"]

    def test_blank_paragraphs_dropped(self):
        assert extract_paragraphs({"chunks": ["a", "  ", "", {"text": ""}]}) == ["a"]

    def test_placeholder_when_empty(self):
        assert extract_paragraphs({}) == [PLACEHOLDER_PARAGRAPH]
        assert extract_paragraphs({"chunks": [], "body": ""}) == [PLACEHOLDER_PARAGRAPH]
        assert extract_paragraphs({"chunks": ["   "]}) == [PLACEHOLDER_PARAGRAPH]


class TestLessonExtraction:

    def test_fields(self):
        lesson = extract_lesson(
            {"id": "U-7", "title": "Feelings", "description": "Naming them", "chunks": ["x"]},
            SeriesId.U,
            0,
        )
        assert lesson.lesson_id == "U-7"
        assert lesson.title == "Feelings"
        assert lesson.description == "Naming them"
        assert lesson.series_id == SeriesId.U

    def test_missing_id_synthesized_from_position(self):
        lesson = extract_lesson({"title": "Second"}, SeriesId.U, 1)
        assert lesson.lesson_id == "U-2"
        assert lesson.paragraphs == [PLACEHOLDER_PARAGRAPH]

    def test_non_object_entry(self):
        lesson = extract_lesson("garbage", SeriesId.C, 0)
        assert lesson.lesson_id == "C-1"
        assert lesson.title == "Untitled Lesson"

    def test_series_metadata(self):
        series = extract_series({"title": "Custom", "lessons": lessons_payload("L", 2)}, SeriesId.L)
        assert series.title == "Custom"
        assert [lesson.lesson_id for lesson in series.lessons] == ["L-1", "L-2"]

    def test_series_defaults_from_info(self):
        series = extract_series(lessons_payload("OT", 1), SeriesId.OT)
        assert series.title == SERIES_INFO[SeriesId.OT].title
        assert series.description == SERIES_INFO[SeriesId.OT].description

    def test_series_without_lessons(self):
        assert extract_series({"lessons": []}, SeriesId.OT) is None
        assert extract_series({}, SeriesId.OT) is None


class TestLookups:

    def test_find_lesson(self, make_series):
        series = make_series("OT", count=3)
        assert find_lesson_by_id(series, "OT-2").title == "OT lesson 2"
        assert find_lesson_by_id(series, "OT-9") is None
        assert find_lesson_index(series, "OT-3") == 2
        assert find_lesson_index(series, "OT-9") == -1

    def test_next_lesson(self, make_series):
        series = make_series("OT", count=3)
        assert find_next_lesson_id(series, "OT-1") == "OT-2"
        assert find_next_lesson_id(series, "OT-3") is None
        assert find_next_lesson_id(series, "unknown") == "OT-1"


class TestCatalogLoader:

    def test_get_series(self, catalog, catalog_opener):
        series = catalog.get_series("OT")
        assert series.series_id == SeriesId.OT
        assert [lesson.lesson_id for lesson in series.lessons] == ["OT-1", "OT-2", "OT-3"]
        assert series.lessons[0].paragraphs == ["OT-1 paragraph 1", "OT-1 paragraph 2"]
        assert catalog_opener.requests[0].full_url == series_url("OT")
        assert catalog_opener.timeouts == [30]

    def test_alias_resolves_url(self, catalog, catalog_opener):
        catalog.get_series("understanding")
        assert catalog_opener.requests[0].full_url == series_url("U")

    def test_cached_within_ttl(self):
        opener = FakeOpener(catalog_routes())
        clock = FakeClock()
        loader = CatalogLoader(BASE_URL, opener=opener, clock=clock)

        first = loader.get_series("OT")
        clock.now += 299
        assert loader.get_series("ot") is first
        assert len(opener.requests) == 1

        clock.now += 2
        loader.get_series("OT")
        assert len(opener.requests) == 2

    def test_clear_cache(self, catalog, catalog_opener):
        catalog.get_series("OT")
        catalog.clear_cache()
        catalog.get_series("OT")
        assert len(catalog_opener.requests) == 2

    def test_bearer_token(self):
        opener = FakeOpener(catalog_routes())
        CatalogLoader(BASE_URL, token_provider=lambda: "tok-1", opener=opener).get_series("OT")
        assert opener.requests[0].get_header("Authorization") == "Bearer tok-1"

    def test_no_token_no_header(self, catalog, catalog_opener):
        catalog.get_series("OT")
        assert not catalog_opener.requests[0].has_header("Authorization")


class TestCatalogFailures:

    def test_http_error(self):
        loader = CatalogLoader(BASE_URL, opener=FakeOpener())
        with pytest.raises(CatalogFetchError) as exc_info:
            loader.get_series("U")
        assert exc_info.value.tried_urls == [series_url("U")]
        assert series_url("U") in str(exc_info.value)

    def test_network_error(self):
        loader = CatalogLoader(BASE_URL, opener=FakeOpener({series_url("OT"): URLError("refused")}))
        with pytest.raises(CatalogFetchError):
            loader.get_series("OT")

    def test_invalid_json(self):
        loader = CatalogLoader(BASE_URL, opener=FakeOpener({series_url("OT"): b"<html>oops</html>"}))
        with pytest.raises(CatalogFetchError):
            loader.get_series("OT")

    def test_missing_lessons(self):
        loader = CatalogLoader(BASE_URL, opener=FakeOpener({series_url("OT"): {"title": "OT"}}))
        with pytest.raises(CatalogFetchError) as exc_info:
            loader.get_series("OT")
        assert exc_info.value.tried_urls == [series_url("OT")]

    def test_failures_are_not_cached(self):
        opener = FakeOpener()
        loader = CatalogLoader(BASE_URL, opener=opener)
        with pytest.raises(CatalogFetchError):
            loader.get_series("OT")

        opener.routes.update(catalog_routes())
        assert len(loader.get_series("OT").lessons) == 3
