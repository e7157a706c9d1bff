"""
Shared fixtures for mindtutor tests.

FakeOpener stands in for urllib.request.urlopen so no test touches the network.
"""

import json
from typing import Any, Callable, Optional
from urllib.error import HTTPError

import pytest

from mindtutor.classroom import CatalogLoader, MemoryStore, ProgressStore
from mindtutor.schemas import Lesson, Series, SeriesId


BASE_URL = "http://tutor.test"

# Lessons per series in the default catalog
SERIES_SIZES = {"OT": 3, "U": 2, "L": 2, "C": 2}


class FakeResponse:
    def __init__(self, body: bytes):
        self.body = body

    def read(self) -> bytes:
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeOpener:
    """
    urlopen-compatible fake.

    Routes map a URL to a JSON-serializable payload, raw bytes, an exception
    instance to raise, or a function of the request returning any of those.
    Unrouted URLs raise HTTP 404.
    """

    def __init__(self, routes: Optional[dict[str, Any]] = None):
        self.routes = routes or {}
        self.requests = []
        self.timeouts = []

    def __call__(self, req, timeout=None):
        self.requests.append(req)
        self.timeouts.append(timeout)

        url = req.full_url
        if url not in self.routes:
            raise HTTPError(url, 404, "Not Found", None, None)

        result = self.routes[url]
        if callable(result):
            result = result(req)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, bytes):
            return FakeResponse(result)
        return FakeResponse(json.dumps(result).encode("utf-8"))


def series_url(series_id: str) -> str:
    return f"{BASE_URL}/content/series/{series_id}"


def lessons_payload(series_id: str, count: int, paragraphs: int = 2) -> list[dict]:
    return [
        {
            "id": f"{series_id}-{i}",
            "title": f"{series_id} lesson {i}",
            "chunks": [f"{series_id}-{i} paragraph {p}" for p in range(1, paragraphs + 1)],
        }
        for i in range(1, count + 1)
    ]


def catalog_routes(sizes: dict[str, int] = SERIES_SIZES) -> dict[str, Any]:
    return {
        series_url(series_id): {"lessons": lessons_payload(series_id, count)}
        for series_id, count in sizes.items()
    }


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def progress_store(memory_store) -> ProgressStore:
    return ProgressStore(memory_store)


@pytest.fixture
def catalog_opener() -> FakeOpener:
    """Opener serving OT (3 lessons), U, L and C (2 lessons each)."""
    return FakeOpener(catalog_routes())


@pytest.fixture
def catalog(catalog_opener) -> CatalogLoader:
    return CatalogLoader(BASE_URL, opener=catalog_opener)


@pytest.fixture
def make_series() -> Callable[..., Series]:
    """Build a Series model with lessons "{series}-1".."{series}-{count}"."""
    def _make(series_id: str = "OT", count: int = 3, paragraphs: int = 2) -> Series:
        sid = SeriesId(series_id)
        return Series(
            series_id=sid,
            title=f"{series_id} series",
            lessons=[
                Lesson(
                    series_id=sid,
                    lesson_id=f"{series_id}-{i}",
                    title=f"{series_id} lesson {i}",
                    paragraphs=[f"paragraph {p}" for p in range(1, paragraphs + 1)],
                )
                for i in range(1, count + 1)
            ],
        )
    return _make
