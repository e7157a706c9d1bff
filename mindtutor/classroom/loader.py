"""
CatalogLoader - Fetch curriculum content (series → lessons → paragraphs) from the backend.

Provides:
- Series ID normalization ("orientation", "ot" -> OT)
- GET /content/series/{id} with a 5-minute in-memory cache
- Shape-tolerant parsing of the loosely structured response
- Positional lookups within a fetched series
"""

import json
import logging
import time
from typing import Any, Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from mindtutor.schemas import (
    PLACEHOLDER_PARAGRAPH,
    SERIES_INFO,
    Lesson,
    Series,
    SeriesId,
)


logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 5 * 60  # seconds
DEFAULT_TIMEOUT = 30

SERIES_ALIASES = {
    "OT": SeriesId.OT,
    "ORIENTATION": SeriesId.OT,
    "U": SeriesId.U,
    "UNDER": SeriesId.U,
    "UNDERSTANDING": SeriesId.U,
    "L": SeriesId.L,
    "LESSON": SeriesId.L,
    "C": SeriesId.C,
    "COMPLETE": SeriesId.C,
    "CHALLENGE": SeriesId.C,
}


class CatalogFetchError(Exception):
    """Series content could not be fetched or contained no lessons."""

    def __init__(self, message: str, tried_urls: list[str]):
        super().__init__(message)
        self.message = message
        self.tried_urls = tried_urls

    def __str__(self) -> str:
        return f"{self.message} (tried: {', '.join(self.tried_urls)})"


def normalize_series_id(value: str | SeriesId) -> SeriesId:
    """Map loosely typed input to a SeriesId. Unknown values fall back to OT."""
    if isinstance(value, SeriesId):
        return value
    key = str(value).strip().upper()
    if key in SERIES_ALIASES:
        return SERIES_ALIASES[key]
    logger.warning(f"Unknown series id {value!r}, falling back to OT")
    return SeriesId.OT


# -----------------------------------------------------------------------------
# Response parsing
# -----------------------------------------------------------------------------

def _match_top_level_list(data: Any) -> Optional[list]:
    return data if isinstance(data, list) else None


def _match_key(key: str) -> Callable[[Any], Optional[list]]:
    def matcher(data: Any) -> Optional[list]:
        if isinstance(data, dict) and isinstance(data.get(key), list):
            return data[key]
        return None
    matcher.__name__ = f"_match_{key}"
    return matcher


# Tried in order; the first matcher returning a list wins
LESSON_LIST_MATCHERS: list[Callable[[Any], Optional[list]]] = [
    _match_top_level_list,
    _match_key("lessons"),
    _match_key("data"),
    _match_key("items"),
]


def find_lesson_list(data: Any) -> Optional[list]:
    """Return the raw lessons list from any supported response shape."""
    for matcher in LESSON_LIST_MATCHERS:
        lessons = matcher(data)
        if lessons is not None:
            return lessons
    return None


def _chunk_text(chunk: Any) -> str:
    if isinstance(chunk, str):
        return chunk
    if isinstance(chunk, dict):
        for key in ("text", "content", "body"):
            if chunk.get(key):
                return str(chunk[key])
    return ""


def extract_paragraphs(raw: dict) -> list[str]:
    """
    Extract paragraph texts from a raw lesson.

    Priority: chunks, content, paragraphs, then body/text split on blank lines.
    Never returns an empty list; the placeholder stands in for missing content.
    """
    paragraphs: list[str] = []

    for key in ("chunks", "content", "paragraphs"):
        items = raw.get(key)
        if isinstance(items, list) and items:
            paragraphs = [_chunk_text(item) for item in items]
            break
    else:
        for key in ("body", "text"):
            if isinstance(raw.get(key), str) and raw[key]:
                paragraphs = raw[key].split("\n\n")
                break

    paragraphs = [p for p in paragraphs if p and p.strip()]
    return paragraphs or [PLACEHOLDER_PARAGRAPH]


def extract_lesson(raw: Any, series_id: SeriesId, index: int) -> Lesson:
    """Build a Lesson from one raw entry; missing fields get positional defaults."""
    if not isinstance(raw, dict):
        raw = {}
    lesson_id = raw.get("id") or raw.get("lesson_id") or f"{series_id.value}-{index + 1}"
    title = raw.get("title") or raw.get("name") or "Untitled Lesson"
    description = raw.get("description")
    return Lesson(
        series_id=series_id,
        lesson_id=str(lesson_id),
        title=str(title),
        description=str(description) if description else None,
        paragraphs=extract_paragraphs(raw),
    )


def extract_series(data: Any, series_id: SeriesId) -> Optional[Series]:
    """
    Parse a series response into the canonical shape.

    Returns None when no lessons list can be found in the response.
    """
    raw_lessons = find_lesson_list(data)
    if not raw_lessons:
        return None

    meta = data if isinstance(data, dict) else {}
    info = SERIES_INFO[series_id]
    lessons = [extract_lesson(raw, series_id, i) for i, raw in enumerate(raw_lessons)]
    return Series(
        series_id=series_id,
        title=str(meta.get("title") or info.title),
        description=str(meta.get("description") or info.description),
        lessons=lessons,
    )


# -----------------------------------------------------------------------------
# Lookups
# -----------------------------------------------------------------------------

def find_lesson_by_id(series: Series, lesson_id: str) -> Optional[Lesson]:
    """Find lesson by ID in series."""
    for lesson in series.lessons:
        if lesson.lesson_id == lesson_id:
            return lesson
    return None


def find_lesson_index(series: Series, lesson_id: str) -> int:
    """Find lesson index by ID in series (-1 if absent)."""
    for index, lesson in enumerate(series.lessons):
        if lesson.lesson_id == lesson_id:
            return index
    return -1


def find_next_lesson_id(series: Series, current_lesson_id: str) -> Optional[str]:
    """
    ID of the lesson after the current one.

    Returns None when the current lesson is the last of the series (the caller
    should consider a series transition). An unknown ID yields the first lesson.
    """
    index = find_lesson_index(series, current_lesson_id)
    if index == -1:
        return series.lessons[0].lesson_id if series.lessons else None
    if index + 1 < len(series.lessons):
        return series.lessons[index + 1].lesson_id
    return None


# -----------------------------------------------------------------------------
# Loader
# -----------------------------------------------------------------------------

class CatalogLoader:
    """
    Fetch series content with an in-memory, time-boxed cache.

    The cache is checked lazily on access; there is no background expiry.
    Failed fetches are not retried here.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        ttl_seconds: float = DEFAULT_CACHE_TTL,
        timeout: float = DEFAULT_TIMEOUT,
        opener: Callable = urlopen,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize loader.

        Args:
            base_url: Backend base URL (e.g. "https://api.example.com")
            token_provider: Returns a bearer token or None
            ttl_seconds: Lifetime of cached series
            timeout: Network timeout passed to the opener
            opener: urlopen-compatible callable
            clock: Monotonic time source in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self.opener = opener
        self.clock = clock
        self._cache: dict[SeriesId, tuple[Series, float]] = {}

    def series_url(self, series_id: SeriesId) -> str:
        return f"{self.base_url}/content/series/{series_id.value}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _get_cached(self, series_id: SeriesId) -> Optional[Series]:
        cached = self._cache.get(series_id)
        if cached is None:
            return None
        series, fetched_at = cached
        if self.clock() - fetched_at < self.ttl_seconds:
            return series
        del self._cache[series_id]
        return None

    def clear_cache(self):
        """Drop all cached series."""
        self._cache.clear()

    def fetch_series_content(self, series_id: SeriesId) -> Any:
        """
        GET the raw series JSON.

        Raises:
            CatalogFetchError: On HTTP, network or JSON decoding failure
        """
        url = self.series_url(series_id)
        req = Request(url, headers=self._headers())
        logger.info(f"Fetching series: {url}")
        try:
            with self.opener(req, timeout=self.timeout) as response:
                body = response.read().decode("utf-8")
            return json.loads(body)
        except HTTPError as e:
            logger.error(f"Series {series_id.value} request failed: {e.code}")
            raise CatalogFetchError(
                f"Series {series_id.value} not found: {e.code}", [url]
            ) from e
        except (URLError, OSError) as e:
            logger.error(f"Series {series_id.value} request failed: {getattr(e, 'reason', e)}")
            raise CatalogFetchError(
                f"Could not load series {series_id.value}; check the backend /content endpoint", [url]
            ) from e
        except ValueError as e:
            logger.error(f"Series {series_id.value} returned invalid JSON: {e}")
            raise CatalogFetchError(
                f"Series {series_id.value} returned an invalid response", [url]
            ) from e

    def get_series(self, series_id: str | SeriesId = SeriesId.OT) -> Series:
        """
        Get a series with all lessons, from cache or the backend.

        Raises:
            CatalogFetchError: If the fetch fails or the response has no lessons
        """
        canonical = normalize_series_id(series_id)

        cached = self._get_cached(canonical)
        if cached is not None:
            logger.debug(f"Using cached series: {canonical.value}")
            return cached

        data = self.fetch_series_content(canonical)
        series = extract_series(data, canonical)
        if series is None:
            raise CatalogFetchError(
                f"Series {canonical.value} response contained no lessons",
                [self.series_url(canonical)],
            )

        self._cache[canonical] = (series, self.clock())
        logger.info(f"Loaded series {canonical.value}: {len(series.lessons)} lessons")
        return series
