"""
GenerationCache - Local cache for AI-generated tutor content.

Reduces generation calls by caching explain/summary/homework/
understanding_question/render_block results. The whole cache is one JSON blob
in a key-value store: {"version": 1, "items": {key: {"text", "createdAt"}}}.
Entries live for 7 days and at most 200 are kept, oldest evicted first.
"""

import json
import logging
import time
from typing import Callable, Optional

from mindtutor.classroom.storage import KeyValueStore, StorageError, StorageFullError
from mindtutor.schemas import GenerateType, Understanding, series_value


logger = logging.getLogger(__name__)

CACHE_KEY = "tutor_cache_v1"
CACHE_VERSION = 1
TTL_MS = 7 * 24 * 60 * 60 * 1000  # 7 days
MAX_ITEMS = 200


def _now_ms() -> int:
    return int(time.time() * 1000)


# -----------------------------------------------------------------------------
# Cache key builders
# -----------------------------------------------------------------------------

def _key(gen_type: GenerateType, series_id: str, lesson_id: str, paragraph_index: int) -> str:
    return f"{gen_type.value}:{series_value(series_id)}:{lesson_id}:{paragraph_index}"


def make_explain_cache_key(series_id: str, lesson_id: str, paragraph_index: int) -> str:
    return _key(GenerateType.EXPLAIN, series_id, lesson_id, paragraph_index)


def make_summary_cache_key(series_id: str, lesson_id: str, paragraph_index: int) -> str:
    return _key(GenerateType.SUMMARY, series_id, lesson_id, paragraph_index)


def make_understanding_question_cache_key(series_id: str, lesson_id: str, paragraph_index: int) -> str:
    return _key(GenerateType.UNDERSTANDING_QUESTION, series_id, lesson_id, paragraph_index)


def make_render_block_cache_key(series_id: str, lesson_id: str, paragraph_index: int) -> str:
    return _key(GenerateType.RENDER_BLOCK, series_id, lesson_id, paragraph_index)


def make_homework_cache_key(
    series_id: str,
    lesson_id: str,
    paragraph_index: int,
    understanding: Understanding | str,
) -> str:
    """
    Create homework cache key.

    Homework differs per understanding level, so the level is part of the key.

    Raises:
        ValueError: If understanding is missing or not a known level
    """
    if not understanding:
        raise ValueError("understanding is required for homework cache key")
    level = Understanding(understanding)
    return f"{_key(GenerateType.HOMEWORK, series_id, lesson_id, paragraph_index)}:{level.value}"


def is_legacy_homework_key(key: str) -> bool:
    """Homework keys written before understanding levels existed lack the level suffix."""
    if not key.startswith(f"{GenerateType.HOMEWORK.value}:"):
        return False
    last = key.rsplit(":", 1)[-1]
    return last not in {level.value for level in Understanding}


# -----------------------------------------------------------------------------
# Cache
# -----------------------------------------------------------------------------

class GenerationCache:
    """
    TTL'd, capacity-bounded cache of generated text.

    Storage failures never reach the caller: generation keeps working, just
    uncached.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = TTL_MS,
        max_items: int = MAX_ITEMS,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Initialize cache.

        Args:
            store: Key-value backend holding the cache blob
            ttl_ms: Entry lifetime in milliseconds
            max_items: Capacity bound
            clock: Epoch time source in milliseconds
        """
        self.store = store
        self.ttl_ms = ttl_ms
        self.max_items = max_items
        self.clock = clock

    def _empty(self) -> dict:
        return {"version": CACHE_VERSION, "items": {}}

    def _load(self) -> dict:
        try:
            raw = self.store.get(CACHE_KEY)
        except StorageError as e:
            logger.warning(f"Failed to read cache: {e}")
            return self._empty()
        if not raw:
            return self._empty()

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Failed to parse cache, starting empty: {e}")
            return self._empty()

        if not isinstance(data, dict) or data.get("version") != CACHE_VERSION:
            return self._empty()
        if not isinstance(data.get("items"), dict):
            return self._empty()
        return data

    def _save(self, data: dict):
        try:
            self.store.set(CACHE_KEY, json.dumps(data, ensure_ascii=False))
        except StorageFullError as e:
            logger.warning(f"Cache storage full, pruning and retrying: {e}")
            self._prune_oldest(data, self.max_items // 2)
            try:
                self.store.set(CACHE_KEY, json.dumps(data, ensure_ascii=False))
            except StorageError as retry_error:
                logger.warning(f"Giving up on cache write: {retry_error}")
        except StorageError as e:
            logger.warning(f"Failed to save cache: {e}")

    def _is_expired(self, item: dict, now: int) -> bool:
        return now - item.get("createdAt", 0) > self.ttl_ms

    def _prune_expired(self, data: dict):
        now = self.clock()
        data["items"] = {
            key: item for key, item in data["items"].items()
            if not self._is_expired(item, now)
        }

    def _prune_oldest(self, data: dict, max_to_keep: int):
        items = data["items"]
        if len(items) <= max_to_keep:
            return
        # Stable ascending sort: on equal createdAt, later insertions survive
        oldest_first = sorted(items.items(), key=lambda kv: kv[1].get("createdAt", 0))
        data["items"] = dict(oldest_first[-max_to_keep:]) if max_to_keep > 0 else {}

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """
        Get cached text for a key.

        Returns None if not found, expired, or a legacy homework key (which is
        deleted so it can never be reused across understanding levels).
        """
        data = self._load()
        item = data["items"].get(key)

        if is_legacy_homework_key(key):
            if item is not None:
                del data["items"][key]
                self._save(data)
                logger.info(f"Deleted legacy homework key: {key}")
            return None

        if item is None:
            logger.debug(f"Miss: {key}")
            return None

        if self._is_expired(item, self.clock()):
            del data["items"][key]
            self._save(data)
            logger.debug(f"Expired: {key}")
            return None

        logger.debug(f"Hit: {key}")
        return item.get("text")

    def set(self, key: str, text: str):
        """Cache text, pruning expired entries and the oldest beyond capacity."""
        data = self._load()
        self._prune_expired(data)

        data["items"][key] = {"text": text, "createdAt": self.clock()}
        if len(data["items"]) > self.max_items:
            self._prune_oldest(data, self.max_items)

        self._save(data)
        logger.debug(f"Set: {key} ({len(data['items'])} items)")

    def delete(self, key: str):
        data = self._load()
        if data["items"].pop(key, None) is not None:
            self._save(data)

    def delete_legacy_homework_keys(self, series_id: str, lesson_id: str):
        """Remove homework entries for a lesson that predate understanding levels."""
        prefix = f"{GenerateType.HOMEWORK.value}:{series_value(series_id)}:{lesson_id}"
        data = self._load()
        legacy = [
            key for key in data["items"]
            if (key == prefix or key.startswith(prefix + ":")) and is_legacy_homework_key(key)
        ]
        if not legacy:
            return
        for key in legacy:
            del data["items"][key]
        self._save(data)
        logger.info(f"Deleted legacy homework keys: {', '.join(legacy)}")

    def keys(self) -> list[str]:
        """Keys currently stored (expired entries included until pruned)."""
        return list(self._load()["items"].keys())

    def __len__(self) -> int:
        return len(self._load()["items"])

    def clear(self):
        """Clear all cached generations."""
        try:
            self.store.delete(CACHE_KEY)
            logger.info("Cache cleared")
        except StorageError as e:
            logger.warning(f"Failed to clear cache: {e}")

    def stats(self) -> dict:
        """Get cache statistics (ages in milliseconds)."""
        items = list(self._load()["items"].values())
        if not items:
            return {"item_count": 0, "oldest_age": 0, "newest_age": 0}
        now = self.clock()
        ages = [now - item.get("createdAt", 0) for item in items]
        return {
            "item_count": len(items),
            "oldest_age": max(ages),
            "newest_age": min(ages),
        }
