"""
TutorContentService - Cache-or-generate flow for supplementary lesson content.

Every request follows the same path:
1. Credential check (missing credentials fail fast and are never retried)
2. Cache lookup
3. Retry-wrapped generation call on a miss
4. Write-back to the cache
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Optional

from mindtutor.schemas import Lesson, Understanding

from .cache import (
    GenerationCache,
    make_explain_cache_key,
    make_homework_cache_key,
    make_render_block_cache_key,
    make_summary_cache_key,
    make_understanding_question_cache_key,
)
from .client import GenerationClient
from .retry import with_retry


logger = logging.getLogger(__name__)


@dataclass
class CompletionContent:
    """Content shown when a lesson is being completed."""
    summary: str
    understanding_question: str


class TutorContentService:
    """Serve generated lesson content from cache, generating on a miss."""

    def __init__(
        self,
        cache: GenerationCache,
        client: GenerationClient,
        retry: Callable = with_retry,
    ):
        """
        Initialize service.

        Args:
            cache: GenerationCache for generated text
            client: GenerationClient for the backend
            retry: Retry wrapper with the with_retry(fn, context) signature
        """
        self.cache = cache
        self.client = client
        self.retry = retry

    def _cached_or_generate(self, cache_key: str, generate: Callable[[], str]) -> str:
        self.client.require_token()

        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        text = self.retry(generate, cache_key)
        self.cache.set(cache_key, text)
        return text

    def explain(
        self,
        series_id: str,
        lesson_id: str,
        paragraph_index: int,
        question: Optional[str] = None,
    ) -> str:
        """
        Explain a paragraph.

        Answers to free-text questions are not cached; only the plain
        explanation of a paragraph is.
        """
        if question:
            self.client.require_token()
            return self.retry(
                lambda: self.client.generate_explanation(series_id, lesson_id, paragraph_index, question),
                make_explain_cache_key(series_id, lesson_id, paragraph_index),
            )
        return self._cached_or_generate(
            make_explain_cache_key(series_id, lesson_id, paragraph_index),
            lambda: self.client.generate_explanation(series_id, lesson_id, paragraph_index),
        )

    def render_block(self, series_id: str, lesson_id: str, paragraph_index: int) -> str:
        """Readable rendition of one raw paragraph."""
        return self._cached_or_generate(
            make_render_block_cache_key(series_id, lesson_id, paragraph_index),
            lambda: self.client.generate_render_block(series_id, lesson_id, paragraph_index),
        )

    def completion_content(self, lesson: Lesson) -> CompletionContent:
        """
        Summary and understanding question for a finished lesson.

        Missing pieces are generated concurrently; cache writes happen on the
        calling thread once both are back.
        """
        self.client.require_token()

        series_id, lesson_id = lesson.series_id, lesson.lesson_id
        last_index = lesson.last_paragraph_index

        self.cache.delete_legacy_homework_keys(series_id, lesson_id)

        summary_key = make_summary_cache_key(series_id, lesson_id, last_index)
        question_key = make_understanding_question_cache_key(series_id, lesson_id, last_index)
        results = {
            summary_key: self.cache.get(summary_key),
            question_key: self.cache.get(question_key),
        }

        tasks = {}
        if results[question_key] is None:
            tasks[question_key] = lambda: self.client.generate_understanding_question(
                series_id, lesson_id, last_index
            )
        if results[summary_key] is None:
            tasks[summary_key] = lambda: self.client.generate_summary(series_id, lesson_id, last_index)

        if tasks:
            logger.info(f"Generating completion content for {lesson_id}: {', '.join(tasks)}")
            with ThreadPoolExecutor(max_workers=len(tasks)) as executor:
                futures = {
                    executor.submit(self.retry, generate, key): key
                    for key, generate in tasks.items()
                }
                failures = []
                for future in as_completed(futures):
                    key = futures[future]
                    try:
                        results[key] = future.result()
                    except Exception as e:
                        logger.error(f"Completion content failed: {key}: {e}")
                        failures.append(e)

            # Successful pieces are cached even when the other one failed
            for key in tasks:
                if results[key] is not None:
                    self.cache.set(key, results[key])
            if failures:
                raise failures[0]

        return CompletionContent(
            summary=results[summary_key],
            understanding_question=results[question_key],
        )

    def homework(self, lesson: Lesson, understanding: Understanding | str) -> str:
        """Homework for a lesson, one cache slot per understanding level."""
        level = Understanding(understanding)
        last_index = lesson.last_paragraph_index
        return self._cached_or_generate(
            make_homework_cache_key(lesson.series_id, lesson.lesson_id, last_index, level),
            lambda: self.client.generate_homework(lesson.series_id, lesson.lesson_id, last_index, level),
        )
