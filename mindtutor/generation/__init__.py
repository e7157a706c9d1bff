"""
mindtutor Generation - AI-generated supplementary content.

This module provides:
- GenerationCache: TTL'd, capacity-bounded cache of generated text
- GenerationClient: Backend /tutor/generate client
- with_retry: Exponential backoff wrapper
- TutorContentService: Cache-or-generate flow used by lesson viewers
"""

from .cache import (
    GenerationCache,
    CACHE_KEY,
    TTL_MS,
    MAX_ITEMS,
    make_explain_cache_key,
    make_summary_cache_key,
    make_understanding_question_cache_key,
    make_render_block_cache_key,
    make_homework_cache_key,
    is_legacy_homework_key,
)

from .client import (
    GenerationClient,
    GenerationError,
    AuthRequiredError,
)

from .retry import (
    with_retry,
    backoff_delay,
    MAX_RETRY,
    BASE_DELAY,
)

from .service import (
    TutorContentService,
    CompletionContent,
)

__all__ = [
    # Cache
    "GenerationCache",
    "CACHE_KEY",
    "TTL_MS",
    "MAX_ITEMS",
    "make_explain_cache_key",
    "make_summary_cache_key",
    "make_understanding_question_cache_key",
    "make_render_block_cache_key",
    "make_homework_cache_key",
    "is_legacy_homework_key",
    # Client
    "GenerationClient",
    "GenerationError",
    "AuthRequiredError",
    # Retry
    "with_retry",
    "backoff_delay",
    "MAX_RETRY",
    "BASE_DELAY",
    # Service
    "TutorContentService",
    "CompletionContent",
]
