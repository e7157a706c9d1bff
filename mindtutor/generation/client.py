"""
GenerationClient - One-shot AI content generation via the backend.

Calls POST /tutor/generate for explain/summary/homework/
understanding_question/render_block. No retries here; wrap calls with
mindtutor.generation.retry.with_retry.
"""

import json
import logging
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError

from mindtutor.schemas import (
    GenerateRequest,
    GenerateResponse,
    GenerateType,
    Understanding,
    series_value,
)


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class GenerationError(Exception):
    """Generation request failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class AuthRequiredError(GenerationError):
    """No credential available; raised before any network I/O."""

    def __init__(self, message: str = "Login required."):
        super().__init__(message, status=401)


class GenerationClient:
    """Client for the backend generation endpoint."""

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        skip_auth: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        opener: Callable = urlopen,
    ):
        """
        Initialize client.

        Args:
            base_url: Backend base URL
            token_provider: Returns a bearer token or None
            skip_auth: Development bypass; send requests without a token
            timeout: Network timeout passed to the opener
            opener: urlopen-compatible callable
        """
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.skip_auth = skip_auth
        self.timeout = timeout
        self.opener = opener

    @property
    def url(self) -> str:
        return f"{self.base_url}/tutor/generate"

    def require_token(self) -> Optional[str]:
        """
        Return the bearer token, or None under the development bypass.

        Raises:
            AuthRequiredError: If no token is available and auth is not skipped
        """
        token = self.token_provider() if self.token_provider else None
        if not token and not self.skip_auth:
            raise AuthRequiredError()
        return token

    def generate(
        self,
        gen_type: GenerateType | str,
        series_id: str,
        lesson_id: str,
        paragraph_index: int,
        extra: Optional[str] = None,
    ) -> str:
        """
        Generate tutor content.

        Args:
            gen_type: What to generate
            series_id: Series of the lesson
            lesson_id: Lesson ID
            paragraph_index: Paragraph (chunk) the content is about
            extra: User question for explain, understanding level for homework

        Returns:
            Generated text

        Raises:
            AuthRequiredError: If a credential is required and missing
            GenerationError: On HTTP, network or response errors
        """
        gen_type = GenerateType(gen_type)
        token = self.require_token()

        request = GenerateRequest(
            type=gen_type,
            series_id=series_value(series_id),
            lesson_id=lesson_id,
            chunk_index=paragraph_index,
            user_input=extra if gen_type == GenerateType.EXPLAIN and extra else None,
            understanding=Understanding(extra) if gen_type == GenerateType.HOMEWORK and extra else None,
        )

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        req = Request(
            self.url,
            data=json.dumps(request.to_payload()).encode("utf-8"),
            headers=headers,
            method="POST",
        )

        logger.info(f"Generating: {gen_type.value} {lesson_id}:{paragraph_index}")
        try:
            with self.opener(req, timeout=self.timeout) as response:
                body = response.read().decode("utf-8")
        except HTTPError as e:
            logger.error(f"Generation failed: {e.code}")
            raise GenerationError(f"AI generation failed: {e.code}", status=e.code) from e
        except (URLError, OSError) as e:
            logger.error(f"Generation network error: {getattr(e, 'reason', e)}")
            raise GenerationError("A network error occurred.") from e

        try:
            result = GenerateResponse.model_validate_json(body)
        except ValidationError as e:
            raise GenerationError(f"Invalid generation response: {e.error_count()} errors") from e

        logger.debug(f"Generated: {result.type.value} {result.lesson_id}")
        return result.content

    # -------------------------------------------------------------------------
    # Typed helpers
    # -------------------------------------------------------------------------

    def generate_explanation(
        self, series_id: str, lesson_id: str, paragraph_index: int, question: Optional[str] = None
    ) -> str:
        """Explain the current paragraph, optionally answering a learner question."""
        return self.generate(GenerateType.EXPLAIN, series_id, lesson_id, paragraph_index, question)

    def generate_summary(self, series_id: str, lesson_id: str, paragraph_index: int) -> str:
        """Summarize the lesson content up to a paragraph."""
        return self.generate(GenerateType.SUMMARY, series_id, lesson_id, paragraph_index)

    def generate_homework(
        self, series_id: str, lesson_id: str, paragraph_index: int, understanding: Understanding | str
    ) -> str:
        """Suggest homework tailored to the learner's understanding."""
        level = Understanding(understanding)
        return self.generate(GenerateType.HOMEWORK, series_id, lesson_id, paragraph_index, level.value)

    def generate_understanding_question(self, series_id: str, lesson_id: str, paragraph_index: int) -> str:
        """Ask a comprehension question about the lesson."""
        return self.generate(GenerateType.UNDERSTANDING_QUESTION, series_id, lesson_id, paragraph_index)

    def generate_render_block(self, series_id: str, lesson_id: str, paragraph_index: int) -> str:
        """Rewrite one raw paragraph into a readable block."""
        return self.generate(GenerateType.RENDER_BLOCK, series_id, lesson_id, paragraph_index)
