import logging
from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from .config import settings

logger = logging.getLogger(__name__)

# Transient failures worth another attempt; bad requests and auth errors are not
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class AIServiceError(Exception):
    """The completion service could not produce an answer."""

    def __init__(self, message: str, attempts: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.attempts = attempts


class OpenAIClient:
    def __init__(self, api_key: str | None = None, model: str | None = None,
                 max_retries: int | None = None) -> None:
        api_key = api_key or settings.OPENAI_API_KEY
        if not api_key:
            raise AIServiceError("OPENAI_API_KEY is not configured")
        self.client = AsyncOpenAI(
            api_key=api_key,
            # retries are handled by tenacity below
            max_retries=0,
        )
        self.model = model or settings.OPENAI_MODEL
        self.max_retries = max_retries or settings.OPENAI_MAX_RETRIES
        self.wait = wait_exponential(multiplier=1, min=1, max=10)

    async def complete_json(self, messages: List[Dict[str, str]],
                            temperature: Optional[float] = None,
                            max_tokens: Optional[int] = None) -> str:
        """Return the raw JSON text of a single completion.

        Transient API failures are retried with exponential backoff; once
        attempts run out an ``AIServiceError`` is raised.
        """
        @retry(
            stop=stop_after_attempt(self.max_retries),
            wait=self.wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        async def _attempt() -> str:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=settings.OPENAI_TEMPERATURE if temperature is None else temperature,
                max_tokens=max_tokens or settings.OPENAI_MAX_TOKENS,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content
            if not content:
                raise AIServiceError("empty completion")
            return content

        try:
            return await _attempt()
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(f"AI call failed after {self.max_retries} attempts: {cause}")
            raise AIServiceError(f"AI service unavailable: {cause}", attempts=self.max_retries) from cause
        except openai.OpenAIError as e:
            logger.error(f"AI call rejected: {e}")
            raise AIServiceError(f"AI service error: {e}") from e


_client: OpenAIClient | None = None


def get_openai_client() -> OpenAIClient:
    """Create the shared client on first use so a missing key only fails on call."""
    global _client
    if _client is None:
        _client = OpenAIClient()
    return _client
