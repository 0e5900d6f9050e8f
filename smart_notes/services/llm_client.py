"""Rate-limited, retrying client for text generation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import lru_cache

import httpx

from smart_notes.config import settings
from smart_notes.services.gemini_service import GeminiService
from smart_notes.services.rate_limiter import SlidingWindowRateLimiter
from smart_notes.utils.exceptions import NoAnswerError, ProviderError, RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimitedLLMClient:
    """Wrap text generation with a request-rate limiter and 429 retries."""

    def __init__(
        self,
        provider: GeminiService,
        limiter: SlidingWindowRateLimiter,
        max_attempts: int = 3,
        retry_base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the client.

        Args:
            provider: Provider performing the HTTP call
            limiter: Limiter acquired before every attempt
            max_attempts: Total attempts allowed when the provider answers 429
            retry_base_delay: Backoff unit; attempt n waits n * this value
            sleep: Coroutine used for backoff waits
        """
        self.provider = provider
        self.limiter = limiter
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self._sleep = sleep

    @property
    def configured(self) -> bool:
        """Whether the underlying provider can be called at all."""
        return self.provider.configured

    async def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_output_tokens: int = 800,
    ) -> str:
        """
        Generate a non-empty answer for a prompt.

        Args:
            prompt: Prompt text
            temperature: Sampling temperature
            max_output_tokens: Output token cap

        Returns:
            Generated text

        Raises:
            RateLimitExceeded: Provider kept answering 429
            NoAnswerError: Provider answered empty twice
            ProviderError: Any other provider or transport failure
        """
        if not self.provider.configured:
            raise ProviderError("Generative AI provider is not configured")

        rate_limited_attempts = 0
        retried_empty = False
        while True:
            await self.limiter.acquire()
            try:
                answer = await self.provider.generate_content(
                    prompt,
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                )
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code != 429:
                    logger.error(
                        f"Generation failed with status {status_code}: {e.response.text[:500]}"
                    )
                    raise ProviderError(
                        f"AI provider returned status {status_code}"
                    ) from e
                rate_limited_attempts += 1
                if rate_limited_attempts >= self.max_attempts:
                    logger.error(
                        f"Provider still rate limited after {rate_limited_attempts} attempts"
                    )
                    raise RateLimitExceeded() from e
                delay = self.retry_base_delay * rate_limited_attempts
                logger.warning(
                    f"Provider rate limited (attempt {rate_limited_attempts}/{self.max_attempts}), "
                    f"retrying in {delay:.1f}s"
                )
                await self._sleep(delay)
                continue
            except httpx.RequestError as e:
                logger.error(f"Generation request failed: {e}")
                raise ProviderError("AI provider unreachable") from e

            if answer and answer.strip():
                return answer.strip()

            if retried_empty:
                logger.error("Provider returned an empty answer twice")
                raise NoAnswerError()
            retried_empty = True
            logger.warning("Provider returned an empty answer, retrying once")


@lru_cache
def get_llm_client() -> RateLimitedLLMClient:
    """
    Process-wide client sharing one limiter.

    The limiter window is in-memory, so throttling is only correct for a
    single-instance deployment.
    """
    limiter = SlidingWindowRateLimiter(
        max_requests=settings.llm_requests_per_minute,
        window_seconds=settings.llm_rate_window_seconds,
        buffer_seconds=settings.llm_rate_buffer_seconds,
    )
    return RateLimitedLLMClient(
        provider=GeminiService(),
        limiter=limiter,
        max_attempts=settings.llm_max_attempts,
        retry_base_delay=settings.llm_retry_base_delay,
    )
