"""Gemini service for text generation and embedding calls."""

import logging
import math

import httpx

from smart_notes.config import settings
from smart_notes.utils.exceptions import ProviderError

logger = logging.getLogger(__name__)


class GeminiService:
    """Service for interacting with the Gemini REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        embedding_model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the Gemini service.

        Args:
            api_key: API key sent in the x-goog-api-key header
            base_url: API base URL (up to and including the version segment)
            model: Model used for text generation
            embedding_model: Model used for embeddings
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.model = model or settings.generation_model
        self.embedding_model = embedding_model or settings.embedding_model
        self.timeout = timeout or settings.provider_timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        """Whether an API key is available."""
        return bool(self.api_key)

    def _get_headers(self) -> dict[str, str]:
        """Get request headers including auth."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-goog-api-key"] = self.api_key
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.timeout)

    async def check_connection(self) -> bool:
        """
        Check if the provider is reachable with the configured key.

        Returns:
            True if connected, False otherwise
        """
        if not self.configured:
            return False
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/models/{self.model}",
                    headers=self._get_headers(),
                    timeout=5.0,
                )
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Gemini connection check failed: {e}")
            return False

    async def generate_content(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_output_tokens: int = 800,
    ) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Prompt text
            temperature: Sampling temperature
            max_output_tokens: Output token cap

        Returns:
            Text of the first candidate ("" when the model produced none)

        Raises:
            httpx.HTTPStatusError: On non-2xx responses (429 included)
            httpx.RequestError: On transport failures
        """
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }

        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                headers=self._get_headers(),
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        candidates = data.get("candidates") or [{}]
        candidate = candidates[0]
        if candidate.get("finishReason") == "MAX_TOKENS":
            logger.warning("Gemini response was truncated due to token limit")

        parts = (candidate.get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    async def embed_content(self, text: str) -> list[float]:
        """
        Generate an embedding for text.

        Args:
            text: Text to embed

        Returns:
            Embedding values

        Raises:
            ProviderError: If the call fails or the response is malformed
        """
        if not self.configured:
            raise ProviderError("Embedding provider is not configured")

        payload = {
            "model": f"models/{self.embedding_model}",
            "content": {"parts": [{"text": text}]},
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/models/{self.embedding_model}:embedContent",
                    headers=self._get_headers(),
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Gemini embedding error {e.response.status_code}: {e.response.text[:500]}"
            )
            raise ProviderError(
                f"Embedding request failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Gemini embedding request failed: {e}")
            raise ProviderError("Embedding provider unreachable") from e

        values = (data.get("embedding") or {}).get("values")
        if not isinstance(values, list) or not values:
            raise ProviderError("Invalid embedding response format")

        try:
            embedding = [float(v) for v in values]
        except (TypeError, ValueError) as e:
            raise ProviderError("Embedding contains non-numeric values") from e

        if not all(math.isfinite(v) for v in embedding):
            raise ProviderError("Embedding contains NaN or infinite values")

        return embedding


def get_gemini_service(
    api_key: str | None = None,
    model: str | None = None,
    embedding_model: str | None = None,
) -> GeminiService:
    """
    Factory function to create GeminiService with custom settings.

    Args:
        api_key: Optional API key
        model: Optional generation model
        embedding_model: Optional embedding model

    Returns:
        Configured GeminiService instance
    """
    return GeminiService(
        api_key=api_key,
        model=model,
        embedding_model=embedding_model,
    )
