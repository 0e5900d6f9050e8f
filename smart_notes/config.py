"""Application configuration using Pydantic Settings."""

import logging
import warnings

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    app_name: str = "Smart Notes"
    debug: bool = True
    log_level: str = "INFO"

    # Security
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080  # 1 week

    # Database
    database_url: str = "sqlite:///./smart_notes.db"

    # Generative AI provider
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    generation_model: str = "gemini-2.0-flash"
    embedding_model: str = "text-embedding-004"
    embedding_dimensions: int = 768
    embedding_max_chars: int = 8000
    provider_timeout: float = 60.0

    # Rate limiting and retries around text generation
    llm_requests_per_minute: int = 10
    llm_rate_window_seconds: float = 60.0
    llm_rate_buffer_seconds: float = 0.1
    llm_max_attempts: int = 3
    llm_retry_base_delay: float = 1.0

    # Search
    search_threshold: float = 0.5
    search_limit: int = 10
    search_combined_limit: int = 20

    # Embedding backfill pacing between provider calls
    backfill_delay_seconds: float = 0.1

    # Documents
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    max_extracted_chars: int = 10000
    max_prompt_document_chars: int = 15000

    # CORS
    cors_origins: list[str] = ["*"]

    def __init__(self, **kwargs):
        """Initialize settings and validate production configuration."""
        super().__init__(**kwargs)
        self._validate_production_settings()

    def _validate_production_settings(self) -> None:
        """Validate and warn about insecure production settings."""
        if not self.debug:
            if self.secret_key == "change-me-in-production":
                warnings.warn(
                    "SECRET_KEY is set to default value. Change this in production!",
                    UserWarning,
                    stacklevel=2,
                )
                logger.warning(
                    "SECRET_KEY is set to default value. Change this in production!"
                )

            if "*" in self.cors_origins:
                warnings.warn(
                    "CORS is configured to allow all origins (*). Restrict this in production!",
                    UserWarning,
                    stacklevel=2,
                )
                logger.warning(
                    "CORS is configured to allow all origins (*). Restrict this in production!"
                )

            if not self.gemini_api_key:
                logger.warning(
                    "GEMINI_API_KEY is not set. AI features will use fallback heuristics."
                )


settings = Settings()
