"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # OpenAI (ChatGPT adapter)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"

    # Google Generative Language (Gemini adapter)
    GOOGLE_GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"

    # Perplexity (sonar adapter)
    PERPLEXITY_API_KEY: Optional[str] = None
    PERPLEXITY_MODEL: str = "sonar"

    # Claude API (sentiment judge, optional)
    ANTHROPIC_API_KEY: Optional[str] = None
    SENTIMENT_MODEL: str = "claude-3-5-haiku-latest"
    SENTIMENT_ENABLED: bool = True

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Visibility scan
    VISIBILITY_QUERY_TIMEOUT: float = 20.0
    VISIBILITY_MAX_TOKENS: int = 500
    VISIBILITY_CACHE_MAX_AGE_HOURS: int = 72

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase

    @property
    def has_sentiment_judge(self) -> bool:
        return self.SENTIMENT_ENABLED and bool(self.ANTHROPIC_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
