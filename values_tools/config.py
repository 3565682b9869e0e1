from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Library settings loaded from environment variables.

    Environment variables can come from:
    - .env file (for secrets like API keys)
    - System environment

    Variable names are case-insensitive:
    - OPENAI_API_KEY
    - DEFAULT_MODEL, DEFAULT_TEMPERATURE
    - EMBEDDING_MODEL, EMBEDDING_DIMENSIONS
    - REQUEST_TIMEOUT (seconds, applied to every external call)
    - PROMPTS_DIR (override the packaged prompt files)
    - CACHE_TTL (seconds, unset = never expire)
    """

    # OpenAI (from .env)
    openai_api_key: str = ""

    # Generation
    default_model: str = "gpt-4o"
    default_temperature: float = 0.0

    # Embeddings
    embedding_model: str = "text-embedding-3-large"
    embedding_dimensions: int = 1536

    # Every external call is bounded by this timeout
    request_timeout: float = 60.0

    prompts_dir: Optional[str] = None
    cache_ttl: Optional[int] = None

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars

    @field_validator('default_temperature')
    @classmethod
    def check_temperature(cls, v):
        """Temperature must be between 0 and 1"""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"default_temperature must be between 0 and 1, got {v}")
        return v

    @field_validator('request_timeout')
    @classmethod
    def check_timeout(cls, v):
        if v <= 0:
            raise ValueError(f"request_timeout must be positive, got {v}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
