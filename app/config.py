"""Application configuration"""

from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from typing import List
from pathlib import Path

# Get the backend directory (parent of app directory)
BACKEND_DIR = Path(__file__).parent.parent
ENV_FILE = BACKEND_DIR / ".env"


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Calm Companion"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    CORS_ORIGINS: List[str] = ["http://localhost:5500", "http://127.0.0.1:5500"]

    # Database
    DATABASE_URL: str = "sqlite:///./calm_companion.db"

    # Redis (response cache)
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL_DETAIL: int = 300  # 5 minutes
    CACHE_TTL_LIST: int = 600  # 10 minutes

    # Authentication
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # AI providers, tried in this order unless the user prefers another one
    AI_PROVIDER_ORDER: List[str] = ["openai", "gemini", "anthropic"]
    PROVIDER_TIMEOUT_SECONDS: float = 10.0
    HISTORY_MAX_MESSAGES: int = 20
    MESSAGE_ANALYSIS_ENABLED: bool = True

    # OpenAI
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4"
    OPENAI_MAX_TOKENS: int = 500
    OPENAI_TEMPERATURE: float = 0.7

    # Gemini
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_MAX_TOKENS: int = 500
    GEMINI_TEMPERATURE: float = 0.7

    # Anthropic
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    ANTHROPIC_MAX_TOKENS: int = 300
    ANTHROPIC_TEMPERATURE: float = 0.7
    ANTHROPIC_API_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_API_VERSION: str = "2023-06-01"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"  # Ignore extra fields in .env
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
