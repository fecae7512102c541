"""LLM provider configuration"""

from app.config import settings
from dataclasses import dataclass, field
from typing import List


@dataclass
class LLMConfig:
    """Configuration for the AI providers"""

    # Provider selection
    provider_order: List[str] = field(default_factory=lambda: list(settings.AI_PROVIDER_ORDER))
    timeout_seconds: float = settings.PROVIDER_TIMEOUT_SECONDS
    history_max_messages: int = settings.HISTORY_MAX_MESSAGES

    # OpenAI Settings
    openai_api_key: str = settings.OPENAI_API_KEY
    openai_model: str = settings.OPENAI_MODEL
    openai_max_tokens: int = settings.OPENAI_MAX_TOKENS
    openai_temperature: float = settings.OPENAI_TEMPERATURE

    # Gemini Settings
    google_api_key: str = settings.GOOGLE_API_KEY
    gemini_model: str = settings.GEMINI_MODEL
    gemini_max_tokens: int = settings.GEMINI_MAX_TOKENS
    gemini_temperature: float = settings.GEMINI_TEMPERATURE

    # Anthropic Settings
    anthropic_api_key: str = settings.ANTHROPIC_API_KEY
    anthropic_model: str = settings.ANTHROPIC_MODEL
    anthropic_max_tokens: int = settings.ANTHROPIC_MAX_TOKENS
    anthropic_temperature: float = settings.ANTHROPIC_TEMPERATURE
    anthropic_api_url: str = settings.ANTHROPIC_API_URL
    anthropic_api_version: str = settings.ANTHROPIC_API_VERSION


# Global LLM config instance
llm_config = LLMConfig()
