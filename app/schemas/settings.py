"""User settings schemas"""

from pydantic import field_validator
from typing import Optional
from datetime import datetime

from app.llm.factory import KNOWN_PROVIDERS
from app.schemas.chat import CamelModel


class SettingsOut(CamelModel):
    default_ai_provider: Optional[str] = None
    voice_output: bool = False
    updated_at: Optional[datetime] = None


class SettingsUpdate(CamelModel):
    """Partial update; omitted fields are left alone"""
    default_ai_provider: Optional[str] = None
    voice_output: Optional[bool] = None

    @field_validator("default_ai_provider")
    @classmethod
    def check_provider(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().lower()
        if value not in KNOWN_PROVIDERS:
            raise ValueError(f"Unknown AI provider, expected one of: {', '.join(KNOWN_PROVIDERS)}")
        return value
