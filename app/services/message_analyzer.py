"""Tone and language detection for incoming messages"""

from typing import Optional
import asyncio
import logging

from app.llm.config import llm_config
from app.llm.factory import ProviderRegistry
from app.llm.prompt_templates import (
    DEFAULT_LANGUAGE,
    DEFAULT_TONE,
    TONES,
    build_language_prompt,
    build_tone_prompt
)

logger = logging.getLogger(__name__)

MAX_LANGUAGE_NAME_LENGTH = 30


def normalize_tone(raw: Optional[str]) -> str:
    """Map a free-text model answer onto one of TONES"""
    text = (raw or "").strip().lower()
    for tone in TONES:
        if text.startswith(tone) or text.strip("-*. \"'") == tone:
            return tone
    return DEFAULT_TONE


def normalize_language(raw: Optional[str]) -> str:
    """First word-ish line of the answer, title-cased"""
    lines = (raw or "").strip().splitlines()
    text = lines[0].strip(" .\"'`*") if lines else ""
    if not text or len(text) > MAX_LANGUAGE_NAME_LENGTH or not text.replace(" ", "").isalpha():
        return DEFAULT_LANGUAGE
    return text.title()


class MessageAnalyzer:
    """
    Detect language and tone with the first available provider

    Analysis is best effort: on any failure the defaults are returned and
    the chat turn carries on.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        enabled: bool = True,
        timeout_seconds: Optional[float] = None
    ):
        self.registry = registry
        self.enabled = enabled
        self.timeout_seconds = timeout_seconds or llm_config.timeout_seconds

    async def _ask(self, prompt: str, temperature: float, max_tokens: int) -> Optional[str]:
        if not self.enabled:
            return None

        adapters = self.registry.order_for()
        if not adapters:
            return None

        adapter = adapters[0]
        try:
            return await asyncio.wait_for(
                adapter.complete(prompt, temperature=temperature, max_tokens=max_tokens),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"Message analysis with {adapter.name} timed out")
        except Exception as e:
            logger.warning(f"Message analysis with {adapter.name} failed: {e}")
        return None

    async def detect_language(self, message: str) -> str:
        answer = await self._ask(build_language_prompt(message), temperature=0.1, max_tokens=10)
        return normalize_language(answer)

    async def analyze_tone(self, message: str, language: Optional[str] = None) -> str:
        answer = await self._ask(build_tone_prompt(message, language), temperature=0.3, max_tokens=10)
        return normalize_tone(answer)
