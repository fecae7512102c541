"""Provider adapter contract"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import logging

from app.exceptions import ProviderException
from app.llm.config import llm_config
from app.llm.prompt_templates import build_companion_prompt

logger = logging.getLogger(__name__)

HistoryItem = Dict[str, str]


@dataclass(frozen=True)
class ProviderReply:
    """Normalised reply of any provider"""
    text: str
    tone: Optional[str] = None


class ProviderAdapter(ABC):
    """
    One external LLM behind a uniform ``generate`` capability

    Subclasses implement ``complete`` for their API and raise
    ProviderException for every failure. Retrying and falling back to
    another provider is the orchestrator's job, never the adapter's.
    """

    name: str = "unknown"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are available"""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """Send a single prompt and return the generated text"""

    def build_prompt(
        self,
        message: str,
        goal: str,
        tone: Optional[str],
        history: Sequence[HistoryItem],
        language: Optional[str]
    ) -> str:
        return build_companion_prompt(
            message, goal, tone, history, language,
            max_messages=llm_config.history_max_messages
        )

    async def generate(
        self,
        message: str,
        goal: str,
        tone: Optional[str],
        history: Sequence[HistoryItem],
        language: Optional[str]
    ) -> ProviderReply:
        """
        Generate the assistant reply for one chat turn

        Args:
            message: New user message
            goal: Conversation goal
            tone: Detected or client supplied tone of the message
            history: Earlier messages, chronological, not modified
            language: Language to answer in

        Returns:
            ProviderReply with the generated text

        Raises:
            ProviderException: on any failure of the underlying API
        """
        if not self.is_configured:
            raise ProviderException(self.name, "API key not configured")

        prompt = self.build_prompt(message, goal, tone, tuple(history), language)

        try:
            text = await self.complete(prompt)
        except ProviderException:
            raise
        except Exception as e:
            # SDK specific errors must not leak past the adapter
            raise ProviderException(self.name, f"{e.__class__.__name__}: {e}") from e

        text = (text or "").strip()
        if not text:
            raise ProviderException(self.name, "Empty response from provider")

        return ProviderReply(text=text, tone=tone)
