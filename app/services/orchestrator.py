"""Response orchestration with provider fallback"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import asyncio
import logging
import time

from app.exceptions import ProviderException
from app.llm.base import HistoryItem
from app.llm.config import llm_config
from app.llm.factory import ProviderRegistry

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "I am having trouble understanding you right now. Please try again later."
FALLBACK_TONE = "error"
NO_PROVIDER = "none"


@dataclass(frozen=True)
class ProviderAttempt:
    """One provider call, kept for logs only"""
    provider: str
    success: bool
    elapsed_ms: int
    error: Optional[str] = None


@dataclass
class OrchestratorResult:
    text: str
    tone: Optional[str]
    provider_used: str
    attempts: List[ProviderAttempt] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.provider_used == NO_PROVIDER


class ResponseOrchestrator:
    """
    Produce one assistant reply per chat turn

    Providers are tried strictly one after another, the caller's preferred
    provider first. A failing or slow provider is logged and skipped; when
    all of them fail the fixed fallback message is returned instead of an
    error.
    """

    def __init__(self, registry: ProviderRegistry, timeout_seconds: Optional[float] = None):
        self.registry = registry
        self.timeout_seconds = timeout_seconds or llm_config.timeout_seconds

    async def generate(
        self,
        message: str,
        goal: str,
        tone: Optional[str],
        history: Sequence[HistoryItem],
        language: Optional[str],
        preferred_provider: Optional[str] = None
    ) -> OrchestratorResult:
        """
        Generate the assistant reply

        Args:
            message: New user message
            goal: Conversation goal
            tone: Tone of the user message
            history: Earlier messages, chronological
            language: Language to answer in
            preferred_provider: Provider to try first, if registered

        Returns:
            OrchestratorResult; never raises for provider failures
        """
        attempts: List[ProviderAttempt] = []
        history = tuple(history)

        for adapter in self.registry.order_for(preferred_provider):
            start_time = time.time()
            try:
                reply = await asyncio.wait_for(
                    adapter.generate(message, goal, tone, history, language),
                    timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                error = f"timed out after {self.timeout_seconds}s"
            except ProviderException as e:
                error = e.reason
            except Exception as e:
                error = f"{e.__class__.__name__}: {e}"
            else:
                elapsed_ms = int((time.time() - start_time) * 1000)
                attempts.append(ProviderAttempt(adapter.name, True, elapsed_ms))
                logger.info(f"Reply generated by {adapter.name} in {elapsed_ms}ms")
                return OrchestratorResult(
                    text=reply.text,
                    tone=reply.tone if reply.tone is not None else tone,
                    provider_used=adapter.name,
                    attempts=attempts
                )

            elapsed_ms = int((time.time() - start_time) * 1000)
            attempts.append(ProviderAttempt(adapter.name, False, elapsed_ms, error))
            logger.error(f"Error with {adapter.name}: {error}")

        logger.error(
            f"All AI providers failed ({', '.join(a.provider for a in attempts) or 'none registered'}), "
            f"returning fallback message"
        )
        return OrchestratorResult(
            text=FALLBACK_MESSAGE,
            tone=FALLBACK_TONE,
            provider_used=NO_PROVIDER,
            attempts=attempts
        )
