"""OpenAI provider"""

from typing import Optional
from openai import AsyncOpenAI, OpenAIError
import tiktoken
import logging

from app.exceptions import ProviderException
from app.llm.base import ProviderAdapter
from app.llm.config import llm_config

logger = logging.getLogger(__name__)


class OpenAIGenerator(ProviderAdapter):
    """Chat-completions based provider"""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        self.api_key = api_key if api_key is not None else llm_config.openai_api_key
        self.model = model or llm_config.openai_model
        self.max_tokens = max_tokens or llm_config.openai_max_tokens
        self.temperature = temperature if temperature is not None else llm_config.openai_temperature
        self._client = client
        self._encoding = None

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            # The orchestrator owns retries
            self._client = AsyncOpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    @property
    def encoding(self):
        if self._encoding is None:
            try:
                self._encoding = tiktoken.encoding_for_model(self.model)
            except KeyError:
                self._encoding = tiktoken.get_encoding("cl100k_base")
        return self._encoding

    def count_tokens(self, text: str) -> int:
        """Count tokens in text"""
        try:
            return len(self.encoding.encode(text))
        except Exception as e:
            logger.warning(f"Error counting tokens: {e}")
            # Rough estimate: 1 token ≈ 4 characters
            return len(text) // 4

    async def complete(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        temperature = temperature if temperature is not None else self.temperature
        max_tokens = max_tokens or self.max_tokens

        logger.info(f"Generating response with {self.model}, {self.count_tokens(prompt)} input tokens")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens
            )
        except OpenAIError as e:
            raise ProviderException(self.name, f"{e.__class__.__name__}: {e}") from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise ProviderException(self.name, "Malformed response: no choices returned") from e

        usage = getattr(response, "usage", None)
        if usage:
            logger.info(f"OpenAI generation: {usage.total_tokens} total tokens")

        return text or ""
