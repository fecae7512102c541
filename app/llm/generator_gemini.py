"""Google Gemini provider"""

from typing import Any, Optional
import google.generativeai as genai
import logging

from app.exceptions import ProviderException
from app.llm.base import ProviderAdapter
from app.llm.config import llm_config

logger = logging.getLogger(__name__)


class GeminiGenerator(ProviderAdapter):
    """Gemini-based provider"""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        model: Optional[Any] = None
    ):
        self.api_key = api_key if api_key is not None else llm_config.google_api_key
        self.model_name = model_name or llm_config.gemini_model
        self.max_tokens = max_tokens or llm_config.gemini_max_tokens
        self.temperature = temperature if temperature is not None else llm_config.gemini_temperature
        self._model = model

    @property
    def is_configured(self) -> bool:
        return self._model is not None or bool(self.api_key)

    @property
    def model(self):
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(model_name=self.model_name)
        return self._model

    async def complete(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        generation_config = genai.GenerationConfig(
            temperature=temperature if temperature is not None else self.temperature,
            max_output_tokens=max_tokens or self.max_tokens,
        )

        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config=generation_config
            )
        except Exception as e:
            raise ProviderException(self.name, f"{e.__class__.__name__}: {e}") from e

        try:
            # Raises ValueError when the candidate was blocked or is empty
            content = response.text
        except ValueError as e:
            raise ProviderException(self.name, f"Malformed response: {e}") from e

        logger.info(f"Gemini generation with {self.model_name}: {len(content)} chars")
        return content
