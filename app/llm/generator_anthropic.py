"""Anthropic Claude provider over the Messages HTTP API"""

from typing import Optional
import httpx
import logging

from app.exceptions import ProviderException
from app.llm.base import ProviderAdapter
from app.llm.config import llm_config

logger = logging.getLogger(__name__)


class AnthropicGenerator(ProviderAdapter):
    """Claude provider using httpx directly"""

    name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        api_url: Optional[str] = None,
        api_version: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        self.api_key = api_key if api_key is not None else llm_config.anthropic_api_key
        self.model = model or llm_config.anthropic_model
        self.max_tokens = max_tokens or llm_config.anthropic_max_tokens
        self.temperature = temperature if temperature is not None else llm_config.anthropic_temperature
        self.api_url = api_url or llm_config.anthropic_api_url
        self.api_version = api_version or llm_config.anthropic_api_version
        self._client = client
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

    async def _post(self, payload: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.api_url, json=payload, headers=self._headers())

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.api_url, json=payload, headers=self._headers())

    async def complete(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        payload = {
            "model": self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": temperature if temperature is not None else self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            response = await self._post(payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:300] if e.response is not None else ""
            raise ProviderException(self.name, f"HTTP {e.response.status_code}: {body}") from e
        except httpx.HTTPError as e:
            raise ProviderException(self.name, f"{e.__class__.__name__}: {e}") from e
        except ValueError as e:
            raise ProviderException(self.name, "Malformed response: invalid JSON") from e

        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise ProviderException(self.name, "Malformed response: missing content")

        text = "".join(
            block.get("text", "") for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )

        usage = data.get("usage") or {}
        logger.info(
            f"Anthropic generation with {self.model}: "
            f"{usage.get('input_tokens', '?')} in / {usage.get('output_tokens', '?')} out tokens"
        )
        return text
