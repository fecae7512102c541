"""Test doubles for providers and the Redis client"""

import asyncio
import fnmatch
import time
from typing import List, Optional

from app.exceptions import ProviderException
from app.llm.base import ProviderAdapter


class FakeProvider(ProviderAdapter):
    """
    Scripted provider

    ``replies`` are consumed in order; an Exception instance is raised
    instead of returned. When exhausted the default reply is used.
    """

    def __init__(self, name: str, reply: str = None, fail: bool = False, delay: float = 0.0):
        self.name = name
        self.reply = reply or f"Reply from {name}"
        self.fail = fail
        self.delay = delay
        self.replies: List = []
        self.prompts: List[str] = []
        self.generate_calls: List[dict] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def generate(self, message, goal, tone, history, language):
        self.generate_calls.append({
            "message": message,
            "goal": goal,
            "tone": tone,
            "history": history,
            "language": language
        })
        return await super().generate(message, goal, tone, history, language)

    async def complete(self, prompt: str, temperature: Optional[float] = None, max_tokens: Optional[int] = None) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        if self.fail:
            raise ProviderException(self.name, "quota exceeded")
        return self.reply

    @property
    def calls(self) -> int:
        return len(self.prompts)


class FakeRedis:
    """In-memory stand-in for the redis.asyncio client used by ResponseCache"""

    def __init__(self):
        self.data = {}
        self.expires = {}
        self.ttls = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("redis unavailable")

    def _purge(self, key):
        if key in self.expires and self.expires[key] <= time.monotonic():
            self.data.pop(key, None)
            self.expires.pop(key, None)

    async def get(self, key):
        self._check()
        self._purge(key)
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        self.expires[key] = time.monotonic() + ttl
        return True

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expires.pop(key, None)
        return removed

    async def scan_iter(self, match="*"):
        self._check()
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self):
        self._check()
        return True

    async def incr(self, key):
        self._check()
        value = int(self.data.get(key) or 0) + 1
        self.data[key] = str(value)
        return value

    def entries(self):
        """Cached payload keys, without the generation counters"""
        return {key for key in self.data if key.startswith("chat_cache:")}
