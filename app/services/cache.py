"""Read-through response cache backed by Redis"""

from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import urlencode
import json
import logging

import redis.asyncio as aioredis

from app.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "chat_cache"
GENERATION_PREFIX = "chat_cache_gen"


class ResponseCache:
    """
    Memoise read-only conversation payloads per user

    Every key carries the owner's id and the owner's cache generation.
    A mutation bumps the generation, so a read that loaded before the
    mutation stores its payload under a key nobody asks for again. The
    cache only ever saves work: when it is disabled or Redis misbehaves,
    reads go straight to the loader.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        enabled: bool = True,
        ttl_detail: int = settings.CACHE_TTL_DETAIL,
        ttl_list: int = settings.CACHE_TTL_LIST
    ):
        self.client = client
        self.enabled = enabled and client is not None
        self.ttl_detail = ttl_detail
        self.ttl_list = ttl_list

    @classmethod
    def from_settings(cls) -> "ResponseCache":
        if not settings.CACHE_ENABLED:
            logger.info("Response cache disabled")
            return cls(enabled=False)

        try:
            client = aioredis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=2
            )
            logger.info("Redis response cache enabled")
        except Exception as e:
            logger.warning(f"Failed to set up Redis cache: {e}")
            return cls(enabled=False)

        return cls(client=client)

    @staticmethod
    def build_key(
        user_id: str,
        route: str,
        params: Optional[Dict[str, Any]] = None,
        generation: int = 0
    ) -> str:
        """Deterministic key for a route, its query parameters and the owner's generation"""
        query = urlencode(sorted((k, str(v)) for k, v in (params or {}).items()))
        return f"{KEY_PREFIX}:{user_id}:g{generation}:{route}?{query}"

    @staticmethod
    def generation_key(user_id: str) -> str:
        return f"{GENERATION_PREFIX}:{user_id}"

    async def get_or_load(
        self,
        user_id: str,
        route: str,
        params: Optional[Dict[str, Any]],
        ttl: int,
        loader: Callable[[], Awaitable[Any]]
    ) -> Any:
        """
        Return the cached payload or load, store and return it

        Args:
            user_id: Owner of the payload
            route: Route the payload answers, e.g. ``/chat/<id>``
            params: Query parameters of the read
            ttl: Seconds before the entry expires on its own
            loader: Coroutine function producing a JSON-serialisable payload

        Returns:
            The payload; errors raised by the loader are never cached
        """
        if not self.enabled:
            return await loader()

        try:
            generation = int(await self.client.get(self.generation_key(user_id)) or 0)
        except Exception as e:
            logger.warning(f"Cache generation read failed for user {user_id}: {e}")
            return await loader()

        key = self.build_key(user_id, route, params, generation)
        try:
            cached = await self.client.get(key)
            if cached is not None:
                logger.debug(f"Cache hit: {key}")
                return json.loads(cached)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")

        logger.debug(f"Cache miss: {key}")
        payload = await loader()

        try:
            await self.client.setex(key, ttl, json.dumps(payload))
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")

        return payload

    async def invalidate_user(self, user_id: str) -> int:
        """Drop every cached entry of a user, returns the number of keys deleted"""
        if not self.enabled:
            return 0

        try:
            await self.client.incr(self.generation_key(user_id))
        except Exception as e:
            logger.warning(f"Cache generation bump failed for user {user_id}: {e}")

        pattern = f"{KEY_PREFIX}:{user_id}:*"
        try:
            keys = [key async for key in self.client.scan_iter(match=pattern)]
            if keys:
                await self.client.delete(*keys)
                logger.info(f"Cache invalidated for user {user_id}: {len(keys)} keys")
            return len(keys)
        except Exception as e:
            logger.warning(f"Cache invalidation failed for user {user_id}: {e}")
            return 0

    async def ping(self) -> str:
        """Backend status for the health check"""
        if not self.enabled:
            return "disabled"
        try:
            await self.client.ping()
            return "connected"
        except Exception as e:
            return f"error: {str(e)}"
