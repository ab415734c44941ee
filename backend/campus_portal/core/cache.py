import json
import logging
from typing import Any, Optional

import redis
import redis.asyncio as aioredis

from .config import settings

logger = logging.getLogger(__name__)


class CacheManager:
    """Unified cache manager supporting both sync and async operations.

    Every operation fails open: errors are logged and a neutral value
    (None / False / 0) is returned so a Redis outage never fails a request.
    """

    def __init__(self):
        self.redis_url = settings.redis_url
        self.default_ttl = settings.cache_default_ttl

        self._sync_client = None
        self._async_client = None

    @property
    def sync_client(self) -> redis.Redis:
        if self._sync_client is None:
            self._sync_client = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True
            )
        return self._sync_client

    async def get_async_client(self) -> aioredis.Redis:
        if self._async_client is None:
            try:
                self._async_client = aioredis.from_url(
                    self.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30
                )
                await self._async_client.ping()
            except Exception as e:
                logger.warning(f"Failed to create async Redis client: {e}")
                self._async_client = None
                raise
        return self._async_client

    def _reset_on_connection_error(self, error: Exception):
        message = str(error).lower()
        if "connection" in message or "timeout" in message:
            self._async_client = None

    def _serialize_value(self, value: Any) -> str:
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            logger.warning(f"Cache serialization error: {e}")
            return json.dumps(str(value))

    def _deserialize_value(self, value: Optional[str]) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Cache deserialization error: {e}")
            return value

    def get(self, key: str) -> Optional[Any]:
        try:
            value = self.sync_client.get(key)
            return self._deserialize_value(value) if value else None
        except Exception as e:
            logger.warning(f"Cache get error for key '{key}': {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            ttl = ttl or self.default_ttl
            return bool(self.sync_client.setex(key, ttl, self._serialize_value(value)))
        except Exception as e:
            logger.warning(f"Cache set error for key '{key}': {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            return bool(self.sync_client.delete(key))
        except Exception as e:
            logger.warning(f"Cache delete error for key '{key}': {e}")
            return False

    async def aget(self, key: str) -> Optional[Any]:
        try:
            client = await self.get_async_client()
            value = await client.get(key)
            return self._deserialize_value(value) if value else None
        except Exception as e:
            logger.warning(f"Async cache get error for key '{key}': {e}")
            self._reset_on_connection_error(e)
            return None

    async def aset(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            client = await self.get_async_client()
            ttl = ttl or self.default_ttl
            return bool(await client.setex(key, ttl, self._serialize_value(value)))
        except Exception as e:
            logger.warning(f"Async cache set error for key '{key}': {e}")
            self._reset_on_connection_error(e)
            return False

    async def adelete(self, key: str) -> bool:
        try:
            client = await self.get_async_client()
            return bool(await client.delete(key))
        except Exception as e:
            logger.warning(f"Async cache delete error for key '{key}': {e}")
            self._reset_on_connection_error(e)
            return False

    async def aexists(self, key: str) -> bool:
        try:
            client = await self.get_async_client()
            return bool(await client.exists(key))
        except Exception as e:
            logger.warning(f"Async cache exists error for key '{key}': {e}")
            self._reset_on_connection_error(e)
            return False

    async def aincr(self, key: str, ttl: int) -> int:
        """Increment a counter, starting its expiry window on first hit. 0 on failure."""
        try:
            client = await self.get_async_client()
            count = await client.incr(key)
            if count == 1:
                await client.expire(key, ttl)
            return int(count)
        except Exception as e:
            logger.warning(f"Async cache incr error for key '{key}': {e}")
            self._reset_on_connection_error(e)
            return 0

    def push_to_list(self, key: str, value: Any, max_len: int, ttl: Optional[int] = None) -> int:
        """Prepend to a capped list in one round trip. Returns the new length, 0 on failure."""
        try:
            pipe = self.sync_client.pipeline()
            pipe.lpush(key, self._serialize_value(value))
            pipe.ltrim(key, 0, max_len - 1)
            pipe.expire(key, ttl or self.default_ttl)
            pipe.llen(key)
            return int(pipe.execute()[-1])
        except Exception as e:
            logger.warning(f"Cache list push error for key '{key}': {e}")
            return 0

    async def aget_list(self, key: str) -> list:
        try:
            client = await self.get_async_client()
            values = await client.lrange(key, 0, -1)
            return [self._deserialize_value(value) for value in values]
        except Exception as e:
            logger.warning(f"Async cache list get error for key '{key}': {e}")
            self._reset_on_connection_error(e)
            return []

    def health_check(self) -> bool:
        try:
            return bool(self.sync_client.ping())
        except Exception:
            return False

    async def ahealth_check(self) -> bool:
        try:
            client = await self.get_async_client()
            return bool(await client.ping())
        except Exception as e:
            logger.warning(f"Cache health check failed: {e}")
            return False

    async def aclose(self):
        if self._async_client is not None:
            await self._async_client.close()
            self._async_client = None
        if self._sync_client is not None:
            self._sync_client.close()
            self._sync_client = None


cache = CacheManager()
