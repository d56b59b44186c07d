"""
Singleton REST Redis client (Upstash-style key paths) with rate limiting using aiolimiter.
"""
from typing import Dict, Optional
from urllib.parse import quote
from aiohttp import ClientSession, ClientTimeout
from aiolimiter import AsyncLimiter
from loguru import logger

from locintel.config import (
    CACHE_REQUEST_TIMEOUT_SECONDS,
    CACHE_TTL_SECONDS,
    CONCURRENCY,
    UPSTASH_REDIS_REST_TOKEN,
    UPSTASH_REDIS_REST_URL,
)


class RedisRestClient:
    """
    Singleton client for a key/value cache served over HTTP GET paths.
    Transport and parse failures never escape: reads return None, writes are dropped.
    """
    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not RedisRestClient._initialized:
            self.base_url = (UPSTASH_REDIS_REST_URL or "").rstrip("/")
            self.token = UPSTASH_REDIS_REST_TOKEN
            self.timeout_seconds = CACHE_REQUEST_TIMEOUT_SECONDS
            self.rate_limiter = AsyncLimiter(max_rate=CONCURRENCY, time_period=1.0)
            self._session: Optional[ClientSession] = None
            RedisRestClient._initialized = True

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            if self.timeout_seconds is not None:
                self._session = ClientSession(timeout=ClientTimeout(total=self.timeout_seconds))
            else:
                self._session = ClientSession()
        return self._session

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def get(self, key: str) -> Optional[str]:
        """
        Read the raw stored string for a key.

        Args:
            key: Cache key.

        Returns:
            The stored value, or None on a miss or any failure.
        """
        url = f"{self.base_url}/get/{quote(key, safe='')}"
        try:
            async with self.rate_limiter:
                session = await self._get_session()
                async with session.get(url, headers=self._headers()) as resp:
                    if resp.status >= 400:
                        logger.debug(f"⚠️ Cache GET '{key}' returned HTTP {resp.status}")
                        return None
                    data = await resp.json(content_type=None)
                    if not isinstance(data, dict):
                        return None
                    return data.get("result")
        except Exception as e:
            logger.debug(f"⚠️ Cache GET '{key}' failed: {e}")
            return None

    async def set(self, key: str, value: str, px: int = CACHE_TTL_SECONDS * 1000) -> None:
        """
        Write a raw string with a per-key expiry in milliseconds. Failures are swallowed.

        Args:
            key: Cache key.
            value: Serialized value.
            px: Expiry in milliseconds.
        """
        url = f"{self.base_url}/set/{quote(key, safe='')}/{quote(value, safe='')}/px/{px}"
        try:
            async with self.rate_limiter:
                session = await self._get_session()
                async with session.get(url, headers=self._headers()) as resp:
                    if resp.status >= 400:
                        logger.debug(f"⚠️ Cache SET '{key}' returned HTTP {resp.status}")
        except Exception as e:
            logger.debug(f"⚠️ Cache SET '{key}' failed: {e}")

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
