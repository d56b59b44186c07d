"""
Cache for location intelligence lookups.

Uses the REST Redis client when both UPSTASH_REDIS_REST_URL and
UPSTASH_REDIS_REST_TOKEN are configured, otherwise an in-process store.
The choice is made on first use and kept for the life of the process.
"""
import json
import time
from typing import Any, Dict, Optional
from loguru import logger

from locintel.clients import RedisRestClient
from locintel.config import CACHE_TTL_SECONDS, UPSTASH_REDIS_REST_TOKEN, UPSTASH_REDIS_REST_URL
from locintel.models import CacheEntry

_UNSET = object()

# Remote client, None for the in-process fallback, or _UNSET before first use
_client: Any = _UNSET

# Entries leave only when read after expiry; there is no size bound
_memory_store: Dict[str, CacheEntry] = {}


def _now_ms() -> float:
    return time.time() * 1000


def _get_client() -> Optional[RedisRestClient]:
    global _client
    if _client is _UNSET:
        if UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN:
            _client = RedisRestClient()
            logger.debug("Using remote REST cache backend")
        else:
            _client = None
            logger.debug("Remote cache not configured; using in-process cache")
    return _client


async def cache_get(key: str) -> Any:
    """
    Look up a cached value.

    Args:
        key (str): Cache key.

    Returns:
        Any: The deserialized value, or None on miss, expiry or any failure.
    """
    client = _get_client()
    if client:
        raw = await client.get(key)
        if raw:
            try:
                return json.loads(raw)
            except (TypeError, ValueError):
                logger.debug(f"Ignoring unparseable remote cache entry '{key}'")
                return None
        return None

    entry = _memory_store.get(key)
    if entry and entry.expires_at > _now_ms():
        try:
            return json.loads(entry.value)
        except ValueError:
            logger.debug(f"Dropping corrupt cache entry '{key}'")
            _memory_store.pop(key, None)
            return None
    if entry:
        _memory_store.pop(key, None)
    return None


async def cache_set(key: str, value: Any) -> None:
    """
    Store a JSON-serializable value for CACHE_TTL_SECONDS. Never raises.

    Args:
        key (str): Cache key.
        value (Any): Value to serialize and store.
    """
    try:
        serialized = json.dumps(value)
    except (TypeError, ValueError) as e:
        logger.debug(f"Skipping cache write for '{key}': {e}")
        return

    client = _get_client()
    if client:
        await client.set(key, serialized)
        return

    _memory_store[key] = CacheEntry(
        value=serialized,
        expires_at=_now_ms() + CACHE_TTL_SECONDS * 1000,
    )


def _fixed5(value: float) -> str:
    text = f"{value:.5f}"
    # -0.000001 and 0.000001 are the same cell
    return "0.00000" if text == "-0.00000" else text


def location_intel_cache_key(
    lat: float,
    lng: float,
    property_type: Optional[str] = None,
    business_type: Optional[str] = None,
) -> str:
    """Build the cache key for a location lookup (~1m precision plus filter dimensions)."""
    return f"li:{_fixed5(lat)}:{_fixed5(lng)}:{property_type or ''}:{business_type or ''}"


async def close_cache():
    """Close the remote client session, if one was created."""
    if _client is not _UNSET and _client is not None:
        await _client.close()
