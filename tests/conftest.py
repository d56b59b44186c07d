import pytest

from locintel import cache as cache_module


@pytest.fixture(autouse=True)
def fresh_cache(monkeypatch):
    """Force the in-process cache backend and start every test with an empty store."""
    monkeypatch.setattr(cache_module, "UPSTASH_REDIS_REST_URL", None)
    monkeypatch.setattr(cache_module, "UPSTASH_REDIS_REST_TOKEN", None)
    cache_module._client = cache_module._UNSET
    cache_module._memory_store.clear()
    yield cache_module
    cache_module._client = cache_module._UNSET
    cache_module._memory_store.clear()
