import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from locintel.clients import redis_rest_client as client_module
from locintel.clients.redis_rest_client import RedisRestClient


@pytest.fixture
def client(monkeypatch):
    """Fresh singleton wired to a fake session."""
    monkeypatch.setattr(client_module, "UPSTASH_REDIS_REST_URL", "https://cache.example/")
    monkeypatch.setattr(client_module, "UPSTASH_REDIS_REST_TOKEN", "secret")
    RedisRestClient._instance = None
    RedisRestClient._initialized = False

    instance = RedisRestClient()
    instance._session = MagicMock(closed=False)
    yield instance

    RedisRestClient._instance = None
    RedisRestClient._initialized = False


def _response(status=200, payload=None):
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=payload)
    return resp


def test_singleton(client):
    assert RedisRestClient() is client
    assert client.base_url == "https://cache.example"


@pytest.mark.asyncio
async def test_get_returns_result(client):
    client._session.get.return_value.__aenter__.return_value = _response(
        payload={"result": '{"a": 1}'}
    )

    assert await client.get("li:12.97160:77.59460::") == '{"a": 1}'

    args, kwargs = client._session.get.call_args
    assert args[0] == "https://cache.example/get/li%3A12.97160%3A77.59460%3A%3A"
    assert kwargs["headers"] == {"Authorization": "Bearer secret"}


@pytest.mark.asyncio
async def test_get_missing_key(client):
    client._session.get.return_value.__aenter__.return_value = _response(payload={"result": None})
    assert await client.get("nope") is None


@pytest.mark.asyncio
async def test_get_http_error_is_a_miss(client):
    client._session.get.return_value.__aenter__.return_value = _response(status=401)
    assert await client.get("k") is None


@pytest.mark.asyncio
async def test_get_transport_error_is_a_miss(client):
    client._session.get.side_effect = aiohttp.ClientConnectionError("connection refused")
    assert await client.get("k") is None


@pytest.mark.asyncio
async def test_get_unexpected_payload_is_a_miss(client):
    client._session.get.return_value.__aenter__.return_value = _response(payload=["not", "a", "dict"])
    assert await client.get("k") is None


@pytest.mark.asyncio
async def test_set_sends_expiry_in_milliseconds(client):
    client._session.get.return_value.__aenter__.return_value = _response(payload={"result": "OK"})

    await client.set("k", '{"v": 1}')

    args, _ = client._session.get.call_args
    assert args[0] == "https://cache.example/set/k/%7B%22v%22%3A%201%7D/px/3600000"


@pytest.mark.asyncio
async def test_set_failure_is_swallowed(client):
    client._session.get.side_effect = aiohttp.ClientConnectionError("connection refused")
    assert await client.set("k", "1") is None


@pytest.mark.asyncio
async def test_close(client):
    session = client._session
    session.close = AsyncMock()

    await client.close()

    session.close.assert_awaited_once()
    assert client._session is None
