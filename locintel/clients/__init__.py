"""Client singletons for external service interactions."""
from locintel.clients.redis_rest_client import RedisRestClient

__all__ = ["RedisRestClient"]
