"""Redis access for cart records."""
from core.db import RedisKeys, get_redis

__all__ = ["get_redis", "RedisKeys"]
