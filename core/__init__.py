"""
Cart Sync Core Module

This package contains:
- cart: line items, local storage, backend client, state container, record store
- db: Upstash Redis client for cart records
- auth: bearer session lookup for the cart endpoints
- routers: FastAPI routers

Note: The Redis client is created lazily, on first use by the record store.
"""

__all__ = [
    "get_redis",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "get_redis":
        from core.db import get_redis
        return get_redis
    raise AttributeError(f"module 'core' has no attribute '{name}'")
