"""
Redis client initialization and connection management.

This module provides the Redis client used for token revocation.
"""

import redis.asyncio as redis
from backend.app.core.config import settings


# Create async Redis client
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """
    Get Redis client instance.
    
    Looked up at call time so tests can swap the module-level client.
    """
    return redis_client


async def ping_redis() -> bool:
    """
    Test Redis connection.
    
    Returns:
        True if connection successful, False otherwise
    """
    try:
        client = await get_redis()
        return bool(await client.ping())
    except Exception:
        return False
