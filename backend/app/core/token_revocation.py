"""
Token Revocation System using Redis.

Implements token blacklisting so a logged-out token stops working
before it expires.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from backend.app.core.redis_client import get_redis
from backend.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


def _ttl_seconds(expires_at: Optional[datetime]) -> int:
    """Keep the blacklist entry until the token would have expired anyway."""
    if expires_at is None:
        return settings.access_token_expire_minutes * 60
    remaining = int((expires_at - datetime.now(timezone.utc)).total_seconds())
    return max(remaining, 1)


async def revoke_token(token_id: str, user_id: str, expires_at: Optional[datetime] = None) -> bool:
    """
    Revoke a specific JWT token by adding its jti to the blacklist.
    
    Args:
        token_id: The jti claim of the token to revoke
        user_id: User ID who owns the token
        expires_at: Token expiry, used as the blacklist TTL
        
    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        client = await get_redis()
        await client.setex(
            f"{TOKEN_BLACKLIST_PREFIX}{token_id}",
            _ttl_seconds(expires_at),
            str(user_id)  # Store user_id for audit purposes
        )
        return True
    except Exception as e:
        logger.error("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(token_id: Optional[str]) -> bool:
    """
    Check if a token has been revoked.
    
    Args:
        token_id: jti claim of the token to check
        
    Returns:
        True if token is revoked, False otherwise
    """
    if not token_id:
        return False
    try:
        client = await get_redis()
        exists = await client.exists(f"{TOKEN_BLACKLIST_PREFIX}{token_id}")
        return exists > 0
    except Exception as e:
        # Fail open: if Redis is down, allow the request (availability over strict logout)
        logger.warning("Error checking token revocation: %s", e)
        return False
