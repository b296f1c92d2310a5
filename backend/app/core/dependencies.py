"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from backend.app.core.exceptions import AuthenticationError, TokenRevokedError
from backend.app.core.jwt import verify_token
from backend.app.core.token_revocation import is_token_revoked
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.auth import Principal

# HTTP Bearer security scheme. auto_error is off so a missing header
# becomes our own 401 instead of FastAPI's default response.
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Principal:
    """
    FastAPI dependency for JWT authentication.
    
    Security checks:
    1. Validates JWT token signature and expiry
    2. Checks if token has been revoked (logout)
    3. Verifies the user still exists (real-time check)
    
    Args:
        credentials: HTTP Bearer token from request header
        db: Database session for the user lookup
        
    Returns:
        Principal for the authenticated user
        
    Raises:
        AuthenticationError: 401 if authentication fails for any reason
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    # 1. Decode and validate JWT (raises InvalidTokenError / ExpiredTokenError)
    principal = verify_token(credentials.credentials)

    # 2. Check if this specific token has been revoked
    if await is_token_revoked(principal.token_id):
        raise TokenRevokedError()

    # 3. Real-time database check: the account must still exist
    result = await db.execute(select(User.id).where(User.id == principal.user_id))
    if result.scalar_one_or_none() is None:
        raise AuthenticationError("User not found")

    return principal


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[Principal]:
    """
    Resolve the caller on public routes.

    Returns None instead of failing when there is no usable token, so an
    anonymous submission is never rejected because of a stale login.
    """
    if credentials is None:
        return None
    try:
        return await get_current_principal(credentials, db)
    except AuthenticationError:
        return None
