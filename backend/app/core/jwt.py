"""
JWT token utilities for authentication.

This module issues and verifies the bearer tokens used by every protected
endpoint. Verification is pure: no database or network access.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from backend.app.core.config import settings
from backend.app.core.exceptions import ExpiredTokenError, InvalidTokenError
from backend.app.schemas.auth import Principal


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.
    
    Args:
        data: Data payload to encode in the token (should include: sub, role)
        expires_delta: Optional custom expiration time
        
    Returns:
        Encoded JWT token string
        
    Example payload:
        {
            "sub": "5f0c...",
            "role": "admin",
            "email": "admin@example.com",
            "jti": "9b1d...",
            "exp": 1234567890
        }
    """
    to_encode = data.copy()
    
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    
    to_encode.update({"exp": expire})
    to_encode.setdefault("jti", uuid.uuid4().hex)
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    
    return encoded_jwt


def issue_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Issue an access token for a User row."""
    return create_access_token(
        data={
            "sub": user.id,
            "role": user.role.value,
            "email": user.email,
        },
        expires_delta=expires_delta,
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT access token.
    
    Args:
        token: JWT token string to decode
        
    Returns:
        Decoded token payload (includes: sub, role, email, jti, exp)

    Raises:
        ExpiredTokenError: token is past its expiry
        InvalidTokenError: bad signature or malformed token
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError:
        raise InvalidTokenError()


def verify_token(token: str) -> Principal:
    """
    Verify a bearer token and map it to a Principal.

    Raises:
        ExpiredTokenError, InvalidTokenError
    """
    payload = decode_access_token(token)

    subject = payload.get("sub")
    if not subject:
        raise InvalidTokenError("Invalid token payload")

    exp = payload.get("exp")
    try:
        return Principal(
            user_id=subject,
            role=payload.get("role"),
            email=payload.get("email"),
            token_id=payload.get("jti"),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
        )
    except PydanticValidationError:
        raise InvalidTokenError("Invalid token payload")
