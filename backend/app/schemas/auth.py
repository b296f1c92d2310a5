"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from backend.app.models.enums import UserRole


class UserRegister(BaseModel):
    """
    Schema for user registration.
    
    Used by POST /auth/register endpoint.
    Self-registered accounts always get the USER role.
    """
    name: str = Field(..., min_length=1, max_length=100, description="Full name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.strip().lower()


class UserLogin(BaseModel):
    """
    Schema for user login.
    
    Used by POST /auth/login endpoint.
    """
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class UserResponse(BaseModel):
    """
    Public view of a user.

    Used by GET /auth/me and embedded in token responses.
    """
    id: str
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """
    Schema for JWT token response.
    
    Returned by successful login/register operations.
    """
    success: bool = True
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", serialization_alias="tokenType", description="Token type")
    user: UserResponse


class Principal(BaseModel):
    """
    Authenticated identity attached to a request after token verification.
    """
    user_id: str
    role: UserRole
    email: Optional[str] = None
    token_id: Optional[str] = None
    expires_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
