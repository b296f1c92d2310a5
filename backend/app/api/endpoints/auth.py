"""
Authentication API endpoints.

Provides register, login, logout and user info endpoints.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.models.enums import UserRole
from backend.app.schemas.auth import Principal, UserRegister, UserLogin, TokenResponse, UserResponse
from backend.app.schemas.trip_request import MessageResponse
from backend.app.core.security import get_password_hash, verify_password
from backend.app.core.jwt import issue_token
from backend.app.core.dependencies import get_current_principal
from backend.app.core.exceptions import AuthenticationError, ResourceNotFoundError, ValidationError
from backend.app.core.token_revocation import revoke_token
from backend.app.services.audit import AuditAction, log_auth_event, record_event

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new traveler account.
    
    Admin accounts are never created here; use the create_admin script.
    """
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        raise ValidationError("Email already registered", details={"field": "email"})

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        role=UserRole.USER,
    )
    db.add(new_user)

    try:
        await db.flush()
        record_event(
            db,
            action=AuditAction.USER_REGISTERED,
            actor_id=new_user.id,
            actor_email=new_user.email,
            target_id=new_user.id,
            ip_address=_client_ip(request)
        )
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ValidationError("Email already registered", details={"field": "email"})

    await db.refresh(new_user)

    return TokenResponse(
        token=issue_token(new_user),
        user=UserResponse.model_validate(new_user)
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Login user and return JWT token.
    
    Logs successful and failed login attempts for security monitoring.
    """
    email = credentials.email.strip().lower()
    ip_address = _client_ip(request)

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    
    if not user:
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            user_id=None,
            email=email,
            ip_address=ip_address,
            metadata={"reason": "User not found"}
        )
        raise AuthenticationError("Invalid credentials")
    
    if not verify_password(credentials.password, user.hashed_password):
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            user_id=user.id,
            email=user.email,
            ip_address=ip_address,
            metadata={"reason": "Invalid password"}
        )
        raise AuthenticationError("Invalid credentials")
    
    access_token = issue_token(user)
    
    await log_auth_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        user_id=user.id,
        email=user.email,
        ip_address=ip_address
    )
    
    return TokenResponse(
        token=access_token,
        user=UserResponse.model_validate(user)
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the token used for this request.
    """
    revoked = False
    if principal.token_id:
        revoked = await revoke_token(principal.token_id, principal.user_id, principal.expires_at)

    await log_auth_event(
        db=db,
        action=AuditAction.LOGOUT,
        user_id=principal.user_id,
        email=principal.email,
        ip_address=_client_ip(request),
        metadata={"revoked": revoked}
    )
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """
    Get current authenticated user information.
    
    Requires valid JWT token in Authorization header.
    """
    result = await db.execute(select(User).where(User.id == principal.user_id))
    user = result.scalar_one_or_none()
    
    if not user:
        raise ResourceNotFoundError("User", principal.user_id)
    
    return UserResponse.model_validate(user)
