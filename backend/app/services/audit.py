"""
Audit logging service for tracking security events and admin actions.

Entries are added to the caller's session and committed together with the
change they describe.
"""

from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    USER_REGISTERED = "USER_REGISTERED"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"

    TRIP_REQUEST_CREATED = "TRIP_REQUEST_CREATED"
    TRIP_STATUS_CHANGED = "TRIP_STATUS_CHANGED"
    TRIP_REQUEST_DELETED = "TRIP_REQUEST_DELETED"


def record_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[str] = None,
    actor_email: Optional[str] = None,
    target_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> AuditLog:
    """
    Add an audit entry to the session without committing.
    
    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_id: ID of user performing the action
        actor_email: Email of actor
        target_id: ID of the user or trip request acted upon
        metadata: Additional context as JSON
        ip_address: IP address of the request
        
    Returns:
        Pending AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        actor_email=actor_email,
        action=action,
        target_id=target_id,
        meta_data=metadata,
        ip_address=ip_address
    )
    db.add(audit_log)
    return audit_log


async def log_auth_event(
    db: AsyncSession,
    action: str,
    user_id: Optional[str],
    email: Optional[str],
    ip_address: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Log an authentication event (login success/failure, logout) and commit.
    
    Args:
        db: Database session
        action: AuditAction.LOGIN_SUCCESS, LOGIN_FAILED or LOGOUT
        user_id: ID of user attempting login
        email: Email attempting login
        ip_address: IP address of login attempt
        metadata: Additional context (e.g., failure reason)
        
    Returns:
        Created AuditLog instance
    """
    audit_log = record_event(
        db=db,
        action=action,
        actor_id=user_id,
        actor_email=email,
        ip_address=ip_address,
        metadata=metadata
    )
    await db.commit()
    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    target_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> List[AuditLog]:
    """
    Retrieve audit trail with optional filtering.
    
    Args:
        db: Database session
        target_id: Filter by target id
        action: Filter by action type
        limit: Maximum number of records to return
        
    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))
    
    if target_id:
        query = query.where(AuditLog.target_id == target_id)
    
    if action:
        query = query.where(AuditLog.action == action)
    
    query = query.limit(limit)
    
    result = await db.execute(query)
    return list(result.scalars().all())
