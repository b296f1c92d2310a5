"""
Audit Log Database Model.

Tracks logins and admin actions on trip requests.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from backend.app.db.session import Base
from backend.app.db.types import utcnow


class AuditLog(Base):
    """
    Audit log model for tracking security events and admin actions.
    
    Events logged:
    - USER_REGISTERED
    - LOGIN_SUCCESS / LOGIN_FAILED / LOGOUT
    - TRIP_REQUEST_CREATED
    - TRIP_STATUS_CHANGED / TRIP_REQUEST_DELETED
    """
    __tablename__ = "audit_logs"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Who performed the action (None for anonymous submissions)
    actor_id = Column(String(36), index=True, nullable=True)
    actor_email = Column(String(255), nullable=True)
    
    # What action was performed
    action = Column(String(100), nullable=False, index=True)
    
    # What it was performed on (user or trip request id)
    target_id = Column(String(36), index=True, nullable=True)
    
    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)
    
    # IP address for login tracking
    ip_address = Column(String(50), nullable=True)
    
    # Timestamp
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)
    
    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_email}, target={self.target_id})>"
