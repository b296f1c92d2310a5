"""
User database model.

This module defines the User SQLAlchemy model for authentication.
"""

from sqlalchemy import Column, String, DateTime, Enum
from backend.app.db.session import Base
from backend.app.db.types import generate_id, utcnow
from backend.app.models.enums import UserRole


class User(Base):
    """
    User model for travelers and agency admins.

    Emails are stored lowercase and are unique. Only the bcrypt hash of
    the password is kept.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    role = Column(
        Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.USER,
        nullable=False,
    )

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
