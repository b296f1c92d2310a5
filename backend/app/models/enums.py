"""
Enumerations for users and trip requests.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Traveler who can submit and view their own trip requests (default role)
        ADMIN: Agency staff with access to the dashboard
    """
    USER = "user"
    ADMIN = "admin"


class TripStatus(str, enum.Enum):
    """Trip request status enumeration."""
    PENDING = "pending"  # Submitted, nobody has reached out yet
    CONTACTED = "contacted"  # Agency has contacted the traveler
    COMPLETED = "completed"  # Trip arranged
    CANCELLED = "cancelled"  # Dropped by the agency or the traveler
