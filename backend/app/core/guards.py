"""
Security guards for role-based and ownership-based access control.

Every trip request handler goes through can_access_trip; nothing
re-implements the owner/admin check inline.
"""

from fastapi import Depends
from backend.app.models.enums import UserRole
from backend.app.models.trip_request import TripRequest
from backend.app.core.dependencies import get_current_principal
from backend.app.core.exceptions import ForbiddenError
from backend.app.schemas.auth import Principal


class TripAction:
    """Actions a principal can attempt on a trip request."""
    READ = "read"
    UPDATE_STATUS = "update_status"
    DELETE = "delete"


def ensure_role(principal: Principal, role: UserRole) -> Principal:
    """
    Check that the principal has the given role.

    Raises:
        ForbiddenError if the role does not match
    """
    if principal.role != role:
        raise ForbiddenError(
            f"Access denied. Required role: {role.value}",
            details={"required_role": role.value}
        )
    return principal


def require_role(role: UserRole):
    """
    Dependency factory for role-based access control.
    
    Usage:
        @router.get("/trips")
        async def list_trips(principal: Principal = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    async def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        return ensure_role(principal, role)

    return role_checker


require_admin = require_role(UserRole.ADMIN)


def can_access_trip(principal: Principal, trip: TripRequest, action: str) -> bool:
    """
    Authorization predicate for trip requests.

    Admins may do everything. The owner may only read their own request.
    Anonymous requests have no owner, so only admins can see them.
    """
    if principal.role == UserRole.ADMIN:
        return True

    if action == TripAction.READ:
        return trip.user_id is not None and trip.user_id == principal.user_id

    return False


def authorize_trip_access(principal: Principal, trip: TripRequest, action: str) -> None:
    """
    Enforce can_access_trip.

    Raises:
        ForbiddenError if access is denied
    """
    if not can_access_trip(principal, trip, action):
        raise ForbiddenError(
            "Access denied. You do not have permission to access this trip request."
        )
