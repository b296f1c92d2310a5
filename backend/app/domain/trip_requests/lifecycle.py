"""
Trip Request Lifecycle (Domain Logic).

Finite state machine for trip request status:

    pending ---> contacted ---> completed
       |             |
       +-------------+-----> cancelled

completed and cancelled are terminal. Nothing moves back into pending;
a request is only ever pending because it was just created. Setting a
request to the status it already has is always allowed.
"""

from typing import Any, Dict, FrozenSet

from backend.app.core.exceptions import InvalidStatusTransitionError, ValidationError
from backend.app.models.enums import TripStatus

INITIAL_STATUS = TripStatus.PENDING

TERMINAL_STATUSES: FrozenSet[TripStatus] = frozenset({TripStatus.COMPLETED, TripStatus.CANCELLED})

ALLOWED_TRANSITIONS: Dict[TripStatus, FrozenSet[TripStatus]] = {
    TripStatus.PENDING: frozenset({TripStatus.CONTACTED, TripStatus.CANCELLED}),
    TripStatus.CONTACTED: frozenset({TripStatus.COMPLETED, TripStatus.CANCELLED}),
    TripStatus.COMPLETED: frozenset(),
    TripStatus.CANCELLED: frozenset(),
}


def parse_status(value: Any) -> TripStatus:
    """
    Convert a raw value into a TripStatus.

    Raises:
        ValidationError for anything outside the four known statuses
    """
    if isinstance(value, TripStatus):
        return value
    try:
        return TripStatus(value)
    except ValueError:
        raise ValidationError(
            "Invalid status",
            details={
                "status": value if isinstance(value, (str, int, float, bool)) or value is None else str(value),
                "allowed": [s.value for s in TripStatus],
            }
        )


def is_terminal(status: TripStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: TripStatus, target: TripStatus) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def validate_transition(current: TripStatus, target: TripStatus) -> TripStatus:
    """
    Check a status change against the lifecycle.

    Returns:
        The target status

    Raises:
        InvalidStatusTransitionError if the move is not allowed
    """
    if not can_transition(current, target):
        raise InvalidStatusTransitionError(current.value, target.value)
    return target
