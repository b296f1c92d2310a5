"""
Trip Request Service.

Owns persistence of trip requests. Every mutation is committed before the
method returns; a failed commit is rolled back and re-raised.
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy import select, desc, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.core.guards import TripAction, authorize_trip_access
from backend.app.db.types import utcnow
from backend.app.domain.trip_requests.lifecycle import INITIAL_STATUS, parse_status, validate_transition
from backend.app.models.enums import TripStatus
from backend.app.models.trip_request import TripRequest
from backend.app.models.user import User
from backend.app.schemas.auth import Principal
from backend.app.schemas.trip_request import TripOwner, TripRequestCreate, TripRequestWithOwner
from backend.app.services.audit import AuditAction, record_event

logger = logging.getLogger(__name__)


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise


class TripRequestService:

    @staticmethod
    async def create(
        db: AsyncSession,
        data: TripRequestCreate,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None
    ) -> TripRequest:
        """
        Persist a new trip request with status pending.

        Input has already been validated by TripRequestCreate, so a bad
        submission never reaches this point and never creates a row.
        """
        now = utcnow()
        trip = TripRequest(
            user_id=user_id,
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
            destination=data.destination,
            departure_city=data.departure_city,
            take_off_day=data.take_off_day,
            return_date=data.return_date,
            people=data.people,
            visa_type=data.visa_type,
            preferences=data.preferences,
            status=INITIAL_STATUS,
            created_at=now,
            updated_at=now,
        )
        db.add(trip)
        await db.flush()

        record_event(
            db,
            action=AuditAction.TRIP_REQUEST_CREATED,
            actor_id=user_id,
            actor_email=data.email,
            target_id=trip.id,
            metadata={"destination": data.destination},
            ip_address=ip_address
        )
        await _commit(db)

        logger.info("Trip request %s created (destination=%s, owner=%s)", trip.id, trip.destination, user_id)
        return trip

    @staticmethod
    async def list_all(db: AsyncSession) -> List[TripRequestWithOwner]:
        """All trip requests, newest first, with the linked account when there is one."""
        result = await db.execute(
            select(TripRequest, User)
            .outerjoin(User, User.id == TripRequest.user_id)
            .order_by(desc(TripRequest.created_at))
        )

        trips = []
        for trip, owner in result.all():
            item = TripRequestWithOwner.model_validate(trip)
            if owner is not None:
                item.owner = TripOwner(name=owner.name, email=owner.email)
            trips.append(item)
        return trips

    @staticmethod
    async def list_by_owner(db: AsyncSession, user_id: str) -> List[TripRequest]:
        """Trip requests linked to one user, newest first."""
        result = await db.execute(
            select(TripRequest)
            .where(TripRequest.user_id == user_id)
            .order_by(desc(TripRequest.created_at))
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_by_id(db: AsyncSession, trip_id: str) -> TripRequest:
        """
        Raises:
            ResourceNotFoundError if there is no such trip request
        """
        result = await db.execute(select(TripRequest).where(TripRequest.id == trip_id))
        trip = result.scalar_one_or_none()
        if trip is None:
            raise ResourceNotFoundError("Trip request", trip_id)
        return trip

    @staticmethod
    async def update_status(
        db: AsyncSession,
        trip_id: str,
        new_status,
        actor: Principal
    ) -> TripRequest:
        """
        Move a trip request to a new status.

        Re-setting the current status is accepted and still refreshes
        updated_at.

        Raises:
            ValidationError: unknown status or transition not allowed
            ForbiddenError: actor is not allowed to change the status
            ResourceNotFoundError: no such trip request
        """
        trip = await TripRequestService.get_by_id(db, trip_id)
        authorize_trip_access(actor, trip, TripAction.UPDATE_STATUS)
        target = parse_status(new_status)
        previous = trip.status
        validate_transition(previous, target)

        now = utcnow()
        if trip.updated_at is not None and now <= trip.updated_at:
            now = trip.updated_at + timedelta(microseconds=1)

        trip.status = target
        trip.updated_at = now

        record_event(
            db,
            action=AuditAction.TRIP_STATUS_CHANGED,
            actor_id=actor.user_id,
            actor_email=actor.email,
            target_id=trip.id,
            metadata={"from": previous.value, "to": target.value}
        )
        await _commit(db)

        logger.info("Trip request %s status %s -> %s", trip.id, previous.value, target.value)
        return trip

    @staticmethod
    async def delete(db: AsyncSession, trip_id: str, actor: Principal) -> None:
        """
        Hard delete a trip request.

        Raises:
            ResourceNotFoundError if there is no such trip request
        """
        trip = await TripRequestService.get_by_id(db, trip_id)
        authorize_trip_access(actor, trip, TripAction.DELETE)
        await db.delete(trip)

        record_event(
            db,
            action=AuditAction.TRIP_REQUEST_DELETED,
            actor_id=actor.user_id,
            actor_email=actor.email,
            target_id=trip_id,
            metadata={"destination": trip.destination, "status": trip.status.value}
        )
        await _commit(db)

        logger.info("Trip request %s deleted", trip_id)

    @staticmethod
    async def count_by_status(db: AsyncSession) -> Dict[str, int]:
        """Number of trip requests per status; every status is present."""
        result = await db.execute(
            select(TripRequest.status, func.count(TripRequest.id)).group_by(TripRequest.status)
        )
        counts = {status.value: 0 for status in TripStatus}
        for status, count in result.all():
            counts[TripStatus(status).value] = count
        return counts
