"""
Trip request dashboard endpoints.

Admins see and manage every request; travelers can only read their own.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import get_current_principal
from backend.app.core.guards import TripAction, authorize_trip_access, require_admin
from backend.app.db.session import get_db
from backend.app.schemas.auth import Principal
from backend.app.schemas.trip_request import (
    AdminTripListResponse,
    MessageResponse,
    TripListResponse,
    TripRequestDetailResponse,
    TripRequestResponse,
    TripStatsResponse,
    TripStatusUpdate,
    TripStatusUpdateResponse,
)
from backend.app.services.trip_request_service import TripRequestService

router = APIRouter(prefix="/trips", tags=["Trips"])


@router.get("", response_model=AdminTripListResponse)
async def list_trips(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All trip requests, newest first (admin only)."""
    trips = await TripRequestService.list_all(db)
    return AdminTripListResponse(count=len(trips), trips=trips)


@router.get("/stats", response_model=TripStatsResponse)
async def trip_stats(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Number of trip requests per status (admin only)."""
    counts = await TripRequestService.count_by_status(db)
    return TripStatsResponse(total=sum(counts.values()), by_status=counts)


@router.get("/my", response_model=TripListResponse)
async def list_my_trips(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """The caller's own trip requests, newest first."""
    trips = await TripRequestService.list_by_owner(db, principal.user_id)
    return TripListResponse(
        count=len(trips),
        trips=[TripRequestResponse.model_validate(trip) for trip in trips]
    )


@router.get("/{trip_id}", response_model=TripRequestDetailResponse)
async def get_trip(
    trip_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """A single trip request (owner or admin)."""
    trip = await TripRequestService.get_by_id(db, trip_id)
    authorize_trip_access(principal, trip, TripAction.READ)
    return TripRequestDetailResponse(trip=TripRequestResponse.model_validate(trip))


@router.put("/{trip_id}", response_model=TripStatusUpdateResponse)
async def update_trip_status(
    trip_id: str,
    update: TripStatusUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Change the status of a trip request (admin only)."""
    trip = await TripRequestService.update_status(db, trip_id, update.status, actor=principal)
    return TripStatusUpdateResponse(
        message="Trip request updated",
        trip=TripRequestResponse.model_validate(trip)
    )


@router.delete("/{trip_id}", response_model=MessageResponse)
async def delete_trip(
    trip_id: str,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a trip request (admin only)."""
    await TripRequestService.delete(db, trip_id, actor=principal)
    return MessageResponse(message="Trip request deleted")
