"""
Public lead capture endpoints.

POST /plan-trip stores a trip request and answers as soon as it is
committed; emails go out afterwards as a background task.
POST /contact only sends emails.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.dependencies import get_optional_principal
from backend.app.db.session import get_db
from backend.app.schemas.auth import Principal
from backend.app.schemas.contact import ContactMessage
from backend.app.schemas.trip_request import MessageResponse, PlanTripResponse, TripRequestCreate, TripRequestResponse
from backend.app.services.email_notifier import (
    TripNotifier,
    dispatch_contact_notification,
    dispatch_new_request_notification,
    get_notifier,
)
from backend.app.services.trip_request_service import TripRequestService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Leads"])


@router.post("/plan-trip", response_model=PlanTripResponse)
async def plan_trip(
    data: TripRequestCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    principal: Optional[Principal] = Depends(get_optional_principal),
    notifier: TripNotifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db)
):
    """
    Submit a trip request.

    Anonymous submissions are accepted; a valid bearer token links the
    request to the caller's account so it shows up under /trips/my.
    """
    trip = await TripRequestService.create(
        db,
        data,
        user_id=principal.user_id if principal else None,
        ip_address=request.client.host if request.client else None
    )

    # Detached snapshot: the session is gone by the time the task runs
    snapshot = TripRequestResponse.model_validate(trip)
    background_tasks.add_task(dispatch_new_request_notification, notifier, snapshot)

    return PlanTripResponse(
        message="Trip request received! We'll contact you soon.",
        request_id=trip.id
    )


@router.post("/contact", response_model=MessageResponse)
async def contact(
    message: ContactMessage,
    background_tasks: BackgroundTasks,
    notifier: TripNotifier = Depends(get_notifier)
):
    """Forward a contact form message to the agency. Nothing is stored."""
    logger.info("Contact message received from %s", message.email)
    background_tasks.add_task(dispatch_contact_notification, notifier, message)
    return MessageResponse(message="Message received! We'll get back to you soon.")
