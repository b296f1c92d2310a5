"""
API Router.

Aggregates all API endpoints under settings.api_prefix.
"""

from fastapi import APIRouter
from backend.app.api.endpoints import auth, leads, trips

router = APIRouter()

# Authentication endpoints
router.include_router(auth.router)

# Public lead capture (plan-trip, contact)
router.include_router(leads.router)

# Dashboard / my trips
router.include_router(trips.router)
