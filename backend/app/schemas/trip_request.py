"""
Trip request schemas.

The public form and the dashboard speak camelCase JSON (fullName,
takeOffDay, ...); fields are snake_case in Python and aliased on the wire.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from backend.app.models.enums import TripStatus

# Same loose shape check the submission form has always used: something@something.tld
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

# Upper bound on travelers per request; also keeps the value inside a 32-bit column
MAX_PARTY_SIZE = 100


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def _blank_to_none(value: Any) -> Any:
    # HTML forms send "" for untouched optional inputs
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid email")
    return value


class TripRequestCreate(CamelModel):
    """
    Schema for a trip request submitted through POST /plan-trip.
    """
    full_name: str = Field(..., min_length=1, max_length=200, description="Traveler full name")
    email: str = Field(..., max_length=255, description="Traveler email")
    phone: Optional[str] = Field(default=None, max_length=50)
    destination: str = Field(..., min_length=1, max_length=200)
    departure_city: str = Field(..., min_length=1, max_length=200)
    take_off_day: date = Field(..., description="Take-off date (YYYY-MM-DD)")
    return_date: Optional[date] = None
    people: int = Field(..., ge=1, le=MAX_PARTY_SIZE, description="Number of travelers")
    visa_type: str = Field(..., min_length=1, max_length=100)
    preferences: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("phone", "return_date", "preferences", mode="before")
    @classmethod
    def blank_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("people", mode="before")
    @classmethod
    def people_not_bool(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("Number of travelers must be a whole number")
        return value

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        return _check_email(value)

    @model_validator(mode="after")
    def return_after_take_off(self) -> "TripRequestCreate":
        if self.return_date is not None and self.return_date < self.take_off_day:
            raise ValueError("Return date cannot be before the take-off date")
        return self


class TripStatusUpdate(CamelModel):
    """
    Body of PUT /trips/{id}.

    Kept as a plain string so unknown values reach the lifecycle check
    and are reported as a validation error with the allowed statuses.
    """
    status: str


class TripOwner(CamelModel):
    name: str
    email: str


class TripRequestResponse(CamelModel):
    """Schema for trip request response."""
    id: str
    user_id: Optional[str] = None
    full_name: str
    email: str
    phone: Optional[str] = None
    destination: str
    departure_city: str
    take_off_day: date
    return_date: Optional[date] = None
    people: int
    visa_type: str
    preferences: Optional[str] = None
    status: TripStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TripRequestWithOwner(TripRequestResponse):
    """Dashboard view: includes the linked account, if any."""
    owner: Optional[TripOwner] = None


class PlanTripResponse(CamelModel):
    success: bool = True
    message: str
    request_id: str


class TripRequestDetailResponse(CamelModel):
    success: bool = True
    trip: TripRequestResponse


class TripStatusUpdateResponse(CamelModel):
    success: bool = True
    message: str
    trip: TripRequestResponse


class TripListResponse(CamelModel):
    success: bool = True
    count: int
    trips: List[TripRequestResponse]


class AdminTripListResponse(CamelModel):
    success: bool = True
    count: int
    trips: List[TripRequestWithOwner]


class TripStatsResponse(CamelModel):
    success: bool = True
    total: int
    by_status: Dict[str, int]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
