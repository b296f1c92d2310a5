"""
Contact form schema.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from backend.app.schemas.trip_request import CamelModel, _blank_to_none, _check_email


class ContactMessage(CamelModel):
    """
    Schema for POST /contact.

    Contact messages are not stored; they only trigger an email to the agency.
    """
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    message: str = Field(..., min_length=1, max_length=5000)

    @field_validator("phone", mode="before")
    @classmethod
    def blank_phone(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        return _check_email(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
