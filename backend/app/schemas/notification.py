"""
Email notification result schemas.

Only used for logging and diagnostics; never returned to the submitter.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DeliveryStatus(BaseModel):
    """Outcome of a single email send."""
    sent: bool = False
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "DeliveryStatus":
        return cls(sent=True)

    @classmethod
    def failed(cls, error: str) -> "DeliveryStatus":
        return cls(sent=False, error=error)


class NotificationResult(BaseModel):
    """
    Outcome of notifying about a new lead.

    Serialized as {"agencyEmail": {...}, "customerEmail": {...}}.
    """
    agency_email: DeliveryStatus = Field(default_factory=DeliveryStatus)
    customer_email: DeliveryStatus = Field(default_factory=DeliveryStatus)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def as_log_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
