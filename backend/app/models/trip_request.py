"""
Trip request database model.

A trip request is a lead submitted through the public "plan a trip" form.
"""

from sqlalchemy import Column, String, Integer, Text, Date, DateTime, Enum
from backend.app.db.session import Base
from backend.app.db.types import generate_id, utcnow
from backend.app.models.enums import TripStatus


class TripRequest(Base):
    """
    Trip request model.

    Status changes go through the lifecycle rules in
    backend.app.domain.trip_requests.lifecycle; the column itself only
    ever holds one of the TripStatus values.
    """
    __tablename__ = "trip_requests"

    id = Column(String(36), primary_key=True, default=generate_id)

    # Optional back-reference to the submitting user. No foreign key:
    # requests outlive their owner and keep the dangling id.
    user_id = Column(String(36), index=True, nullable=True)

    # Traveler contact
    full_name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)

    # Trip details
    destination = Column(String(200), nullable=False)
    departure_city = Column(String(200), nullable=False)
    take_off_day = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    people = Column(Integer, nullable=False)
    visa_type = Column(String(100), nullable=False)
    preferences = Column(Text, nullable=True)

    # Status
    status = Column(
        Enum(TripStatus, values_callable=lambda statuses: [s.value for s in statuses]),
        default=TripStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<TripRequest(id={self.id}, destination='{self.destination}', status='{self.status.value}')>"
