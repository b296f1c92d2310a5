"""
Column default helpers shared by the models.
"""

import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """Opaque primary key for users and trip requests."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    Stored naive so values read back from SQLite and PostgreSQL compare
    cleanly with freshly created ones.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
