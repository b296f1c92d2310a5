"""
Tests for the admin bootstrap script.
"""

import pytest
from sqlalchemy import select

from backend.app.core.security import verify_password
from backend.app.models.enums import UserRole
from backend.app.models.user import User
from backend.create_admin import create_admin


@pytest.mark.asyncio
async def test_creates_admin(session_factory, client):
    admin = await create_admin("Ops", " Ops@Example.com ", "s3cret!", session_factory=session_factory)

    assert admin.role == UserRole.ADMIN
    assert admin.email == "ops@example.com"
    assert verify_password("s3cret!", admin.hashed_password)

    response = await client.post("/api/auth/login", json={"email": "ops@example.com", "password": "s3cret!"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_existing_email_is_skipped(session_factory, traveler):
    assert await create_admin("Ann", "ann@example.com", "whatever", session_factory=session_factory) is None

    async with session_factory() as db:
        user = (await db.execute(select(User).where(User.email == "ann@example.com"))).scalar_one()
    assert user.role == UserRole.USER
