"""Shared fixtures: a throwaway SQLite database and an ASGI test client."""

from __future__ import annotations

import os
from pathlib import Path
import sys

os.environ["DB_URL"] = "sqlite+aiosqlite:///./test_feednet.db"
os.environ["JWT_SECRET"] = "test-jwt-secret-for-feednet"
os.environ["SUPER_ADMIN_EMAILS"] = "root@example.com"
os.environ["NEED_RESET_ENABLED"] = "false"
os.environ["NEED_RETRY_BACKOFF_SECONDS"] = "0"
os.environ["NEED_TIMEZONE"] = "UTC"
os.environ["IDENTITY_REVOKE_URL"] = ""

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import SessionFactory, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base, FoodItem, Identity, School, User, UserRole  # noqa: E402
from app.models.base import new_id  # noqa: E402
from app.utils import create_access_token, hash_password  # noqa: E402


@pytest.fixture(autouse=True)
async def database():
    """Fresh tables for every test."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory():
    return SessionFactory


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_school(session_factory):
    async def _make(total_food_needed: int | None = 10, name: str = "Hillside School") -> School:
        async with session_factory() as session:
            school = School(
                id=new_id(),
                name=name,
                address="12 Hill Road",
                phone_number="5551234567",
                total_food_needed=total_food_needed,
            )
            session.add(school)
            await session.commit()
            return school

    return _make


@pytest.fixture
def make_food_item(session_factory):
    async def _make(school: School, name: str = "Rice") -> FoodItem:
        async with session_factory() as session:
            item = FoodItem(id=new_id(), name=name, school_id=school.id)
            session.add(item)
            await session.commit()
            return item

    return _make


@pytest.fixture
def make_user(session_factory):
    """Create an identity plus profile; returns ``(user, bearer headers)``."""

    async def _make(
        name: str = "Dana Donor",
        email: str | None = None,
        role: UserRole = UserRole.DONOR,
        school_id: str | None = None,
        phone: str = "5550001111",
        with_profile: bool = True,
    ):
        email = email or f"{new_id()[:8]}@example.com"
        async with session_factory() as session:
            identity = Identity(id=new_id(), email=email, password_hash=hash_password("secret1"))
            session.add(identity)
            user = None
            if with_profile:
                user = User(
                    id=identity.id,
                    name=name,
                    email=email,
                    phone=phone,
                    role=role,
                    school_id=school_id,
                )
                session.add(user)
            await session.commit()

        token = create_access_token(subject=identity.id, email=email)
        return user or identity, {"Authorization": f"Bearer {token}"}

    return _make
