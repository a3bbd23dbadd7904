"""
Test configuration and fixtures.

Provides:
- Fresh schema per test (in-memory SQLite unless DATABASE_URL is set)
- Seeded partnerships from the bundled catalog
- Session token minting for users and instructors
- HTTPX AsyncClient with cookies and CSRF header
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["TESTING"] = "1"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from offer_tracker.core.catalog import PartnershipCatalog, get_catalog
from offer_tracker.core.deps import COOKIE_NAME, INSTRUCTOR_COOKIE_NAME, get_db
from offer_tracker.core.security import create_session_token
from offer_tracker.db.base import Base
from offer_tracker.db.enums import IdentityKind
from offer_tracker.db.models import Instructor, Partnership, User
from offer_tracker.db.session import SessionLocal, engine
from offer_tracker.main import app
from offer_tracker.services import partnership_service

CSRF_HEADERS = {"X-Requested-With": "XMLHttpRequest"}


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Session on a freshly created schema.

    Application code commits freely; the schema is dropped afterwards.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def catalog() -> PartnershipCatalog:
    return get_catalog()


@pytest.fixture(scope="function")
def partnerships(db: Session, catalog: PartnershipCatalog) -> dict[int, Partnership]:
    """Catalog partnerships persisted with room for two users each (Docs Guild: 3)."""
    partnership_service.sync_catalog(db, catalog, default_max_users=2)
    return {p.id: p for p in db.query(Partnership).all()}


@pytest.fixture(scope="function")
def test_user(db: Session) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"test-{uuid.uuid4().hex[:8]}@test.com",
        name="Test User",
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def other_user(db: Session) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"other-{uuid.uuid4().hex[:8]}@test.com",
        name="Other User",
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def instructor(db: Session) -> Instructor:
    instructor = Instructor(id=uuid.uuid4(), username=f"coach-{uuid.uuid4().hex[:6]}")
    db.add(instructor)
    db.commit()
    return instructor


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    subject_id: uuid.UUID
    token: str
    cookie_name: str = COOKIE_NAME


@pytest.fixture(scope="function")
def test_auth(test_user: User) -> TestAuth:
    return TestAuth(
        subject_id=test_user.id,
        token=create_session_token(test_user.id, IdentityKind.USER),
    )


@pytest.fixture(scope="function")
def instructor_auth(instructor: Instructor) -> TestAuth:
    return TestAuth(
        subject_id=instructor.id,
        token=create_session_token(instructor.id, IdentityKind.INSTRUCTOR),
        cookie_name=INSTRUCTOR_COOKIE_NAME,
    )


# =============================================================================
# Client Fixtures
# =============================================================================

def _override_db(db: Session) -> None:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client for public endpoints."""
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    test_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """User session cookie plus CSRF header."""
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={test_auth.cookie_name: test_auth.token},
        headers=CSRF_HEADERS,
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def instructor_client(
    db: Session,
    instructor_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """Instructor session cookie plus CSRF header."""
    _override_db(db)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={instructor_auth.cookie_name: instructor_auth.token},
        headers=CSRF_HEADERS,
    ) as c:
        yield c
    app.dependency_overrides.clear()
