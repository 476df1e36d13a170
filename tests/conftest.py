"""Pytest configuration and shared fixtures."""

import os
from datetime import datetime, timedelta
from types import SimpleNamespace

# Configure before the application modules read settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from ppewatch.analytics.active_items import resolve_active_items
from ppewatch.analytics.filter_info import FilterInfo
from ppewatch.core.auth import create_access_token
from ppewatch.database import Base, get_db, seed_ppe_catalogue
from ppewatch.models import (
    ComplianceRecord, ComplianceStatus, Device, FilterDevice, Location,
    PPEItem, Team, TeamMember, TeamPPEItem, Zone,
)
from ppewatch.services.response_cache import response_cache

MEMBER_EMAIL = "safety@acme.test"


# ---------------------------------------------------------------------------
# Plain record helpers for the analytics unit tests
# ---------------------------------------------------------------------------

def _make_record(
    compliances,
    worker_id="W1",
    filter_id="F1",
    timestamp=None,
    record_id=1,
    severity="NOT_SET",
    status=None,
):
    """A duck-typed compliance record."""
    return SimpleNamespace(
        id=record_id,
        worker_id=worker_id,
        filter_id=filter_id,
        timestamp=timestamp or datetime(2024, 3, 6, 12, 0),
        severity=severity,
        status=status,
        compliances=compliances,
        comments=None,
    )


@pytest.fixture
def make_record():
    return _make_record


@pytest.fixture
def hard_hat_and_vest():
    """Active set tracking Hard Hat and Vest."""
    return resolve_active_items(["Hard Hat", "Vest"])


@pytest.fixture
def filter_index():
    """Two filters in two zones of one location."""
    return {
        "F1": FilterInfo("F1", 1, "Assembly", 1, "Plant A"),
        "F2": FilterInfo("F2", 2, "Loading Dock", 1, "Plant A"),
    }


# ---------------------------------------------------------------------------
# Database and API fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clear_response_cache():
    """Cached responses must not leak between tests."""
    response_cache.clear()
    yield
    response_cache.clear()


@pytest_asyncio.fixture
async def engine():
    """In-memory database shared by every session of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        await seed_ppe_catalogue(session)
        await session.commit()
    return maker


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    """HTTP client against the app, wired to the test database."""
    
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    
    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token(MEMBER_EMAIL)}"}


@pytest_asyncio.fixture
async def team(db):
    """
    Team "acme" with one member, Hard Hat and Vest active, Gloves inactive,
    a default "Pending" and a "Resolved" status, and two zones:
    Assembly (filter F1) and Loading Dock (filter F2).
    """
    team = Team(slug="acme", name="Acme Construction")
    db.add(team)
    await db.flush()
    
    db.add(TeamMember(team_id=team.id, email=MEMBER_EMAIL, name="Sam Rivera", role="admin"))
    
    items = await db.execute(select(PPEItem))
    by_name = {item.name: item for item in items.scalars().all()}
    for name, active in (("Hard Hat", True), ("Vest", True), ("Gloves", False)):
        db.add(TeamPPEItem(team_id=team.id, ppe_item_id=by_name[name].id, active=active))
    
    db.add(ComplianceStatus(
        team_id=team.id, name="Pending", code="PENDING", order=0, is_default=True
    ))
    db.add(ComplianceStatus(
        team_id=team.id, name="Resolved", code="RESOLVED", order=1, is_default=False
    ))
    
    location = Location(team_id=team.id, name="Plant A")
    db.add(location)
    await db.flush()
    for zone_name, filter_id in (("Assembly", "F1"), ("Loading Dock", "F2")):
        zone = Zone(location_id=location.id, name=zone_name)
        db.add(zone)
        await db.flush()
        device = Device(zone_id=zone.id, name=f"{zone_name} camera")
        db.add(device)
        await db.flush()
        db.add(FilterDevice(device_id=device.id, filter_id=filter_id))
    
    await db.commit()
    return team


@pytest_asyncio.fixture
async def other_team(db):
    """A second team with its own filter, and no members shared with "acme"."""
    team = Team(slug="globex", name="Globex")
    db.add(team)
    await db.flush()
    location = Location(team_id=team.id, name="Globex Yard")
    db.add(location)
    await db.flush()
    zone = Zone(location_id=location.id, name="Yard")
    db.add(zone)
    await db.flush()
    device = Device(zone_id=zone.id, name="Yard camera")
    db.add(device)
    await db.flush()
    db.add(FilterDevice(device_id=device.id, filter_id="G1"))
    await db.commit()
    return team


@pytest.fixture
def add_records(db):
    """Insert compliance records; each row is (worker_id, filter_id, compliances[, age])."""
    
    async def _add(*rows, now=None):
        now = now or datetime.utcnow()
        records = []
        for row in rows:
            worker_id, filter_id, compliances = row[:3]
            age = row[3] if len(row) > 3 else timedelta(hours=1)
            record = ComplianceRecord(
                worker_id=worker_id,
                filter_id=filter_id,
                timestamp=now - age,
                compliances=compliances,
            )
            db.add(record)
            records.append(record)
        await db.commit()
        return records
    
    return _add
