"""Pytest fixtures: throwaway SQLite database for fast, isolated tests."""
import uuid
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from rentstays.database import Base, get_db
from rentstays.main import app
from rentstays.services import booking_repository, catalog
from rentstays.services.activity_feed import ActivityFeedSink, get_notification_sink
from rentstays.services.notifications import NotificationSink

# Import all models so they register with Base.metadata
from rentstays.models.property import Property                        # noqa: F401
from rentstays.models.booking import Booking                          # noqa: F401
from rentstays.models.booking_status_change import BookingStatusChange  # noqa: F401
from rentstays.models.activity import Activity                        # noqa: F401

SQLITE_URL = "sqlite:///./test.db"

OWNER_ID = "00000000-0000-0000-0000-00000000000a"
APPLICANT_ID = "00000000-0000-0000-0000-00000000000b"
STRANGER_ID = "00000000-0000-0000-0000-00000000000c"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database and notification sink pointed at SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notification_sink] = lambda: ActivityFeedSink(session_factory)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class RecordingSink(NotificationSink):
    """Keeps published events in memory."""

    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


class ExplodingSink(NotificationSink):
    """Fails every delivery."""

    def __init__(self):
        self.attempts = 0

    def publish(self, event):
        self.attempts += 1
        raise RuntimeError("notification backend down")


@pytest.fixture
def sink():
    return RecordingSink()


# ---------------------------------------------------------------------------
# Helpers: service-level builders
# ---------------------------------------------------------------------------
def new_id() -> str:
    return str(uuid.uuid4())


def make_property(db, owner_id: str = OWNER_ID, title: str = "Studio near campus", **overrides):
    """Helper: add a property straight through the catalog service."""
    fields = {"address": "12 College Road", "city": "Cape Town", "monthly_price": 6500.0}
    fields.update(overrides)
    return catalog.create_property(db, owner_id=owner_id, title=title, **fields)


def booking_fields(**overrides) -> dict:
    fields = {
        "duration_description": "12 months",
        "reason_of_stay": "Undergraduate studies",
        "university_name": "University of Cape Town",
        "current_address": "7 Long Street, Durban",
    }
    fields.update(overrides)
    return fields


def make_booking(db, prop, applicant_id: str = APPLICANT_ID, **overrides):
    """Helper: file a booking straight through the repository."""
    return booking_repository.create(
        db, property_id=prop.id, applicant_id=applicant_id, **booking_fields(**overrides)
    )


# ---------------------------------------------------------------------------
# Helpers: API builders, return the response JSON
# ---------------------------------------------------------------------------
def create_test_property(client: TestClient, owner_id: str = OWNER_ID, title: str = "Studio near campus",
                         **overrides) -> dict:
    """Helper: POST /api/properties and return response JSON."""
    payload = {
        "owner_id": owner_id,
        "title": title,
        "address": "12 College Road",
        "city": "Cape Town",
        "monthly_price": 6500.0,
    }
    payload.update(overrides)
    resp = client.post("/api/properties/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_booking(client: TestClient, property_id: str, applicant_id: str = APPLICANT_ID,
                        **overrides) -> dict:
    """Helper: POST /api/bookings and return response JSON."""
    payload = {"property_id": property_id, "applicant_id": applicant_id, **booking_fields(**overrides)}
    resp = client.post("/api/bookings/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()
