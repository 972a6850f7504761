import os

# prima di importare il pacchetto: config.Settings legge l'ambiente all'import
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("APP_TIMEZONE", "Europe/Berlin")
os.environ.pop("BOOKING_LEDGER_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_calendar.core.security import create_access_token
from booking_calendar.database import Base, create_tables, get_db
from booking_calendar.main import app
from booking_calendar.models.booking import BookingStatus, INACTIVE_BOOKING_STATUSES
from booking_calendar.services.ledger import LedgerBooking

ENTITY = "artist-1"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def _headers(entity_id: str = ENTITY) -> dict:
        return {"Authorization": f"Bearer {create_access_token(entity_id)}"}
    return _headers


class FakeLedger:
    """Ledger in memoria con lo stesso contratto di SqlBookingLedger."""

    def __init__(self, bookings=()):
        self.bookings = list(bookings)
        self.calls = 0

    def list_bookings(self, entity_id, start, end):
        self.calls += 1
        return [
            b for b in self.bookings
            if b.entity_id == entity_id
            and start <= b.date <= end
            and b.status not in INACTIVE_BOOKING_STATUSES
        ]


@pytest.fixture()
def ledger():
    def _ledger(*bookings):
        return FakeLedger(bookings)
    return _ledger


@pytest.fixture()
def booking():
    def _booking(day, status=BookingStatus.CONFIRMED, start=None, end=None, id="b-1", entity_id=ENTITY):
        return LedgerBooking(
            id=id,
            entity_id=entity_id,
            date=day,
            time_start=start,
            time_end=end,
            status=status,
        )
    return _booking
