from datetime import date, time

import pytest
import requests

from booking_calendar.core.errors import StorageError
from booking_calendar.models.booking import Booking, BookingStatus
from booking_calendar.services import ledger as ledger_module
from booking_calendar.services.ledger import HttpBookingLedger, SqlBookingLedger, get_ledger

ENTITY = "artist-1"
START, END = date(2025, 6, 1), date(2025, 6, 30)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, reason="OK", invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.reason = reason
        self.invalid_json = invalid_json

    def json(self):
        if self.invalid_json:
            raise ValueError("no json")
        return self.payload


@pytest.fixture()
def http_get(monkeypatch):
    calls = []

    def install(response=None, exc=None):
        def fake_get(url, headers=None, params=None, timeout=None):
            calls.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
            if exc is not None:
                raise exc
            return response

        monkeypatch.setattr(ledger_module.requests, "get", fake_get)
        return calls

    return install


def test_sql_ledger_skips_cancelled_and_other_entities(db):
    db.add_all([
        Booking(entity_id=ENTITY, date=date(2025, 6, 5), status=BookingStatus.CONFIRMED,
                time_start=time(20, 0), time_end=time(23, 0)),
        Booking(entity_id=ENTITY, date=date(2025, 6, 6), status=BookingStatus.CANCELLED),
        Booking(entity_id="artist-2", date=date(2025, 6, 7), status=BookingStatus.PENDING),
        Booking(entity_id=ENTITY, date=date(2025, 7, 1), status=BookingStatus.PENDING),
    ])
    db.commit()

    rows = SqlBookingLedger(db).list_bookings(ENTITY, START, END)

    assert len(rows) == 1
    assert rows[0].date == date(2025, 6, 5)
    assert rows[0].is_confirmed
    assert not rows[0].is_all_day
    assert isinstance(rows[0].id, str)


def test_http_ledger_parses_bookings(http_get):
    calls = http_get(FakeResponse({"bookings": [
        {"id": 7, "entity_id": ENTITY, "date": "2025-06-05", "time_start": "20:00",
         "time_end": "23:00", "status": "confirmed"},
        {"id": 8, "entity_id": ENTITY, "date": "2025-06-06", "status": "cancelled"},
        {"id": 9, "entity_id": ENTITY, "date": "2025-08-01", "status": "pending"},
        {"id": 10, "entity_id": ENTITY, "date": "2025-06-09"},
    ]}))

    rows = HttpBookingLedger("https://ledger.example/api/", token="tok", timeout=5).list_bookings(
        ENTITY, START, END,
    )

    assert [r.id for r in rows] == ["7", "10"]
    assert rows[0].time_start == time(20, 0)
    assert rows[1].status == BookingStatus.PENDING
    assert rows[1].is_all_day
    assert calls[0]["url"] == f"https://ledger.example/api/entities/{ENTITY}/bookings"
    assert calls[0]["params"] == {"start_date": "2025-06-01", "end_date": "2025-06-30"}
    assert calls[0]["headers"]["Authorization"] == "Bearer tok"
    assert calls[0]["timeout"] == 5


def test_http_ledger_accepts_bare_list(http_get):
    http_get(FakeResponse([{"id": "x", "entity_id": ENTITY, "date": "2025-06-02", "status": "pending"}]))

    rows = HttpBookingLedger("https://ledger.example").list_bookings(ENTITY, START, END)

    assert [r.id for r in rows] == ["x"]


@pytest.mark.parametrize("kwargs", [
    {"exc": requests.Timeout("slow")},
    {"exc": requests.ConnectionError("down")},
    {"response": FakeResponse(status_code=500, reason="Server Error")},
    {"response": FakeResponse(invalid_json=True)},
    {"response": FakeResponse({"bookings": "nope"})},
    {"response": FakeResponse({"bookings": [{"id": 1, "date": "2025-06-02"}]})},
    {"response": FakeResponse({"bookings": [{"id": 1, "entity_id": ENTITY, "date": "02/06/2025"}]})},
])
def test_http_ledger_failures_become_storage_errors(http_get, kwargs):
    http_get(**kwargs)

    with pytest.raises(StorageError):
        HttpBookingLedger("https://ledger.example").list_bookings(ENTITY, START, END)


def test_get_ledger_picks_source_from_settings(db, monkeypatch):
    monkeypatch.setattr(ledger_module.settings, "BOOKING_LEDGER_URL", None)
    assert isinstance(get_ledger(db), SqlBookingLedger)

    monkeypatch.setattr(ledger_module.settings, "BOOKING_LEDGER_URL", "https://ledger.example")
    monkeypatch.setattr(ledger_module.settings, "BOOKING_LEDGER_TIMEOUT_SEC", 3.0)
    source = get_ledger(db)
    assert isinstance(source, HttpBookingLedger)
    assert source.timeout == 3.0


def test_http_ledger_maps_every_ledger_status(http_get):
    http_get(FakeResponse([
        {"id": 1, "entity_id": ENTITY, "date": "2025-06-05", "status": "confirmed"},
        {"id": 2, "entity_id": ENTITY, "date": "2025-06-06", "status": "in_progress"},
        {"id": 3, "entity_id": ENTITY, "date": "2025-06-07", "status": "deposit_paid"},
        {"id": 4, "entity_id": ENTITY, "date": "2025-06-08", "status": "disputed"},
        {"id": 5, "entity_id": ENTITY, "date": "2025-06-09", "status": "refunded"},
        {"id": 6, "entity_id": ENTITY, "date": "2025-06-10", "status": "awaiting_contract"},
    ]))

    rows = HttpBookingLedger("https://ledger.example").list_bookings(ENTITY, START, END)

    assert [r.id for r in rows] == ["1", "2", "3", "4", "6"]
    assert [r.is_confirmed for r in rows] == [True, True, True, False, False]
    assert rows[-1].status == BookingStatus.PENDING


def test_sql_ledger_skips_refunded(db):
    db.add_all([
        Booking(entity_id=ENTITY, date=date(2025, 6, 5), status=BookingStatus.REFUNDED),
        Booking(entity_id=ENTITY, date=date(2025, 6, 6), status=BookingStatus.IN_PROGRESS),
    ])
    db.commit()

    rows = SqlBookingLedger(db).list_bookings(ENTITY, START, END)

    assert [(r.date, r.is_confirmed) for r in rows] == [(date(2025, 6, 6), True)]


def test_booking_status_defaults():
    assert ledger_module.booking_status(None) == BookingStatus.PENDING
    assert ledger_module.booking_status(" Deposit_Paid ") == BookingStatus.DEPOSIT_PAID
    assert ledger_module.booking_status("on_hold") == BookingStatus.PENDING
