from datetime import date

from icalendar import Calendar

from booking_calendar.core.enums import ResolvedStatus, StatusSource
from booking_calendar.models.availability import Visibility
from booking_calendar.services.ical_export import build_ics
from booking_calendar.services.resolver import ResolvedDay

ENTITY = "artist-1"


def _events(payload: bytes):
    return [c for c in Calendar.from_ical(payload).walk() if c.name == "VEVENT"]


def test_only_busy_days_become_events():
    days = [
        ResolvedDay(date(2025, 6, 1), ResolvedStatus.AVAILABLE, StatusSource.DEFAULT),
        ResolvedDay(date(2025, 6, 2), ResolvedStatus.BOOKED, StatusSource.BOOKING),
        ResolvedDay(date(2025, 6, 3), ResolvedStatus.PENDING, StatusSource.BOOKING),
        ResolvedDay(date(2025, 6, 4), ResolvedStatus.BLOCKED, StatusSource.BLOCKED_RANGE),
        ResolvedDay(date(2025, 6, 5), ResolvedStatus.TENTATIVE, StatusSource.ENTRY),
    ]

    events = _events(build_ics(ENTITY, days, "Artist"))

    assert [str(e["summary"]) for e in events] == ["Booked", "Pending request", "Blocked"]
    first = events[0]
    assert str(first["uid"]) == f"{ENTITY}-2025-06-02@booking-calendar"
    assert first.decoded("dtstart") == date(2025, 6, 2)
    assert first.decoded("dtend") == date(2025, 6, 3)


def test_calendar_name_is_set():
    cal = Calendar.from_ical(build_ics(ENTITY, [], "Artist calendar"))

    assert str(cal["x-wr-calname"]) == "Artist calendar"
    assert _events(cal.to_ical()) == []


def test_visibility_controls_event_context():
    days = [
        ResolvedDay(date(2025, 6, 2), ResolvedStatus.BOOKED, StatusSource.ENTRY,
                    notes="Wedding", visibility=Visibility.VISIBLE_WITH_NAME),
        ResolvedDay(date(2025, 6, 3), ResolvedStatus.BOOKED, StatusSource.ENTRY,
                    notes="Gala", visibility=Visibility.VISIBLE),
        ResolvedDay(date(2025, 6, 4), ResolvedStatus.PENDING, StatusSource.ENTRY,
                    notes="Secret", visibility=Visibility.HIDDEN),
    ]

    named, plain, hidden = _events(build_ics(ENTITY, days, "Artist"))

    assert str(named["description"]) == "Wedding"
    assert "description" not in plain
    assert str(hidden["summary"]) == "Busy"
    assert "description" not in hidden
