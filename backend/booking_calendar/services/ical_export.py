# backend/booking_calendar/services/ical_export.py
"""
Export iCalendar (.ics) dei giorni occupati di un'entità.

Un VEVENT di tutto il giorno per ogni giorno booked/pending/blocked risolto.
La visibilità dell'entry decide quanto contesto finisce nel file.
"""
from datetime import datetime, timedelta, timezone

from icalendar import Calendar, Event

from ..core.enums import ResolvedStatus
from ..models.availability import Visibility
from .resolver import ResolvedDay

PRODID = "-//booking-calendar//availability//EN"

_SUMMARY = {
    ResolvedStatus.BOOKED: "Booked",
    ResolvedStatus.PENDING: "Pending request",
    ResolvedStatus.BLOCKED: "Blocked",
}

_ICS_STATUS = {
    ResolvedStatus.BOOKED: "CONFIRMED",
    ResolvedStatus.PENDING: "TENTATIVE",
    ResolvedStatus.BLOCKED: "CONFIRMED",
}


def build_ics(entity_id: str, days: list[ResolvedDay], name: str) -> bytes:
    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", name)

    stamp = datetime.now(timezone.utc)
    for d in days:
        if d.status not in _SUMMARY:
            continue

        hidden = d.visibility == Visibility.HIDDEN
        ev = Event()
        ev.add("uid", f"{entity_id}-{d.date.isoformat()}@booking-calendar")
        ev.add("dtstamp", stamp)
        ev.add("dtstart", d.date)
        ev.add("dtend", d.date + timedelta(days=1))
        ev.add("summary", "Busy" if hidden else _SUMMARY[d.status])
        ev.add("status", _ICS_STATUS[d.status])
        ev.add("transp", "OPAQUE")
        if d.notes and d.visibility == Visibility.VISIBLE_WITH_NAME:
            ev.add("description", d.notes)
        cal.add_component(ev)

    return cal.to_ical()
