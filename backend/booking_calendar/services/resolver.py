# backend/booking_calendar/services/resolver.py
"""
Range Resolver: unisce entry esplicite, ledger, blocchi e impostazioni in un
unico stato per giorno. Calcolato in lettura, mai materializzato: cambiare
impostazioni o blocchi ha effetto subito sui giorni non impostati.

Precedenza (vince la prima):
  1. AvailabilityEntry esplicita per la data
  2. Booking non cancellato sulla data (booked se confermato, altrimenti pending)
  3. Almeno un BlockedDateRange attivo che copre la data
  4. default_status delle impostazioni, oppure "available"
"""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field, replace
from datetime import date, time, timedelta
from typing import Iterator

from sqlalchemy.orm import Session

from ..config import settings
from ..core.clock import local_today
from ..core.enums import ResolvedStatus, StatusSource
from ..core.errors import ValidationError
from ..models.availability import AvailabilityEntry, Visibility, BOOKING_STATUSES
from ..models.availability_settings import DefaultStatus
from ..models.blocked_range import BlockedDateRange
from . import availability_store, blocked_ranges, settings_store
from .availability_store import slot_window
from .ledger import LedgerBooking, get_ledger
from .settings_store import SettingsView

logger = logging.getLogger(__name__)

GLOBAL_DEFAULT = ResolvedStatus.AVAILABLE

BOOKABLE = (ResolvedStatus.AVAILABLE, ResolvedStatus.OPEN_GIG, ResolvedStatus.REQUEST_ONLY)

_DEFAULT_TO_RESOLVED = {
    DefaultStatus.AVAILABLE: ResolvedStatus.AVAILABLE,
    DefaultStatus.UNAVAILABLE: ResolvedStatus.UNAVAILABLE,
    DefaultStatus.REQUEST_ONLY: ResolvedStatus.REQUEST_ONLY,
}


@dataclass(frozen=True)
class Commitment:
    """Finestra occupata in un giorno booked/pending; senza orari = tutto il giorno."""
    start: time | None = None
    end: time | None = None
    booking_ref: str | None = None

    @property
    def is_all_day(self) -> bool:
        return self.start is None or self.end is None


@dataclass(frozen=True)
class ResolvedDay:
    date: date
    status: ResolvedStatus
    source: StatusSource
    booking_ref: str | None = None
    is_past: bool = False
    visibility: Visibility = Visibility.VISIBLE
    notes: str | None = None
    time_slots: list = field(default_factory=list)
    commitments: tuple[Commitment, ...] = ()

    @property
    def is_bookable(self) -> bool:
        return self.status in BOOKABLE


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def check_window(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise ValidationError(
            "start_date deve precedere o coincidere con end_date",
            start_date=start_date,
            end_date=end_date,
        )
    span = (end_date - start_date).days + 1
    if span > settings.MAX_RANGE_DAYS:
        raise ValidationError(
            "Finestra troppo ampia", days=span, max_days=settings.MAX_RANGE_DAYS
        )


def _entry_commitments(entry: AvailabilityEntry, bookings: list[LedgerBooking]) -> tuple[Commitment, ...]:
    out: list[Commitment] = []
    for slot in entry.time_slots or []:
        # fascia senza stato proprio = eredita lo stato dell'entry
        if slot.get("status") in (None, *(s.value for s in BOOKING_STATUSES)):
            start, end = slot_window(slot)
            out.append(Commitment(start, end, entry.booking_id))
    out.extend(_booking_commitments(bookings))
    # entry senza fasce = impegno di tutto il giorno; fasce con altro stato non impegnano
    if not out and not entry.time_slots:
        out.append(Commitment(booking_ref=entry.booking_id))
    return tuple(out)


def _booking_commitments(bookings: list[LedgerBooking]) -> list[Commitment]:
    return [
        Commitment(
            None if b.is_all_day else b.time_start,
            None if b.is_all_day else b.time_end,
            b.id,
        )
        for b in bookings
    ]


def _default_day(day: date, prefs: SettingsView) -> tuple[ResolvedStatus, StatusSource]:
    if prefs.is_default:
        return GLOBAL_DEFAULT, StatusSource.DEFAULT
    return _DEFAULT_TO_RESOLVED[prefs.default_status], StatusSource.SETTINGS


def resolve_day(
    day: date,
    *,
    today: date,
    prefs: SettingsView,
    entry: AvailabilityEntry | None,
    bookings: list[LedgerBooking],
    ranges: list[BlockedDateRange],
) -> ResolvedDay:
    is_past = day < today

    if entry is not None:
        status = ResolvedStatus(entry.status.value)
        commitments = ()
        if entry.status in BOOKING_STATUSES:
            commitments = _entry_commitments(entry, bookings)
        return ResolvedDay(
            date=day,
            status=status,
            source=StatusSource.ENTRY,
            booking_ref=entry.booking_id,
            is_past=is_past,
            visibility=entry.visibility,
            notes=entry.notes,
            time_slots=list(entry.time_slots or []),
            commitments=commitments,
        )

    if bookings:
        confirmed = [b for b in bookings if b.is_confirmed]
        lead = confirmed[0] if confirmed else bookings[0]
        return ResolvedDay(
            date=day,
            status=ResolvedStatus.BOOKED if confirmed else ResolvedStatus.PENDING,
            source=StatusSource.BOOKING,
            booking_ref=lead.id,
            is_past=is_past,
            commitments=tuple(_booking_commitments(bookings)),
        )

    # basta un range qualsiasi, nessun cumulo
    covering = next((r for r in ranges if r.covers(day)), None)
    if covering is not None:
        return ResolvedDay(
            date=day,
            status=ResolvedStatus.BLOCKED,
            source=StatusSource.BLOCKED_RANGE,
            is_past=is_past,
            notes=covering.notes,
        )

    status, source = _default_day(day, prefs)
    return ResolvedDay(date=day, status=status, source=source, is_past=is_past)


def resolve(
    db: Session,
    entity_id: str,
    start_date: date,
    end_date: date,
    *,
    today: date | None = None,
    ledger=None,
    prefs: SettingsView | None = None,
) -> list[ResolvedDay]:
    """
    Un ResolvedDay per ogni giorno di [start_date, end_date], in ordine crescente.
    Entità sconosciuta = tutti i giorni allo stato di default (non è un errore).
    """
    check_window(start_date, end_date)

    prefs = prefs or settings_store.effective_settings(db, entity_id)
    today = today or local_today(prefs.timezone)
    ledger = ledger or get_ledger(db)

    entries = {e.date: e for e in availability_store.list_entries(db, entity_id, start_date, end_date)}

    bookings_by_day: dict[date, list[LedgerBooking]] = defaultdict(list)
    for b in ledger.list_bookings(entity_id, start_date, end_date):
        bookings_by_day[b.date].append(b)

    ranges = blocked_ranges.list_ranges(db, entity_id, start=start_date, end=end_date)

    days = [
        resolve_day(
            day,
            today=today,
            prefs=prefs,
            entry=entries.get(day),
            bookings=bookings_by_day.get(day, []),
            ranges=ranges,
        )
        for day in iter_days(start_date, end_date)
    ]
    logger.debug(
        "resolved entity=%s %s..%s entries=%d bookings=%d ranges=%d",
        entity_id, start_date, end_date, len(entries),
        sum(len(v) for v in bookings_by_day.values()), len(ranges),
    )
    return days


def check_availability(
    db: Session,
    entity_id: str,
    day: date,
    *,
    today: date | None = None,
    ledger=None,
    public: bool = False,
) -> dict:
    """Verifica puntuale di una data: {is_available, status, reason}. public=True per terzi."""
    days = resolve(db, entity_id, day, day, today=today, ledger=ledger)
    resolved = (public_view(days) if public else days)[0]
    return {
        "date": day,
        "is_available": resolved.is_bookable and not resolved.is_past,
        "status": resolved.status,
        "reason": "past_date" if resolved.is_past else resolved.source.value,
    }


def calendar_stats(
    db: Session,
    entity_id: str,
    start_date: date,
    end_date: date,
    *,
    today: date | None = None,
    ledger=None,
    public: bool = False,
) -> dict:
    prefs = settings_store.effective_settings(db, entity_id)
    today = today or local_today(prefs.timezone)
    days = resolve(db, entity_id, start_date, end_date, today=today, ledger=ledger, prefs=prefs)
    if public:
        days = public_view(days)

    counts = Counter(d.status for d in days)
    return {
        "start_date": start_date,
        "end_date": end_date,
        "counts": {s.value: counts.get(s, 0) for s in ResolvedStatus},
        "upcoming_bookings": sum(
            1 for d in days if d.status == ResolvedStatus.BOOKED and d.date >= today
        ),
    }


# stati che un calendario "hidden" non racconta a terzi
_PRIVATE_STATUSES = (ResolvedStatus.BOOKED, ResolvedStatus.PENDING, ResolvedStatus.TENTATIVE)


def public_view(days: list[ResolvedDay]) -> list[ResolvedDay]:
    """
    Proiezione per terzi. Il contesto della prenotazione (note, riferimento)
    resta solo con visibility=visible_with_name.
    """
    out: list[ResolvedDay] = []
    for d in days:
        if d.visibility == Visibility.VISIBLE_WITH_NAME:
            out.append(replace(d, commitments=()))
            continue
        status = d.status
        if d.visibility == Visibility.HIDDEN and status in _PRIVATE_STATUSES:
            status = ResolvedStatus.UNAVAILABLE
        out.append(replace(d, status=status, booking_ref=None, notes=None, time_slots=[], commitments=()))
    return out
