# backend/booking_calendar/services/bulk.py
"""
Bulk Mutator: applica uno stato a molte date con scritture indipendenti per data.

Non è una transazione unica: ogni data è atomica, il batch no. Gli esiti sono
restituiti per data (applied/rejected); le scritture già fatte restano.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from ..core.clock import local_today
from ..core.enums import Outcome, RejectReason
from ..core.errors import StorageError, ValidationError
from ..models.availability import AvailabilityStatus, Visibility, BOOKING_STATUSES
from . import availability_store, settings_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateOutcome:
    date: date
    outcome: Outcome
    reason: RejectReason | None = None
    detail: str | None = None

    @property
    def applied(self) -> bool:
        return self.outcome == Outcome.APPLIED


def _today_for(db: Session, entity_id: str, today: date | None) -> date:
    if today is not None:
        return today
    return local_today(settings_store.effective_settings(db, entity_id).timezone)


def _past(day: date) -> DateOutcome:
    return DateOutcome(day, Outcome.REJECTED, RejectReason.PAST_DATE)


def set_status(
    db: Session,
    entity_id: str,
    dates: Iterable[date],
    status: AvailabilityStatus | str,
    *,
    visibility: Visibility | str | None = None,
    notes: str | None = None,
    booking_id: str | None = None,
    time_slots: Iterable | None = None,
    today: date | None = None,
) -> list[DateOutcome]:
    try:
        status = AvailabilityStatus(status)
        visibility = Visibility(visibility) if visibility is not None else None
    except ValueError as exc:
        raise ValidationError(str(exc), entity_id=entity_id) from exc

    if booking_id is not None and status not in BOOKING_STATUSES:
        raise ValidationError(
            "booking_id ammesso solo con stato booked o pending",
            status=status.value,
            booking_id=booking_id,
        )
    # valida una volta sola, prima di qualunque scrittura
    slots = availability_store.normalize_slots(time_slots)

    days = sorted(set(dates))
    today = _today_for(db, entity_id, today)

    results: list[DateOutcome] = []
    for day in days:
        if day < today:
            results.append(_past(day))
            continue
        try:
            availability_store.upsert_entry(
                db,
                entity_id,
                day,
                status,
                visibility=visibility,
                time_slots=slots,
                booking_id=booking_id,
                notes=notes,
            )
        except StorageError as exc:
            logger.error("status write failed entity=%s date=%s: %s", entity_id, day, exc, exc_info=True)
            results.append(DateOutcome(day, Outcome.REJECTED, RejectReason.STORAGE_ERROR, str(exc)))
            continue
        results.append(DateOutcome(day, Outcome.APPLIED))

    rejected = sum(1 for r in results if not r.applied)
    logger.info(
        "set_status entity=%s status=%s dates=%d applied=%d rejected=%d",
        entity_id, status.value, len(days), len(days) - rejected, rejected,
    )
    return results


def delete(
    db: Session,
    entity_id: str,
    dates: Iterable[date],
    *,
    today: date | None = None,
) -> list[DateOutcome]:
    """Rimuove le entry: la data torna allo stato calcolato. Data senza entry = no-op."""
    days = sorted(set(dates))
    today = _today_for(db, entity_id, today)

    results: list[DateOutcome] = []
    for day in days:
        if day < today:
            results.append(_past(day))
            continue
        try:
            availability_store.delete_entries(db, entity_id, [day])
        except StorageError as exc:
            logger.error("entry delete failed entity=%s date=%s: %s", entity_id, day, exc, exc_info=True)
            results.append(DateOutcome(day, Outcome.REJECTED, RejectReason.STORAGE_ERROR, str(exc)))
            continue
        results.append(DateOutcome(day, Outcome.APPLIED))
    return results
