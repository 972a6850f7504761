# backend/booking_calendar/services/availability_store.py
import logging
from datetime import date, time
from typing import Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ValidationError, storage_errors
from ..models.availability import AvailabilityEntry, AvailabilityStatus, Visibility

logger = logging.getLogger(__name__)


def _parse_time(value, field: str) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise ValidationError("Orario non valido (HH:MM)", field=field, value=value)


def _field(raw, key: str):
    return raw.get(key) if isinstance(raw, dict) else getattr(raw, key, None)


def normalize_slots(slots: Iterable | None) -> list[dict]:
    """
    Normalizza le fasce orarie: {"start": "HH:MM", "end": "HH:MM", "status", "note"},
    ordinate per inizio. Accetta dict o oggetti con gli stessi attributi.
    """
    out: list[dict] = []
    for raw in slots or []:
        start = _parse_time(_field(raw, "start"), "time_slots.start")
        end = _parse_time(_field(raw, "end"), "time_slots.end")
        if end <= start:
            raise ValidationError(
                "Fascia oraria vuota o invertita", start=start.isoformat(), end=end.isoformat()
            )
        status = _field(raw, "status")
        if status is not None:
            try:
                status = AvailabilityStatus(status).value
            except ValueError:
                raise ValidationError("Stato fascia non valido", value=status)
        out.append({
            "start": start.strftime("%H:%M"),
            "end": end.strftime("%H:%M"),
            "status": status,
            "note": _field(raw, "note"),
        })
    out.sort(key=lambda s: s["start"])
    return out


def slot_window(slot: dict) -> tuple[time, time]:
    return time.fromisoformat(slot["start"]), time.fromisoformat(slot["end"])


def get_entry(db: Session, entity_id: str, day: date) -> AvailabilityEntry | None:
    with storage_errors(db, "Lettura disponibilità fallita", entity_id=entity_id, date=day):
        return (
            db.query(AvailabilityEntry)
            .filter(AvailabilityEntry.entity_id == entity_id, AvailabilityEntry.date == day)
            .first()
        )


def list_entries(db: Session, entity_id: str, start: date, end: date) -> list[AvailabilityEntry]:
    with storage_errors(db, "Lettura disponibilità fallita", entity_id=entity_id, start=start, end=end):
        return (
            db.query(AvailabilityEntry)
            .filter(
                AvailabilityEntry.entity_id == entity_id,
                AvailabilityEntry.date >= start,
                AvailabilityEntry.date <= end,
            )
            .order_by(AvailabilityEntry.date.asc())
            .all()
        )


def _overwrite(row: AvailabilityEntry, fields: dict) -> None:
    for key, value in fields.items():
        setattr(row, key, value)


def upsert_entry(
    db: Session,
    entity_id: str,
    day: date,
    status: AvailabilityStatus,
    *,
    visibility: Visibility | None = None,
    time_slots: Iterable | None = None,
    booking_id: str | None = None,
    notes: str | None = None,
) -> AvailabilityEntry:
    """
    Scrive l'entry (entity_id, day) sostituendola per intero: i campi non passati
    tornano ai default, nessun merge campo per campo. Atomica per singola data.
    """
    fields = {
        "status": AvailabilityStatus(status),
        "visibility": Visibility(visibility or Visibility.VISIBLE),
        "time_slots": normalize_slots(time_slots),
        "booking_id": booking_id,
        "notes": notes,
    }

    with storage_errors(db, "Scrittura disponibilità fallita", entity_id=entity_id, date=day):
        row = get_entry(db, entity_id, day)
        if row is None:
            row = AvailabilityEntry(entity_id=entity_id, date=day, **fields)
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                # un'altra scrittura ha creato la chiave nel frattempo: vince l'ultima
                db.rollback()
                row = get_entry(db, entity_id, day)
                _overwrite(row, fields)
                db.commit()
        else:
            _overwrite(row, fields)
            db.commit()
        db.refresh(row)
    return row


def delete_entries(db: Session, entity_id: str, dates: Iterable[date]) -> int:
    days = sorted(set(dates))
    if not days:
        return 0
    with storage_errors(db, "Cancellazione disponibilità fallita", entity_id=entity_id, dates=days):
        deleted = (
            db.query(AvailabilityEntry)
            .filter(AvailabilityEntry.entity_id == entity_id, AvailabilityEntry.date.in_(days))
            .delete(synchronize_session=False)
        )
        db.commit()
    logger.info("entries deleted entity=%s requested=%d deleted=%d", entity_id, len(days), deleted)
    return deleted
