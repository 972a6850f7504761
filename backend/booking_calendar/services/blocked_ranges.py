# backend/booking_calendar/services/blocked_ranges.py
import logging
from datetime import date

from sqlalchemy.orm import Session

from ..core.clock import local_today
from ..core.errors import NotFoundError, ValidationError, storage_errors
from ..models.blocked_range import BlockedDateRange, BlockReason
from . import settings_store

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("start_date", "end_date", "reason", "notes", "is_active")


def _reason(value) -> BlockReason:
    try:
        return BlockReason(value)
    except ValueError:
        raise ValidationError("Motivo del blocco non valido", field="reason", value=value)


def _check_order(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise ValidationError(
            "start_date deve precedere o coincidere con end_date",
            start_date=start_date,
            end_date=end_date,
        )


def list_ranges(
    db: Session,
    entity_id: str,
    start: date | None = None,
    end: date | None = None,
    include_inactive: bool = False,
) -> list[BlockedDateRange]:
    """Range dell'entità per start_date; con una finestra, solo quelli che la toccano."""
    with storage_errors(db, "Lettura blocchi fallita", entity_id=entity_id):
        q = db.query(BlockedDateRange).filter(BlockedDateRange.entity_id == entity_id)
        if not include_inactive:
            q = q.filter(BlockedDateRange.is_active == True)  # noqa: E712
        if start is not None:
            q = q.filter(BlockedDateRange.end_date >= start)
        if end is not None:
            q = q.filter(BlockedDateRange.start_date <= end)
        return q.order_by(BlockedDateRange.start_date.asc(), BlockedDateRange.id.asc()).all()


def get_range(db: Session, entity_id: str, range_id: int) -> BlockedDateRange:
    with storage_errors(db, "Lettura blocchi fallita", entity_id=entity_id, range_id=range_id):
        row = db.get(BlockedDateRange, range_id)
    if row is None or row.entity_id != entity_id:
        raise NotFoundError("Blocco non trovato", entity_id=entity_id, range_id=range_id)
    return row


def block_range(
    db: Session,
    entity_id: str,
    start_date: date,
    end_date: date,
    reason: BlockReason | str = BlockReason.VACATION,
    notes: str | None = None,
    today: date | None = None,
) -> BlockedDateRange:
    """
    Crea un blocco [start_date, end_date] inclusivo. Non si fonde né si divide
    con blocchi sovrapposti: il resolver li tollera.
    """
    _check_order(start_date, end_date)
    today = today or local_today(settings_store.effective_settings(db, entity_id).timezone)
    if start_date < today:
        raise ValidationError(
            "Non si possono creare blocchi nel passato", start_date=start_date, today=today
        )

    row = BlockedDateRange(
        entity_id=entity_id,
        start_date=start_date,
        end_date=end_date,
        reason=_reason(reason),
        notes=notes,
        is_active=True,
    )
    with storage_errors(db, "Creazione blocco fallita", entity_id=entity_id,
                        start_date=start_date, end_date=end_date):
        db.add(row)
        db.commit()
        db.refresh(row)

    logger.info("range blocked entity=%s id=%s %s..%s (%s)",
                entity_id, row.id, start_date, end_date, row.reason.value)
    return row


def update_range(db: Session, entity_id: str, range_id: int, changes: dict) -> BlockedDateRange:
    """Modifica consentita anche su blocchi passati (storico)."""
    row = get_range(db, entity_id, range_id)

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError("Campi non modificabili", fields=sorted(unknown))
    missing = [f for f in ("start_date", "end_date", "reason", "is_active") if f in changes and changes[f] is None]
    if missing:
        raise ValidationError("Campi obbligatori non possono essere nulli", fields=missing)

    start_date = changes.get("start_date", row.start_date)
    end_date = changes.get("end_date", row.end_date)
    _check_order(start_date, end_date)

    with storage_errors(db, "Modifica blocco fallita", entity_id=entity_id, range_id=range_id):
        for field, value in changes.items():
            if field == "reason":
                value = _reason(value)
            setattr(row, field, value)
        db.commit()
        db.refresh(row)
    return row


def unblock_range(db: Session, entity_id: str, range_id: int) -> None:
    """Cancella il blocco. Nessun effetto sugli altri store: il resolver smette di vederlo."""
    row = get_range(db, entity_id, range_id)
    with storage_errors(db, "Cancellazione blocco fallita", entity_id=entity_id, range_id=range_id):
        db.delete(row)
        db.commit()
    logger.info("range unblocked entity=%s id=%s", entity_id, range_id)
