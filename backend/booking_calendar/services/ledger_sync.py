# backend/booking_calendar/services/ledger_sync.py
"""
Hook per chi possiede le conferme: dopo ogni cambio nel ledger riallinea l'entry
della data. È l'unico percorso che collega un'entry a un booking_id.
"""
import logging

from sqlalchemy.orm import Session

from ..models.availability import AvailabilityStatus, Visibility
from ..models.booking import INACTIVE_BOOKING_STATUSES
from . import availability_store
from .ledger import LedgerBooking

logger = logging.getLogger(__name__)


def mirror_booking(db: Session, booking: LedgerBooking, visibility: Visibility | None = None):
    """
    confermato (anche deposit_paid, in_progress, completed) -> entry booked,
    altrimenti entry pending (con booking_id); cancelled/refunded -> rimuove
    l'entry solo se punta ancora a questo booking.
    Ritorna l'entry scritta oppure None.
    """
    if booking.status in INACTIVE_BOOKING_STATUSES:
        entry = availability_store.get_entry(db, booking.entity_id, booking.date)
        if entry is not None and entry.booking_id == booking.id:
            availability_store.delete_entries(db, booking.entity_id, [booking.date])
            logger.info("mirror removed entity=%s date=%s booking=%s",
                        booking.entity_id, booking.date, booking.id)
        return None

    slots = []
    if not booking.is_all_day:
        slots = [{"start": booking.time_start, "end": booking.time_end, "status": None, "note": None}]

    entry = availability_store.upsert_entry(
        db,
        booking.entity_id,
        booking.date,
        AvailabilityStatus.BOOKED if booking.is_confirmed else AvailabilityStatus.PENDING,
        visibility=visibility,
        time_slots=slots,
        booking_id=booking.id,
    )
    logger.info("mirror wrote entity=%s date=%s booking=%s status=%s",
                booking.entity_id, booking.date, booking.id, entry.status.value)
    return entry
