from sqlalchemy import Column, Integer, String, Date, Time, Enum, Text, Index
import enum
from ..database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    DEPOSIT_PAID = "deposit_paid"
    IN_PROGRESS = "in_progress"
    DISPUTED = "disputed"
    REFUNDED = "refunded"


# occupano la data come "booked"
CONFIRMED_BOOKING_STATUSES = (
    BookingStatus.CONFIRMED,
    BookingStatus.DEPOSIT_PAID,
    BookingStatus.IN_PROGRESS,
    BookingStatus.COMPLETED,
)
# non occupano più la data
INACTIVE_BOOKING_STATUSES = (BookingStatus.CANCELLED, BookingStatus.REFUNDED)


class Booking(Base):
    """
    Ledger delle prenotazioni. Per il motore di disponibilità è in sola lettura:
    lo scrive solo il flusso che possiede le conferme.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)

    entity_id = Column(String(64), nullable=False)
    client_id = Column(String(64), nullable=True)

    date = Column(Date, nullable=False)
    # entrambi None = prenotazione di tutto il giorno
    time_start = Column(Time, nullable=True)
    time_end = Column(Time, nullable=True)

    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    notes = Column(Text, default="")

    __table_args__ = (Index("ix_bookings_entity_date", "entity_id", "date"),)
