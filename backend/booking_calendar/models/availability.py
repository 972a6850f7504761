from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, Text, JSON, UniqueConstraint, func
import enum
from ..database import Base


class AvailabilityStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    PENDING = "pending"
    BLOCKED = "blocked"
    TENTATIVE = "tentative"
    OPEN_GIG = "open_gig"


# stati che solo il proprietario delle conferme dovrebbe collegare a un booking
BOOKING_STATUSES = (AvailabilityStatus.BOOKED, AvailabilityStatus.PENDING)


class Visibility(str, enum.Enum):
    VISIBLE = "visible"
    VISIBLE_WITH_NAME = "visible_with_name"
    HIDDEN = "hidden"


class AvailabilityEntry(Base):
    __tablename__ = "availability_entries"

    id = Column(Integer, primary_key=True)
    entity_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False)
    status = Column(Enum(AvailabilityStatus), nullable=False, default=AvailabilityStatus.AVAILABLE)
    # [{"start": "HH:MM", "end": "HH:MM", "status": "...", "note": "..."}]; vuoto = tutto il giorno
    time_slots = Column(JSON, nullable=False, default=list)
    visibility = Column(Enum(Visibility), nullable=False, default=Visibility.VISIBLE)
    # riferimento debole al ledger: solo chiave di lookup, mai proprietario
    booking_id = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("entity_id", "date", name="uniq_entity_date"),)
