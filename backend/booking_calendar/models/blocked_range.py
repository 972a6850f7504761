from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, Text, Boolean, Index, func
import enum
from ..database import Base


class BlockReason(str, enum.Enum):
    VACATION = "vacation"
    PERSONAL = "personal"
    OTHER_BOOKING = "other_booking"
    HEALTH = "health"
    TRAVEL = "travel"
    OTHER = "other"


class BlockedDateRange(Base):
    __tablename__ = "blocked_date_ranges"

    id = Column(Integer, primary_key=True)
    entity_id = Column(String(64), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # inclusiva
    reason = Column(Enum(BlockReason), nullable=False, default=BlockReason.VACATION)
    notes = Column(Text, nullable=True)
    # i range disattivati restano a storico ma il resolver non li vede
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_blocked_entity_dates", "entity_id", "start_date", "end_date"),)

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def covers(self, day) -> bool:
        return self.start_date <= day <= self.end_date
