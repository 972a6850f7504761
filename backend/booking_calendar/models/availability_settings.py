from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, func
import enum
from ..database import Base


class DefaultStatus(str, enum.Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    REQUEST_ONLY = "request_only"


class AvailabilitySettings(Base):
    __tablename__ = "availability_settings"

    id = Column(Integer, primary_key=True)
    entity_id = Column(String(64), unique=True, nullable=False)

    default_status = Column(Enum(DefaultStatus), nullable=False, default=DefaultStatus.AVAILABLE)
    advance_booking_days = Column(Integer, nullable=False, default=365)
    minimum_notice_hours = Column(Integer, nullable=False, default=48)
    allow_same_day = Column(Boolean, nullable=False, default=False)
    buffer_hours_before = Column(Integer, nullable=False, default=0)
    buffer_hours_after = Column(Integer, nullable=False, default=0)
    show_calendar_publicly = Column(Boolean, nullable=False, default=True)
    auto_decline_conflicts = Column(Boolean, nullable=False, default=True)
    # fuso IANA dell'entità; None = APP_TIMEZONE
    timezone = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
