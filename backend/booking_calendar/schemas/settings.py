# backend/booking_calendar/schemas/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional

from ..models.availability_settings import DefaultStatus


class SettingsIn(BaseModel):
    """Aggiornamento parziale: solo i campi presenti vengono scritti."""
    default_status: Optional[DefaultStatus] = None
    advance_booking_days: Optional[int] = Field(None, ge=1, le=730)
    minimum_notice_hours: Optional[int] = Field(None, ge=0, le=720)
    allow_same_day: Optional[bool] = None
    buffer_hours_before: Optional[int] = Field(None, ge=0, le=48)
    buffer_hours_after: Optional[int] = Field(None, ge=0, le=48)
    show_calendar_publicly: Optional[bool] = None
    auto_decline_conflicts: Optional[bool] = None
    timezone: Optional[str] = None

class SettingsOut(BaseModel):
    entity_id: str
    default_status: DefaultStatus
    advance_booking_days: int
    minimum_notice_hours: int
    allow_same_day: bool
    buffer_hours_before: int
    buffer_hours_after: int
    show_calendar_publicly: bool
    auto_decline_conflicts: bool
    timezone: Optional[str] = None
    is_default: bool = False
    class Config:
        from_attributes = True
