# backend/booking_calendar/schemas/availability.py
from pydantic import BaseModel, Field
from datetime import date, datetime, time
from typing import Literal, Optional

from ..core.enums import Decision, Outcome, ReasonCode, RejectReason, ResolvedStatus, StatusSource
from ..models.availability import AvailabilityStatus, Visibility

# -----------------------------
# ENTRY (stato per singola data)
# -----------------------------

class TimeSlotIn(BaseModel):
    start: time
    end: time
    status: Optional[AvailabilityStatus] = None
    note: Optional[str] = None

class DatePreset(BaseModel):
    """
    Azioni rapide: un intervallo start..end, una settimana (da anchor),
    un mese, i weekend o i feriali di un mese.
    """
    kind: Literal["range", "week", "month", "weekends", "weekdays"]
    start: Optional[date] = None
    end: Optional[date] = None
    anchor: Optional[date] = None
    year: Optional[int] = None
    month: Optional[int] = Field(None, ge=1, le=12)

class SetStatusIn(BaseModel):
    dates: list[date] = []
    preset: Optional[DatePreset] = None
    status: AvailabilityStatus
    visibility: Optional[Visibility] = None
    notes: Optional[str] = None
    time_slots: list[TimeSlotIn] = []
    # booking_id lo scrive solo ledger_sync: qui è un campo sconosciuto
    class Config:
        extra = "forbid"

class DeleteDatesIn(BaseModel):
    dates: list[date] = []
    preset: Optional[DatePreset] = None

class DateOutcomeOut(BaseModel):
    date: date
    outcome: Outcome
    reason: Optional[RejectReason] = None
    detail: Optional[str] = None
    class Config:
        from_attributes = True

class BulkResultOut(BaseModel):
    applied: int
    rejected: int
    results: list[DateOutcomeOut]

class EntryOut(BaseModel):
    date: date
    status: AvailabilityStatus
    visibility: Visibility
    time_slots: list[dict] = []
    booking_id: Optional[str] = None
    notes: Optional[str] = None
    class Config:
        from_attributes = True

# -----------------------------
# RESOLVE / CHECK / STATS
# -----------------------------

class ResolvedDayOut(BaseModel):
    date: date
    status: ResolvedStatus
    source: StatusSource
    booking_ref: Optional[str] = None
    is_past: bool = False
    visibility: Visibility = Visibility.VISIBLE
    notes: Optional[str] = None
    time_slots: list[dict] = []
    class Config:
        from_attributes = True

class CheckOut(BaseModel):
    date: date
    is_available: bool
    status: ResolvedStatus
    reason: str

class StatsOut(BaseModel):
    start_date: date
    end_date: date
    counts: dict[str, int]
    upcoming_bookings: int

# -----------------------------
# EVALUATE
# -----------------------------

class EvaluateIn(BaseModel):
    candidate_date: date
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    # naive = ora locale dell'entità; se assente si usa l'ora corrente
    now: Optional[datetime] = None

class EvaluationOut(BaseModel):
    decision: Decision
    reason: ReasonCode
    status: Optional[ResolvedStatus] = None
    class Config:
        from_attributes = True
