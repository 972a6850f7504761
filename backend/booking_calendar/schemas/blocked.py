# backend/booking_calendar/schemas/blocked.py
from __future__ import annotations
from pydantic import BaseModel
from datetime import date
from typing import Optional

from ..models.blocked_range import BlockReason


class BlockRangeIn(BaseModel):
    start_date: date
    end_date: date
    reason: BlockReason = BlockReason.VACATION
    notes: Optional[str] = None

class BlockRangeUpdateIn(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[BlockReason] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

class BlockedRangeOut(BaseModel):
    id: int
    start_date: date
    end_date: date
    reason: BlockReason
    notes: Optional[str] = None
    is_active: bool
    duration_days: int
    class Config:
        from_attributes = True
