# backend/booking_calendar/routers/availability.py
from dataclasses import asdict
from datetime import date, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..core.clock import local_today
from ..database import get_db
from ..deps import get_current_entity, get_optional_entity
from ..schemas.availability import (
    BulkResultOut,
    CheckOut,
    DatePreset,
    DeleteDatesIn,
    EntryOut,
    EvaluateIn,
    EvaluationOut,
    ResolvedDayOut,
    SetStatusIn,
    StatsOut,
)
from ..core.errors import ValidationError
from ..services import availability_store, bulk, date_sets, eligibility, resolver, settings_store
from ..services.ical_export import build_ics


# -----------------------------------------
# Helpers
# -----------------------------------------
def _preset_dates(p: DatePreset) -> list[date]:
    if p.kind == "range":
        if not p.start or not p.end:
            raise ValidationError("start e end richiesti per il preset range", kind=p.kind)
        resolver.check_window(p.start, p.end)
        return date_sets.date_range(p.start, p.end)
    if p.kind == "week":
        if not p.anchor:
            raise ValidationError("anchor richiesto per il preset week", kind=p.kind)
        return date_sets.week_dates(p.anchor)
    if p.year is None or p.month is None:
        raise ValidationError("year e month richiesti per il preset", kind=p.kind)
    if p.kind == "month":
        return date_sets.month_dates(p.year, p.month)
    if p.kind == "weekends":
        return date_sets.weekend_dates(p.year, p.month)
    return date_sets.weekday_dates(p.year, p.month)


def _target_dates(dates: list[date], preset: DatePreset | None) -> list[date]:
    out = set(dates)
    if preset:
        out.update(_preset_dates(preset))
    if not out:
        raise ValidationError("Nessuna data indicata")
    return sorted(out)


def _bulk_out(results: list[bulk.DateOutcome]) -> BulkResultOut:
    applied = sum(1 for r in results if r.applied)
    return BulkResultOut(
        applied=applied,
        rejected=len(results) - applied,
        results=[asdict(r) for r in results],
    )


def _ensure_public(db: Session, entity_id: str) -> settings_store.SettingsView:
    """403 se il calendario non è pubblico; serve per ogni lettura di terzi."""
    prefs = settings_store.effective_settings(db, entity_id)
    if not prefs.show_calendar_publicly:
        raise HTTPException(403, "Calendario non pubblico")
    return prefs


# -----------------------------------------
# Router
# -----------------------------------------
router = APIRouter(prefix="/availability", tags=["availability"])

# -----------------------------------------------------------------------------
# PROPRIETARIO: entry esplicite e modifiche in blocco (entità dal token)
# -----------------------------------------------------------------------------
@router.get("/me/entries", response_model=List[EntryOut])
def my_entries(
    start: date,
    end: date,
    db: Session = Depends(get_db),
    me: str = Depends(get_current_entity),
):
    resolver.check_window(start, end)
    return availability_store.list_entries(db, me, start, end)


@router.post("/me/status", response_model=BulkResultOut)
def my_set_status(
    payload: SetStatusIn,
    db: Session = Depends(get_db),
    me: str = Depends(get_current_entity),
):
    results = bulk.set_status(
        db,
        me,
        _target_dates(payload.dates, payload.preset),
        payload.status,
        visibility=payload.visibility,
        notes=payload.notes,
        time_slots=payload.time_slots,
    )
    return _bulk_out(results)


@router.post("/me/delete", response_model=BulkResultOut)
def my_delete(
    payload: DeleteDatesIn,
    db: Session = Depends(get_db),
    me: str = Depends(get_current_entity),
):
    results = bulk.delete(db, me, _target_dates(payload.dates, payload.preset))
    return _bulk_out(results)


# -----------------------------------------------------------------------------
# LETTURA (qualunque chiamante: UI, flussi di prenotazione)
# Il proprietario vede tutto; gli altri solo la proiezione pubblica, se consentita.
# -----------------------------------------------------------------------------
@router.get("/{entity_id}/resolve", response_model=List[ResolvedDayOut])
def resolve_range(
    entity_id: str,
    start: date,
    end: date,
    db: Session = Depends(get_db),
    me: str | None = Depends(get_optional_entity),
):
    if me == entity_id:
        return resolver.resolve(db, entity_id, start, end)
    prefs = _ensure_public(db, entity_id)
    return resolver.public_view(resolver.resolve(db, entity_id, start, end, prefs=prefs))


@router.get("/{entity_id}/check", response_model=CheckOut)
def check_day(
    entity_id: str,
    day: date,
    db: Session = Depends(get_db),
    me: str | None = Depends(get_optional_entity),
):
    public = me != entity_id
    if public:
        _ensure_public(db, entity_id)
    return resolver.check_availability(db, entity_id, day, public=public)


@router.get("/{entity_id}/stats", response_model=StatsOut)
def stats(
    entity_id: str,
    start: date,
    end: date,
    db: Session = Depends(get_db),
    me: str | None = Depends(get_optional_entity),
):
    public = me != entity_id
    if public:
        _ensure_public(db, entity_id)
    return resolver.calendar_stats(db, entity_id, start, end, public=public)


@router.get("/{entity_id}/public", response_model=List[ResolvedDayOut])
def public_calendar(
    entity_id: str,
    start: date,
    end: date,
    db: Session = Depends(get_db),
):
    prefs = _ensure_public(db, entity_id)
    days = resolver.resolve(db, entity_id, start, end, prefs=prefs)
    return resolver.public_view(days)


@router.get("/{entity_id}/calendar.ics")
def calendar_ics(
    entity_id: str,
    days: int | None = Query(None, ge=1, le=730),
    db: Session = Depends(get_db),
):
    prefs = _ensure_public(db, entity_id)
    today = local_today(prefs.timezone)
    horizon = today + timedelta(days=days or prefs.advance_booking_days)
    resolved = resolver.resolve(db, entity_id, today, horizon, today=today, prefs=prefs)
    body = build_ics(entity_id, resolved, settings.CALENDAR_NAME)
    return Response(
        content=body,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{entity_id}.ics"'},
    )


@router.post("/{entity_id}/evaluate", response_model=EvaluationOut)
def evaluate(entity_id: str, payload: EvaluateIn, db: Session = Depends(get_db)):
    return eligibility.evaluate(
        db,
        entity_id,
        payload.candidate_date,
        payload.time_start,
        payload.time_end,
        payload.now,
    )
