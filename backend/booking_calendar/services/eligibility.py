# backend/booking_calendar/services/eligibility.py
"""
Eligibility Evaluator: decide se una data/fascia candidata è prenotabile.

Regole in ordine, la prima che fallisce decide:
  1. orizzonte (advance_booking_days)       -> deny too_far_out
  2. preavviso (minimum_notice_hours)        -> deny insufficient_notice
     (saltato per oggi se allow_same_day)
  3. stato risolto della data                -> blocked / conflitti / unavailable / request_only
  4. altrimenti                              -> admit
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from ..core.clock import local_now, to_local
from ..core.enums import Decision, ReasonCode, ResolvedStatus
from ..core.errors import ValidationError
from . import settings_store
from .resolver import Commitment, resolve
from .settings_store import SettingsView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Evaluation:
    decision: Decision
    reason: ReasonCode
    status: ResolvedStatus | None = None

    @property
    def admitted(self) -> bool:
        return self.decision == Decision.ADMIT


def _check_times(time_start: time | None, time_end: time | None) -> None:
    if (time_start is None) != (time_end is None):
        raise ValidationError(
            "time_start e time_end vanno indicati insieme",
            time_start=time_start,
            time_end=time_end,
        )
    if time_start is not None and time_end <= time_start:
        raise ValidationError(
            "Fascia oraria vuota o invertita", time_start=time_start, time_end=time_end
        )


def overlaps(
    day: date,
    time_start: time,
    time_end: time,
    commitment: Commitment,
    before: timedelta,
    after: timedelta,
) -> bool:
    """Sovrapposizione tra la fascia candidata e l'impegno allargato dai buffer."""
    if commitment.is_all_day:
        return True
    busy_start = datetime.combine(day, commitment.start) - before
    busy_end = datetime.combine(day, commitment.end) + after
    cand_start = datetime.combine(day, time_start)
    cand_end = datetime.combine(day, time_end)
    return cand_start < busy_end and busy_start < cand_end


def _conflict(prefs: SettingsView, status: ResolvedStatus) -> Evaluation:
    if prefs.auto_decline_conflicts:
        return Evaluation(Decision.DENY, ReasonCode.TIME_CONFLICT, status)
    return Evaluation(Decision.REVIEW, ReasonCode.TIME_CONFLICT_NEEDS_APPROVAL, status)


def evaluate(
    db: Session,
    entity_id: str,
    candidate_date: date,
    time_start: time | None = None,
    time_end: time | None = None,
    now: datetime | None = None,
    *,
    ledger=None,
) -> Evaluation:
    _check_times(time_start, time_end)

    prefs = settings_store.effective_settings(db, entity_id)
    now = to_local(now, prefs.timezone) if now is not None else local_now(prefs.timezone)
    today = now.date()

    # 1. orizzonte
    if candidate_date > today + timedelta(days=prefs.advance_booking_days):
        return _log(entity_id, candidate_date, Evaluation(Decision.DENY, ReasonCode.TOO_FAR_OUT))

    # 2. preavviso
    same_day_ok = candidate_date == today and prefs.allow_same_day
    if not same_day_ok:
        lead = datetime.combine(candidate_date, time_start or time.min) - now
        if lead < timedelta(hours=prefs.minimum_notice_hours):
            return _log(entity_id, candidate_date,
                        Evaluation(Decision.DENY, ReasonCode.INSUFFICIENT_NOTICE))

    # 3. stato risolto
    day = resolve(db, entity_id, candidate_date, candidate_date,
                  today=today, ledger=ledger, prefs=prefs)[0]
    status = day.status

    if status == ResolvedStatus.BLOCKED:
        result = Evaluation(Decision.DENY, ReasonCode.DATE_BLOCKED, status)

    elif status in (ResolvedStatus.BOOKED, ResolvedStatus.PENDING):
        if time_start is None:
            # prenotazione di tutto il giorno: conta solo lo stato
            result = _conflict(prefs, status)
        else:
            before = timedelta(hours=prefs.buffer_hours_before)
            after = timedelta(hours=prefs.buffer_hours_after)
            clash = any(
                overlaps(candidate_date, time_start, time_end, c, before, after)
                for c in day.commitments
            )
            result = _conflict(prefs, status) if clash else Evaluation(Decision.ADMIT, ReasonCode.AVAILABLE, status)

    elif status == ResolvedStatus.UNAVAILABLE:
        result = Evaluation(Decision.DENY, ReasonCode.NOT_AVAILABLE, status)

    elif status == ResolvedStatus.REQUEST_ONLY:
        result = Evaluation(Decision.REVIEW, ReasonCode.REQUIRES_APPROVAL, status)

    else:
        result = Evaluation(Decision.ADMIT, ReasonCode.AVAILABLE, status)

    return _log(entity_id, candidate_date, result)


def _log(entity_id: str, candidate_date: date, result: Evaluation) -> Evaluation:
    logger.info("evaluate entity=%s date=%s -> %s/%s",
                entity_id, candidate_date, result.decision.value, result.reason.value)
    return result
