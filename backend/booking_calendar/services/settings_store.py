# backend/booking_calendar/services/settings_store.py
import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ValidationError, storage_errors
from ..models.availability_settings import AvailabilitySettings, DefaultStatus

logger = logging.getLogger(__name__)

# Valori di sistema quando l'entità non ha ancora salvato impostazioni
DEFAULTS = {
    "default_status": DefaultStatus.AVAILABLE,
    "advance_booking_days": 365,
    "minimum_notice_hours": 48,
    "allow_same_day": False,
    "buffer_hours_before": 0,
    "buffer_hours_after": 0,
    "show_calendar_publicly": True,
    "auto_decline_conflicts": True,
    "timezone": None,
}

INT_BOUNDS = {
    "advance_booking_days": (1, 730),
    "minimum_notice_hours": (0, 720),
    "buffer_hours_before": (0, 48),
    "buffer_hours_after": (0, 48),
}

BOOL_FIELDS = ("allow_same_day", "show_calendar_publicly", "auto_decline_conflicts")


@dataclass(frozen=True)
class SettingsView:
    entity_id: str
    default_status: DefaultStatus
    advance_booking_days: int
    minimum_notice_hours: int
    allow_same_day: bool
    buffer_hours_before: int
    buffer_hours_after: int
    show_calendar_publicly: bool
    auto_decline_conflicts: bool
    timezone: str | None
    is_default: bool


def get_settings(db: Session, entity_id: str) -> AvailabilitySettings | None:
    with storage_errors(db, "Lettura impostazioni fallita", entity_id=entity_id):
        return (
            db.query(AvailabilitySettings)
            .filter(AvailabilitySettings.entity_id == entity_id)
            .first()
        )


def effective_settings(db: Session, entity_id: str) -> SettingsView:
    row = get_settings(db, entity_id)
    if row is None:
        return SettingsView(entity_id=entity_id, is_default=True, **DEFAULTS)
    return SettingsView(
        entity_id=entity_id,
        is_default=False,
        **{field: getattr(row, field) for field in DEFAULTS},
    )


def validate_changes(changes: dict) -> dict:
    """
    Valida un aggiornamento parziale. I valori fuori limite sono un errore,
    non vengono mai riportati nel range.
    """
    clean: dict = {}
    for field, value in changes.items():
        if field not in DEFAULTS:
            raise ValidationError("Campo impostazioni sconosciuto", field=field)

        if field == "default_status":
            try:
                clean[field] = DefaultStatus(value)
            except ValueError:
                raise ValidationError("default_status non valido", field=field, value=value)

        elif field in INT_BOUNDS:
            lo, hi = INT_BOUNDS[field]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError("Valore intero richiesto", field=field, value=value)
            if not lo <= value <= hi:
                raise ValidationError(
                    f"{field} deve essere tra {lo} e {hi}", field=field, value=value
                )
            clean[field] = value

        elif field in BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ValidationError("Valore booleano richiesto", field=field, value=value)
            clean[field] = value

        elif field == "timezone":
            if value is not None:
                try:
                    ZoneInfo(value)
                except (ZoneInfoNotFoundError, ValueError):
                    raise ValidationError("Fuso orario sconosciuto", field=field, value=value)
            clean[field] = value

    return clean


def upsert_settings(db: Session, entity_id: str, changes: dict) -> AvailabilitySettings:
    """Crea al primo salvataggio, poi aggiorna sul posto."""
    clean = validate_changes(changes)

    with storage_errors(db, "Salvataggio impostazioni fallito", entity_id=entity_id):
        row = get_settings(db, entity_id)
        if row is None:
            row = AvailabilitySettings(entity_id=entity_id, **{**DEFAULTS, **clean})
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                # inserimento concorrente: l'altra riga esiste già, aggiorniamo quella
                db.rollback()
                row = get_settings(db, entity_id)
                for field, value in clean.items():
                    setattr(row, field, value)
                db.commit()
        else:
            for field, value in clean.items():
                setattr(row, field, value)
            db.commit()
        db.refresh(row)

    logger.info("settings saved entity=%s fields=%s", entity_id, sorted(clean))
    return row
