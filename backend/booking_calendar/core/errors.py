"""
Errori del motore di disponibilità e mappatura verso HTTP.

Le decisioni (admit/deny/review) e gli esiti per data (applied/rejected) sono dati,
non eccezioni: qui vivono solo input malformato, riferimenti mancanti e guasti del backend.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


class CalendarError(Exception):
    code = "calendar_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({ctx})"


class ValidationError(CalendarError):
    """Input malformato: range invertiti, campi fuori limite, durate nulle."""
    code = "validation_error"


class NotFoundError(CalendarError):
    code = "not_found"


class ConflictError(CalendarError):
    """Riservato ai chiamanti che vogliono batch tutto-o-niente."""
    code = "conflict"


class StorageError(CalendarError):
    """Guasto del backend: ritentabile per letture e scritture idempotenti."""
    code = "storage_error"


# (classe, status HTTP). Il primo match vince.
ERROR_STATUS: list[tuple[type[CalendarError], int]] = [
    (ValidationError, 422),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StorageError, 503),
]


def error_status(exc: CalendarError) -> int:
    for cls, status_code in ERROR_STATUS:
        if isinstance(exc, cls):
            return status_code
    return 500


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    return str(value)


def error_body(exc: CalendarError) -> dict:
    return {
        "detail": exc.message,
        "code": exc.code,
        "context": {k: _jsonable(v) for k, v in exc.context.items()},
    }


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CalendarError)
    async def _calendar_error(request: Request, exc: CalendarError):
        return JSONResponse(status_code=error_status(exc), content=error_body(exc))


@contextmanager
def storage_errors(db: Session, message: str = "Backend non disponibile", **context: Any):
    """
    Converte i guasti SQLAlchemy in StorageError (con rollback della sessione),
    mantenendo entità/data nel contesto per permettere al chiamante di ri-risolvere.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(message, **context) from exc
