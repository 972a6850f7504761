# backend/booking_calendar/services/ledger.py
"""
Accesso in sola lettura al Booking Ledger.

Due sorgenti: la tabella `bookings` dello stesso database, oppure il ledger
ospitato via HTTP (BOOKING_LEDGER_URL). Il motore non scrive mai qui.
"""
import logging
from dataclasses import dataclass
from datetime import date, time

import requests
from sqlalchemy.orm import Session

from ..config import settings
from ..core.errors import StorageError, storage_errors
from ..models.booking import Booking, BookingStatus, CONFIRMED_BOOKING_STATUSES, INACTIVE_BOOKING_STATUSES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerBooking:
    id: str
    entity_id: str
    date: date
    time_start: time | None
    time_end: time | None
    status: BookingStatus

    @property
    def is_all_day(self) -> bool:
        return self.time_start is None or self.time_end is None

    @property
    def is_confirmed(self) -> bool:
        return self.status in CONFIRMED_BOOKING_STATUSES


def booking_status(raw) -> BookingStatus:
    """
    Stato del ledger -> BookingStatus. Uno stato sconosciuto non rompe la lettura:
    la data resta occupata come pending.
    """
    if raw is None:
        return BookingStatus.PENDING
    try:
        return BookingStatus(str(raw).strip().lower())
    except ValueError:
        logger.warning("unknown ledger status %r, treated as pending", raw)
        return BookingStatus.PENDING


class SqlBookingLedger:
    def __init__(self, db: Session):
        self.db = db

    def list_bookings(self, entity_id: str, start: date, end: date) -> list[LedgerBooking]:
        with storage_errors(self.db, "Lettura ledger fallita", entity_id=entity_id, start=start, end=end):
            rows = (
                self.db.query(Booking)
                .filter(
                    Booking.entity_id == entity_id,
                    Booking.date >= start,
                    Booking.date <= end,
                    Booking.status.notin_(INACTIVE_BOOKING_STATUSES),
                )
                .order_by(Booking.date.asc(), Booking.time_start.asc())
                .all()
            )
        return [
            LedgerBooking(
                id=str(b.id),
                entity_id=b.entity_id,
                date=b.date,
                time_start=b.time_start,
                time_end=b.time_end,
                status=b.status,
            )
            for b in rows
        ]


class HttpBookingLedger:
    def __init__(self, base_url: str, token: str | None = None, timeout: float = 20.0):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, url: str, params: dict, **context):
        try:
            r = requests.get(url, headers=self._headers(), params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("ledger timeout url=%s %s", url, context)
            raise StorageError("Timeout chiamando il ledger", url=url, **context) from exc
        except requests.RequestException as exc:
            logger.warning("ledger unreachable url=%s %s: %s", url, context, exc)
            raise StorageError("Ledger non raggiungibile", url=url, **context) from exc

        if r.status_code >= 400:
            logger.warning("ledger http %s url=%s %s", r.status_code, url, context)
            raise StorageError(
                "Il ledger ha risposto con errore",
                status=r.status_code, reason=r.reason, url=url, **context,
            )
        try:
            return r.json()
        except ValueError as exc:
            raise StorageError("Risposta del ledger non JSON", url=url, **context) from exc

    @staticmethod
    def _parse(item: dict) -> LedgerBooking:
        def _t(value):
            return time.fromisoformat(value) if value else None

        return LedgerBooking(
            id=str(item["id"]),
            entity_id=str(item["entity_id"]),
            date=date.fromisoformat(item["date"]),
            time_start=_t(item.get("time_start")),
            time_end=_t(item.get("time_end")),
            status=booking_status(item.get("status")),
        )

    def list_bookings(self, entity_id: str, start: date, end: date) -> list[LedgerBooking]:
        context = {"entity_id": entity_id, "start": start, "end": end}
        url = f"{self.base_url}/entities/{entity_id}/bookings"
        payload = self._get(
            url, {"start_date": start.isoformat(), "end_date": end.isoformat()}, **context
        )

        items = payload.get("bookings", []) if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise StorageError("Formato ledger inatteso", **context)

        out: list[LedgerBooking] = []
        for item in items:
            try:
                b = self._parse(item)
            except (KeyError, TypeError, ValueError) as exc:
                raise StorageError("Prenotazione malformata dal ledger", item=item, **context) from exc
            # il ledger può anche non filtrare: lo facciamo noi
            if b.status not in INACTIVE_BOOKING_STATUSES and start <= b.date <= end:
                out.append(b)
        logger.debug("ledger http entity=%s %s..%s -> %d bookings", entity_id, start, end, len(out))
        return out


def get_ledger(db: Session):
    if settings.BOOKING_LEDGER_URL:
        return HttpBookingLedger(
            settings.BOOKING_LEDGER_URL,
            token=settings.BOOKING_LEDGER_TOKEN,
            timeout=settings.BOOKING_LEDGER_TIMEOUT_SEC,
        )
    return SqlBookingLedger(db)
