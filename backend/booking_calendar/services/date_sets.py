# Insiemi di date per le azioni rapide (settimana, mese, weekend, feriali)
import calendar
from datetime import date, timedelta

from ..core.errors import ValidationError


def date_range(start: date, end: date) -> list[date]:
    if start > end:
        raise ValidationError("start deve precedere end", start=start, end=end)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def week_dates(anchor: date) -> list[date]:
    """Settimana (lunedì-domenica) che contiene anchor."""
    monday = anchor - timedelta(days=anchor.weekday())
    return [monday + timedelta(days=i) for i in range(7)]


def month_dates(year: int, month: int) -> list[date]:
    if not 1 <= month <= 12:
        raise ValidationError("Mese non valido", month=month)
    days_in_month = calendar.monthrange(year, month)[1]
    return [date(year, month, d) for d in range(1, days_in_month + 1)]


def weekend_dates(year: int, month: int) -> list[date]:
    return [d for d in month_dates(year, month) if d.weekday() >= 5]


def weekday_dates(year: int, month: int) -> list[date]:
    return [d for d in month_dates(year, month) if d.weekday() < 5]
