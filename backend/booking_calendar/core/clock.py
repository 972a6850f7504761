from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..config import settings


def zone(tz: str | None = None) -> ZoneInfo:
    return ZoneInfo(tz or settings.APP_TIMEZONE)


def local_now(tz: str | None = None) -> datetime:
    """Ora locale (naive, wall-clock) nel fuso dell'entità."""
    return datetime.now(zone(tz)).replace(tzinfo=None, microsecond=0)


def local_today(tz: str | None = None) -> date:
    return local_now(tz).date()


def to_local(moment: datetime, tz: str | None = None) -> datetime:
    """Naive = già wall-clock locale; aware = convertito nel fuso dell'entità."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(zone(tz)).replace(tzinfo=None)
