# rollcall/backend/modules/clock.py

from datetime import datetime, timezone, timedelta

from ..config.config import settings


def local_timezone() -> timezone:
    """The school's fixed UTC offset."""
    return timezone(timedelta(hours=settings.LOCAL_UTC_OFFSET_HOURS))


def local_now() -> datetime:
    """Current wall-clock time at the school, as a naive datetime."""
    return datetime.now(timezone.utc).astimezone(local_timezone()).replace(tzinfo=None)


def to_local_naive(moment: datetime) -> datetime:
    """
    Converts an aware datetime to the school's naive wall-clock time.
    Naive datetimes are assumed to already be local and are returned unchanged.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(local_timezone()).replace(tzinfo=None)
