from __future__ import annotations
from datetime import date, datetime, timezone as dt_tz
from showdown.config import settings
from showdown.errors import UploadNotOpen, CompetitionEnded

NOT_STARTED = 0


def start_instant(start: date | None = None) -> datetime:
    """Competition starts at UTC midnight of the configured date."""
    d = start or settings.competition_start_date
    return datetime(d.year, d.month, d.day, tzinfo=dt_tz.utc)


def current_week(now: datetime | None = None, start: date | None = None, weeks: int | None = None) -> int:
    """
    Week number for `now`, derived fresh on every call.

    Returns 0 before the start, 1..weeks during the run (7-day buckets from the
    start instant) and weeks + 1 once the run is over.

    Examples:
        >>> from datetime import date, datetime, timezone
        >>> current_week(datetime(2025, 10, 7, tzinfo=timezone.utc), date(2025, 10, 7), 10)
        1
        >>> current_week(datetime(2025, 10, 6, tzinfo=timezone.utc), date(2025, 10, 7), 10)
        0
    """
    weeks = weeks or settings.competition_weeks
    now = now or datetime.now(dt_tz.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt_tz.utc)
    # timedelta.days floors, so one second before the start is day -1
    diff_days = (now - start_instant(start)).days
    week = diff_days // 7 + 1
    if week < 1:
        return NOT_STARTED
    if week > weeks:
        return weeks + 1
    return week


def competition_status(week: int, weeks: int | None = None) -> str:
    weeks = weeks or settings.competition_weeks
    if week == NOT_STARTED:
        return "Not Started"
    if week > weeks:
        return "Ended"
    return "Active"


def ensure_upload_open(week: int, weeks: int | None = None) -> int:
    """Gate for the upload path only; voting is never gated by the week."""
    weeks = weeks or settings.competition_weeks
    if week == NOT_STARTED:
        raise UploadNotOpen()
    if week > weeks:
        raise CompetitionEnded()
    return week
