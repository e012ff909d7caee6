# billtracker/services/due_dates.py
"""Calendar-day classification of bills.

All comparisons are by calendar day in the single operating timezone
(settings.TIMEZONE); time-of-day never matters.
"""
import enum
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

from billtracker.core.config import settings
from billtracker.db.models import BillStatus


class DueStatus(str, enum.Enum):
    overdue = "overdue"
    due_today = "due_today"
    upcoming = "upcoming"
    not_due = "not_due"
    paid = "paid"


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def local_today(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> date:
    """
    Calendar day of `now` (naive UTC, or aware) in the operating timezone.
    """
    tz = ZoneInfo(tz_name or settings.TIMEZONE)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def notice_window_start(due_date: date, days_before: int) -> date:
    return due_date - timedelta(days=days_before)


def classify_due_status(
    today: Union[date, datetime],
    due_date: Union[date, datetime],
    status: Union[BillStatus, str],
    days_before: Optional[int] = None,
) -> DueStatus:
    """
    paid always wins; otherwise overdue / due_today, and a future bill is
    `upcoming` inside the notice window (or when no window is given) and
    `not_due` before it.
    """
    if BillStatus(status) is BillStatus.paid:
        return DueStatus.paid
    today = _as_date(today)
    due = _as_date(due_date)
    if due < today:
        return DueStatus.overdue
    if due == today:
        return DueStatus.due_today
    if days_before is None or today >= notice_window_start(due, days_before):
        return DueStatus.upcoming
    return DueStatus.not_due
