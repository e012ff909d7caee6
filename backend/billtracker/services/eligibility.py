# billtracker/services/eligibility.py
"""Who gets a reminder on this run.

Regular reminder: once per bill, the first run that falls inside the notice
window [due - N days, due]. Any ledger record for the bill blocks it for good.

Urgent reminder: on the due day itself, again whenever the newest ledger
record for the bill is at least URGENT_COOLDOWN old. How many go out per day
depends only on how often the scheduler calls the urgent sweep.

The two are independent, so a bill can get a regular reminder and then
urgent ones on its due date.
"""
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from billtracker.db import models
from billtracker.services.due_dates import notice_window_start

URGENT_COOLDOWN = timedelta(hours=3)
DEFAULT_DAYS_BEFORE = 3


def _latest(records: Sequence[models.Notification]) -> Optional[models.Notification]:
    if not records:
        return None
    return max(records, key=lambda r: r.sent_at)


def is_regular_reminder_due(
    bill: models.Bill,
    days_before: Optional[int],
    records: Sequence[models.Notification],
    today: date,
) -> bool:
    if bill.status is not models.BillStatus.pending:
        return False
    if records:
        return False
    window_start = notice_window_start(bill.due_date, days_before or DEFAULT_DAYS_BEFORE)
    return window_start <= today <= bill.due_date


def is_urgent_reminder_due(
    bill: models.Bill,
    records: Sequence[models.Notification],
    now: datetime,
    today: date,
) -> bool:
    """`now` is naive UTC like the ledger's sent_at; `today` is the local calendar day."""
    if bill.status is not models.BillStatus.pending:
        return False
    if bill.due_date != today:
        return False
    latest = _latest(records)
    return latest is None or latest.sent_at <= now - URGENT_COOLDOWN
