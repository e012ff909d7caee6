# billtracker/services/recurrence.py
import logging
from datetime import date
from typing import List

from dateutil.relativedelta import relativedelta

from billtracker.db import models
from billtracker.db.repositories import BillRepository
from billtracker.schemas.bill import BillCreate, BillTemplate
from billtracker.services.errors import InvalidRange, PartialCreation

logger = logging.getLogger(__name__)


def month_span(start_date: date, end_date: date) -> int:
    """Number of calendar months touched by [start_date, end_date], inclusive."""
    return (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month) + 1


def expand_recurrence(template: BillTemplate, start_date: date, end_date: date) -> List[BillCreate]:
    """
    One creation request per calendar month from start's month through end's
    month. The day of month follows start_date, clipped to the month's last day
    (2024-01-31 -> 2024-02-29 -> 2024-03-31).
    """
    if start_date > end_date:
        raise InvalidRange(f"start date {start_date.isoformat()} is after end date {end_date.isoformat()}")

    requests = []
    for i in range(month_span(start_date, end_date)):
        # always offset from the start date so a clipped month doesn't drag later ones
        due = start_date + relativedelta(months=i)
        requests.append(
            BillCreate(
                name=template.name,
                category=template.category,
                amount=template.amount,
                due_date=due,
            )
        )
    return requests


def create_recurring_bills(repo: BillRepository, owner_id: int, requests: List[BillCreate]) -> List[models.Bill]:
    """
    Insert the expanded series one bill at a time. Not atomic: on failure the
    bills already inserted stay and are reported through PartialCreation.
    """
    created: List[models.Bill] = []
    for req in requests:
        try:
            bill = repo.insert(
                models.Bill(
                    user_id=owner_id,
                    name=req.name,
                    category=req.category,
                    amount=req.amount,
                    due_date=req.due_date,
                    status=models.BillStatus.pending,
                )
            )
        except Exception as exc:
            repo.db.rollback()
            logger.exception("Recurring series for user %s stopped after %d bill(s)", owner_id, len(created))
            raise PartialCreation(created, exc) from exc
        created.append(bill)
    logger.info("Created %d recurring bill(s) for user %s", len(created), owner_id)
    return created
