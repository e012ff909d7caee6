# billtracker/services/billing.py
from datetime import datetime
from typing import Any, Dict, Optional, Union

from billtracker.db import models


def set_status(
    bill: models.Bill,
    new_status: Union[models.BillStatus, str],
    paid_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Move a bill to `new_status` keeping `status == paid <=> paid_at is not None`.

    Paying uses the caller's `paid_at` (payment done on an earlier day) or now;
    going back to pending clears it. The bill is mutated in place and the
    applied patch is returned so it can also be handed to a repository.
    """
    status = models.BillStatus(new_status)
    if status is models.BillStatus.paid:
        stamp = paid_at or now or datetime.utcnow()
        if stamp.tzinfo is not None:
            stamp = stamp.replace(tzinfo=None) - stamp.utcoffset()
        patch = {"status": status, "paid_at": stamp}
    else:
        patch = {"status": status, "paid_at": None}
    bill.status = patch["status"]
    bill.paid_at = patch["paid_at"]
    return patch
