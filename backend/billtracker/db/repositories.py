# billtracker/db/repositories.py
"""Thin data-access objects over a SQLAlchemy Session.

Every bill lookup is scoped by owner id; a bill that exists but belongs to
someone else is reported exactly like a missing one (None / False).
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from billtracker.db import models

# columns update() may touch; callers derive status/paid_at with services.billing.set_status
BILL_PATCHABLE = {
    "name",
    "category",
    "amount",
    "due_date",
    "status",
    "paid_at",
    "invoice_file",
    "invoice_filename",
    "proof_file",
    "proof_filename",
    "payment_instructions",
}


@dataclass
class BillFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category: Optional[str] = None
    status: Optional[models.BillStatus] = None


class BillRepository:
    def __init__(self, db: Session):
        self.db = db

    def _owned(self, owner_id: int):
        return self.db.query(models.Bill).filter(models.Bill.user_id == owner_id)

    def find_by_owner(self, owner_id: int, filters: Optional[BillFilters] = None) -> List[models.Bill]:
        q = self._owned(owner_id)
        if filters is not None:
            if filters.start_date:
                q = q.filter(models.Bill.due_date >= filters.start_date)
            if filters.end_date:
                q = q.filter(models.Bill.due_date <= filters.end_date)
            if filters.category:
                q = q.filter(models.Bill.category == filters.category)
            if filters.status is not None:
                q = q.filter(models.Bill.status == filters.status)
        return q.order_by(models.Bill.due_date.asc(), models.Bill.id.asc()).all()

    def find_one(self, owner_id: int, bill_id: int) -> Optional[models.Bill]:
        return self._owned(owner_id).filter(models.Bill.id == bill_id).first()

    def insert(self, bill: models.Bill) -> models.Bill:
        self.db.add(bill)
        self.db.commit()
        self.db.refresh(bill)
        return bill

    def update(self, owner_id: int, bill_id: int, patch: Dict[str, Any]) -> Optional[models.Bill]:
        bill = self.find_one(owner_id, bill_id)
        if bill is None:
            return None
        for key, value in patch.items():
            if key not in BILL_PATCHABLE:
                raise ValueError(f"field not patchable: {key}")
            setattr(bill, key, value)
        self.db.add(bill)
        self.db.commit()
        self.db.refresh(bill)
        return bill

    def delete(self, owner_id: int, bill_id: int) -> bool:
        bill = self.find_one(owner_id, bill_id)
        if bill is None:
            return False
        self.db.delete(bill)
        self.db.commit()
        return True

    def find_pending_with_owner(self, due_on: Optional[date] = None) -> List[models.Bill]:
        """All pending bills across users with `bill.user` loaded, for the reminder sweeps."""
        q = (
            self.db.query(models.Bill)
            .options(joinedload(models.Bill.user))
            .filter(models.Bill.status == models.BillStatus.pending)
        )
        if due_on is not None:
            q = q.filter(models.Bill.due_date == due_on)
        return q.order_by(models.Bill.due_date.asc(), models.Bill.id.asc()).all()


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: int) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(func.lower(models.User.email) == email.lower()).first()

    def insert(self, user: models.User) -> models.User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_owner(self, owner_id: int) -> List[models.Category]:
        return (
            self.db.query(models.Category)
            .filter(models.Category.user_id == owner_id)
            .order_by(models.Category.name.asc())
            .all()
        )

    def find_one(self, owner_id: int, category_id: int) -> Optional[models.Category]:
        return (
            self.db.query(models.Category)
            .filter(models.Category.id == category_id, models.Category.user_id == owner_id)
            .first()
        )

    def find_by_name(self, owner_id: int, name: str) -> Optional[models.Category]:
        return (
            self.db.query(models.Category)
            .filter(models.Category.user_id == owner_id, func.lower(models.Category.name) == name.lower())
            .first()
        )

    def colors_for(self, owner_id: int) -> Dict[str, str]:
        return {c.name: c.color for c in self.find_by_owner(owner_id)}


class NotificationLedger:
    """Append-only record of reminders that went out."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_bill(self, bill_id: int) -> List[models.Notification]:
        return (
            self.db.query(models.Notification)
            .filter(models.Notification.bill_id == bill_id)
            .order_by(models.Notification.sent_at.desc(), models.Notification.id.desc())
            .all()
        )

    def insert(self, record: models.Notification) -> models.Notification:
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record
