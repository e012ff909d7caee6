# billtracker/schemas/bill.py
from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional
from decimal import Decimal
from enum import Enum


class BillStatus(str, Enum):
    pending = "pending"
    paid = "paid"


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name must not be blank")
    return v


class BillTemplate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    category: Optional[str] = Field(None, max_length=120)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return _strip_name(v)

    @field_validator("category")
    @classmethod
    def blank_category_is_none(cls, v):
        if v is None:
            return None
        return v.strip() or None


class BillCreate(BillTemplate):
    due_date: date


class BillCreateRequest(BillTemplate):
    """
    Single bill: send `due_date`.
    Recurring series: send `start_date` and `end_date` (one bill per month).
    """
    due_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_recurring(self) -> bool:
        return self.start_date is not None and self.end_date is not None


class BillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    category: Optional[str] = Field(None, max_length=120)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    due_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        # None passes through so the router can reject it explicitly
        if v is None:
            return None
        return _strip_name(v)


class BillStatusUpdate(BaseModel):
    status: BillStatus
    paid_at: Optional[datetime] = None


class PaymentInstructionsUpdate(BaseModel):
    payment_instructions: Optional[str] = Field(None, max_length=500)


class BillOut(BaseModel):
    id: int
    user_id: int
    name: str
    category: Optional[str]
    amount: Decimal
    due_date: date
    status: BillStatus
    paid_at: Optional[datetime]
    invoice_filename: Optional[str]
    proof_filename: Optional[str]
    payment_instructions: Optional[str]
    due_status: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator("status", mode="before")
    @classmethod
    def unwrap_db_status(cls, v):
        # the ORM hands back models.BillStatus members
        return getattr(v, "value", v)
