# billtracker/services/reports/aggregator.py
import calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from billtracker.db import models
from billtracker.db.repositories import BillFilters, BillRepository
from billtracker.services.formatting import NO_CATEGORY, STATUS_LABELS, format_brl, format_date

# query values the UI sends for "no filter"
ALL_CATEGORIES = {"", "todas", "all"}
ALL_STATUSES = {"", "todos", "all"}


@dataclass
class ReportFilters:
    year: int
    month: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category: Optional[str] = None
    status: Optional[str] = None

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def period_label(self) -> str:
        return f"{self.month:02d}/{self.year:04d}"

    def date_range(self):
        # an explicit range wins over the month in the URL
        if self.start_date and self.end_date:
            return self.start_date, self.end_date
        last_day = calendar.monthrange(self.year, self.month)[1]
        return date(self.year, self.month, 1), date(self.year, self.month, last_day)

    def to_bill_filters(self) -> BillFilters:
        start, end = self.date_range()
        category = None if (self.category or "").lower() in ALL_CATEGORIES else self.category
        status = None if (self.status or "").lower() in ALL_STATUSES else models.BillStatus(self.status)
        return BillFilters(start_date=start, end_date=end, category=category, status=status)


@dataclass
class ReportTotals:
    total: Decimal = Decimal("0.00")
    paid: Decimal = Decimal("0.00")
    pending: Decimal = Decimal("0.00")


@dataclass
class ReportRow:
    due_date: str
    name: str
    category: str
    status_label: str
    amount: str
    has_invoice: bool
    has_proof: bool
    has_payment_instructions: bool
    # raw values some renderers need (numeric xlsx cell, colours, zip attachments)
    bill_id: Optional[int] = None
    raw_amount: Decimal = Decimal("0.00")
    status: str = "pending"
    raw_category: Optional[str] = None
    invoice_file: Optional[str] = None
    invoice_filename: Optional[str] = None
    proof_file: Optional[str] = None
    proof_filename: Optional[str] = None


@dataclass
class ReportData:
    period: str
    period_label: str
    totals: ReportTotals = field(default_factory=ReportTotals)
    rows: List[ReportRow] = field(default_factory=list)

    @property
    def categories(self) -> List[str]:
        """Distinct categories in row order, for the PDF legend."""
        seen = []
        for row in self.rows:
            if row.raw_category and row.raw_category not in seen:
                seen.append(row.raw_category)
        return seen


def _status_value(status) -> str:
    return status.value if isinstance(status, models.BillStatus) else str(status)


def to_row(bill: models.Bill) -> ReportRow:
    status = _status_value(bill.status)
    return ReportRow(
        due_date=format_date(bill.due_date),
        name=bill.name,
        category=bill.category or NO_CATEGORY,
        status_label=STATUS_LABELS.get(status, status),
        amount=format_brl(bill.amount),
        has_invoice=bool(bill.invoice_file),
        has_proof=bool(bill.proof_file),
        has_payment_instructions=bool(bill.payment_instructions),
        bill_id=bill.id,
        raw_amount=Decimal(str(bill.amount)),
        status=status,
        raw_category=bill.category,
        invoice_file=bill.invoice_file,
        invoice_filename=bill.invoice_filename,
        proof_file=bill.proof_file,
        proof_filename=bill.proof_filename,
    )


def aggregate(bills: Iterable[models.Bill], period: str = "", period_label: str = "") -> ReportData:
    """
    Totals plus one row per bill, ordered by due date. `pending` is derived as
    total - paid so the three always add up.
    """
    ordered = sorted(bills, key=lambda b: (b.due_date, b.id or 0))
    total = sum((Decimal(str(b.amount)) for b in ordered), Decimal("0.00"))
    paid = sum(
        (Decimal(str(b.amount)) for b in ordered if _status_value(b.status) == models.BillStatus.paid.value),
        Decimal("0.00"),
    )
    totals = ReportTotals(total=total, paid=paid, pending=total - paid)
    return ReportData(period=period, period_label=period_label, totals=totals, rows=[to_row(b) for b in ordered])


def load_report_bills(repo: BillRepository, owner_id: int, filters: ReportFilters) -> List[models.Bill]:
    return repo.find_by_owner(owner_id, filters.to_bill_filters())
