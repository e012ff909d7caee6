# billtracker/services/reports/__init__.py
"""Monthly report generation: aggregate bills once, render one format."""
import logging
from datetime import datetime
from typing import Dict, Iterable, Optional
from zoneinfo import ZoneInfo

from billtracker.core.config import settings
from billtracker.db import models
from billtracker.services.errors import RenderFailure
from billtracker.services.reports.aggregator import (
    ReportData,
    ReportFilters,
    ReportRow,
    ReportTotals,
    aggregate,
    load_report_bills,
)
from billtracker.services.reports.csv_report import render_csv
from billtracker.services.reports.output import ReportFile
from billtracker.services.reports.pdf_report import render_pdf
from billtracker.services.reports.xlsx_report import render_xlsx
from billtracker.services.reports.zip_report import render_zip

logger = logging.getLogger(__name__)

FORMATS = ("pdf", "xlsx", "excel", "csv", "zip")


def render_report(
    data: ReportData,
    fmt: str = "pdf",
    *,
    file_store=None,
    category_colors: Optional[Dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> ReportFile:
    fmt = (fmt or "pdf").lower()
    if fmt not in FORMATS:
        raise ValueError(f"unsupported report format: {fmt}")
    if generated_at is None:
        generated_at = datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)

    try:
        if fmt == "zip":
            return render_zip(data, file_store, category_colors, generated_at)
        if fmt in ("xlsx", "excel"):
            return render_xlsx(data, generated_at)
        if fmt == "csv":
            return render_csv(data)
        return render_pdf(data, category_colors, generated_at)
    except Exception as exc:
        logger.exception("Rendering %s report for %s failed", fmt, data.period)
        raise RenderFailure(f"could not generate {fmt} report: {exc}") from exc


def generate_report(
    bills: Iterable[models.Bill],
    fmt: str = "pdf",
    *,
    period: str = "",
    period_label: str = "",
    file_store=None,
    category_colors: Optional[Dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> ReportFile:
    data = aggregate(bills, period, period_label)
    return render_report(
        data, fmt, file_store=file_store, category_colors=category_colors, generated_at=generated_at
    )


__all__ = [
    "FORMATS",
    "ReportData",
    "ReportFile",
    "ReportFilters",
    "ReportRow",
    "ReportTotals",
    "aggregate",
    "generate_report",
    "load_report_bills",
    "render_report",
]
