# billtracker/api/v1/reports.py
import logging
from datetime import date
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from fastapi.responses import Response

from billtracker.api.v1.deps import get_bill_repo, get_category_repo, get_current_user, get_file_store
from billtracker.db import models
from billtracker.db.repositories import BillRepository, CategoryRepository
from billtracker.services.errors import RenderFailure
from billtracker.services.reports import FORMATS, ReportFilters, aggregate, load_report_bills, render_report

logger = logging.getLogger(__name__)
router = APIRouter(tags=["reports"])


@router.get("/monthly/{year}/{month}/{fmt}")
def monthly_report(
    year: int = Path(..., ge=2000, le=2100),
    month: int = Path(..., ge=1, le=12),
    fmt: str = Path(..., description="pdf | xlsx | excel | csv | zip"),
    category: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: models.User = Depends(get_current_user),
    repo: BillRepository = Depends(get_bill_repo),
    categories: CategoryRepository = Depends(get_category_repo),
    file_store=Depends(get_file_store),
):
    """
    Download the month's report. `zip` bundles the PDF with every referenced
    boleto/comprovante under anexos/.
    """
    fmt = fmt.lower()
    if fmt not in FORMATS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported format: {fmt}")
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_date and end_date must be given together")
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_date must be before end_date")

    filters = ReportFilters(
        year=year, month=month, start_date=start_date, end_date=end_date, category=category, status=status_filter
    )
    try:
        bills = load_report_bills(repo, current_user.id, filters)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid status filter: {status_filter}")

    data = aggregate(bills, filters.period, filters.period_label)
    try:
        report = render_report(
            data,
            fmt,
            file_store=file_store,
            category_colors=categories.colors_for(current_user.id),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except RenderFailure as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    logger.info("Report %s (%s) for user %s: %d bill(s)", data.period, fmt, current_user.id, len(data.rows))
    return Response(
        content=report.content,
        media_type=report.content_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(report.filename)}"},
    )
