# billtracker/services/reports/zip_report.py
import io
import logging
import os
import re
import zipfile
from datetime import datetime
from typing import Dict, Optional

from billtracker.services.errors import AttachmentMissing
from billtracker.services.files import invoice_path, proof_path, read_attachment
from billtracker.services.reports.aggregator import ReportData
from billtracker.services.reports.output import ZIP_TYPE, ReportFile, report_filename
from billtracker.services.reports.pdf_report import render_pdf

logger = logging.getLogger(__name__)

ATTACHMENT_DIR = "anexos"


def _safe(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", name)


def _write(zf: zipfile.ZipFile, name: str, content: bytes, stamp: datetime) -> None:
    # fixed entry timestamp so the archive only changes when its content does
    info = zipfile.ZipInfo(name, date_time=stamp.timetuple()[:6])
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    zf.writestr(info, content, compresslevel=9)


def render_zip(
    data: ReportData,
    file_store=None,
    category_colors: Optional[Dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
    include_attachments: bool = True,
) -> ReportFile:
    """
    The PDF report plus every boleto/comprovante the rows reference. Files
    missing from storage are skipped, they never fail the archive.
    """
    generated_at = generated_at or datetime.now()
    report = render_pdf(data, category_colors, generated_at)

    buf = io.BytesIO()
    added = 0
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        _write(zf, report.filename, report.content, generated_at)

        if include_attachments and file_store is not None:
            for index, row in enumerate(data.rows, start=1):
                refs = (
                    ("boleto", row.invoice_file, row.invoice_filename, invoice_path),
                    ("comprovante", row.proof_file, row.proof_filename, proof_path),
                )
                for kind, stored, original, to_path in refs:
                    if not stored:
                        continue
                    try:
                        content = read_attachment(file_store, to_path(stored))
                    except AttachmentMissing:
                        logger.warning("Skipping %s of bill %s: not found in storage", kind, row.bill_id)
                        continue
                    label = os.path.basename(original or stored)
                    _write(zf, f"{ATTACHMENT_DIR}/{kind}-{index}-{_safe(row.name)}-{label}", content, generated_at)
                    added += 1

    logger.info("Report archive %s built with %d attachment(s)", data.period, added)
    return ReportFile(buf.getvalue(), report_filename(data.period, "zip", complete=True), ZIP_TYPE)
