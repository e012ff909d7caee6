# billtracker/services/reports/output.py
from dataclasses import dataclass

PDF_TYPE = "application/pdf"
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_TYPE = "text/csv"
ZIP_TYPE = "application/zip"


@dataclass
class ReportFile:
    content: bytes
    filename: str
    content_type: str


def report_filename(period: str, ext: str, complete: bool = False) -> str:
    stem = "relatorio-completo" if complete else "relatorio"
    return f"{stem}-{period}.{ext}" if period else f"{stem}.{ext}"
