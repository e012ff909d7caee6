# billtracker/services/reports/csv_report.py
import csv
from io import StringIO

from billtracker.services.formatting import yes_no
from billtracker.services.reports.aggregator import ReportData
from billtracker.services.reports.output import CSV_TYPE, ReportFile, report_filename

HEADERS = [
    "Data de Vencimento",
    "Descrição",
    "Categoria",
    "Status",
    "Valor (R$)",
    "Boleto",
    "Comprovante",
    "PIX",
]


def render_csv(data: ReportData) -> ReportFile:
    """One quoted line per bill, no totals block."""
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow(HEADERS)
    for row in data.rows:
        writer.writerow([
            row.due_date,
            row.name,
            row.category,
            row.status_label,
            f"{row.raw_amount:.2f}",
            yes_no(row.has_invoice),
            yes_no(row.has_proof),
            yes_no(row.has_payment_instructions),
        ])
    return ReportFile(output.getvalue().encode("utf-8"), report_filename(data.period, "csv"), CSV_TYPE)
