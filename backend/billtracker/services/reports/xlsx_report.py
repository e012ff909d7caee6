# billtracker/services/reports/xlsx_report.py
import io
from datetime import datetime
from typing import Optional

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill

from billtracker.services.formatting import format_brl, yes_no
from billtracker.services.reports.aggregator import ReportData
from billtracker.services.reports.output import XLSX_TYPE, ReportFile, report_filename

SHEET_TITLE = "Relatório Mensal"
HEADER_ROW = 9
HEADERS = ["Data", "Descrição", "Categoria", "Status", "Valor", "Boleto", "Comprovante", "PIX"]
COLUMN_WIDTHS = {"A": 12, "B": 30, "C": 18, "D": 12, "E": 14, "F": 10, "G": 14, "H": 8}
AMOUNT_FORMAT = '"R$" #,##0.00'

HEADER_FONT = Font(bold=True, color="FFFFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF1E40AF")
STRIPE_FILL = PatternFill(fill_type="solid", fgColor="FFF9FAFB")
GREEN, AMBER, RED = "FF10B981", "FFF59E0B", "FFEF4444"


def _clean(value):
    # control characters (other than tab/newline) are not valid in sheet XML
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def render_xlsx(data: ReportData, generated_at: Optional[datetime] = None) -> ReportFile:
    generated_at = generated_at or datetime.now()
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.merge_cells("A1:H1")
    ws["A1"] = "Relatório Mensal de Contas"
    ws["A1"].font = Font(size=16, bold=True, color="FF1E40AF")
    ws["A1"].alignment = Alignment(horizontal="center")

    ws.merge_cells("A2:H2")
    ws["A2"] = f"Período: {data.period_label}"
    ws["A2"].font = Font(size=12, color="FF374151")
    ws["A2"].alignment = Alignment(horizontal="center")

    ws["A4"] = "RESUMO FINANCEIRO"
    ws["A4"].font = Font(size=14, bold=True, color="FF1F2937")
    ws["A5"] = f"Total de Contas: {format_brl(data.totals.total)}"
    ws["A6"] = f"Contas Pagas: {format_brl(data.totals.paid)}"
    ws["A7"] = f"Contas Pendentes: {format_brl(data.totals.pending)}"

    for col, title in enumerate(HEADERS, start=1):
        cell = ws.cell(row=HEADER_ROW, column=col, value=title)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center")

    for index, row in enumerate(data.rows):
        r = HEADER_ROW + 1 + index
        values = [
            row.due_date,
            row.name,
            row.category,
            row.status_label,
            row.raw_amount,
            yes_no(row.has_invoice),
            yes_no(row.has_proof),
            yes_no(row.has_payment_instructions),
        ]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=r, column=col, value=_clean(value))
            if index % 2 == 0:
                cell.fill = STRIPE_FILL

        ws.cell(row=r, column=4).font = Font(color=GREEN if row.status == "paid" else AMBER)
        ws.cell(row=r, column=5).number_format = AMOUNT_FORMAT
        ws.cell(row=r, column=6).font = Font(color=GREEN if row.has_invoice else RED)
        ws.cell(row=r, column=7).font = Font(color=GREEN if row.has_proof else RED)
        ws.cell(row=r, column=8).font = Font(color=GREEN if row.has_payment_instructions else RED)

    for letter, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[letter].width = width

    wb.properties.creator = "Sistema Financeiro"
    wb.properties.title = f"Relatório Mensal - {data.period_label}"
    wb.properties.created = generated_at
    wb.properties.modified = generated_at

    buf = io.BytesIO()
    wb.save(buf)
    return ReportFile(buf.getvalue(), report_filename(data.period, "xlsx"), XLSX_TYPE)
