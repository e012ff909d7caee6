# billtracker/services/reports/pdf_report.py
"""Paginated PDF report drawn with reportlab's canvas.

Layout is fixed: 900x595pt pages, 18pt table rows. When the next row would
run into the footer area a new page starts and the column header is drawn
again.
"""
import io
from datetime import datetime
from typing import Dict, Optional

from reportlab.lib.colors import HexColor
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from billtracker.services.formatting import NO_CATEGORY, format_brl, format_datetime, yes_no
from billtracker.services.reports.aggregator import ReportData, ReportRow
from billtracker.services.reports.output import PDF_TYPE, ReportFile, report_filename

PAGE_WIDTH, PAGE_HEIGHT = 900, 595
MARGIN = 30
ROW_HEIGHT = 18
FOOTER_SPACE = 30
TOP = PAGE_HEIGHT - MARGIN
BOTTOM = MARGIN + FOOTER_SPACE

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

# (title, x, width)
COLUMNS = [
    ("Data", 30, 65),
    ("Descrição", 100, 195),
    ("Categoria", 300, 115),
    ("Status", 420, 65),
    ("Valor", 490, 85),
    ("Boleto", 580, 55),
    ("Comprovante", 640, 85),
    ("PIX", 730, 40),
]
TABLE_RIGHT = 800

TITLE_BLUE = "#1e40af"
TEXT_DARK = "#1f2937"
TEXT = "#374151"
MUTED = "#6b7280"
FAINT = "#9ca3af"
RULE = "#e5e7eb"
GREEN = "#10b981"
AMBER = "#f59e0b"
RED = "#ef4444"
LEGEND_FALLBACK = "#9ca3af"
ROW_FALLBACK = "#f3f4f6"
LEGEND_PER_LINE = 4
LEGEND_STEP = 120


def _fit(text: str, width: float, font: str = FONT, size: float = 9) -> str:
    if stringWidth(text, font, size) <= width:
        return text
    ellipsis = "..."
    while text and stringWidth(text + ellipsis, font, size) > width:
        text = text[:-1]
    return text + ellipsis


def _text(c: canvas.Canvas, x: float, y: float, text: str, color: str = TEXT, font: str = FONT, size: float = 9):
    c.setFont(font, size)
    c.setFillColor(HexColor(color))
    c.drawString(x, y, text)


def _draw_header(c: canvas.Canvas, data: ReportData) -> float:
    y = TOP - 10
    c.setFont(FONT_BOLD, 20)
    c.setFillColor(HexColor(TITLE_BLUE))
    c.drawCentredString(PAGE_WIDTH / 2, y, "Relatório Mensal de Contas")
    y -= 24
    c.setFont(FONT, 12)
    c.setFillColor(HexColor(TEXT))
    c.drawCentredString(PAGE_WIDTH / 2, y, f"Período: {data.period_label}")
    y -= 32

    _text(c, MARGIN, y, "RESUMO FINANCEIRO", TEXT_DARK, FONT_BOLD, 11)
    y -= 18
    totals = data.totals
    _text(c, MARGIN, y, f"Total de Contas: {format_brl(totals.total)}", size=10)
    _text(c, 250, y, f"Contas Pagas: {format_brl(totals.paid)}", size=10)
    _text(c, 470, y, f"Contas Pendentes: {format_brl(totals.pending)}", size=10)
    return y - 28


def _draw_legend(c: canvas.Canvas, data: ReportData, colors: Dict[str, str], y: float) -> float:
    _text(c, MARGIN, y, "LEGENDA DE CATEGORIAS:", TEXT_DARK, FONT_BOLD, 10)
    y -= 18
    for idx, name in enumerate(data.categories):
        if idx and idx % LEGEND_PER_LINE == 0:
            y -= 18
        x = MARGIN + (idx % LEGEND_PER_LINE) * LEGEND_STEP
        c.setFillColor(HexColor(colors.get(name, LEGEND_FALLBACK)))
        c.rect(x, y - 1, 10, 10, stroke=0, fill=1)
        _text(c, x + 15, y, _fit(name, LEGEND_STEP - 20, size=8), size=8)
    return y - 30


def _draw_table_header(c: canvas.Canvas, y: float) -> float:
    for title, x, _ in COLUMNS:
        _text(c, x, y, title, MUTED)
    c.setStrokeColor(HexColor(RULE))
    c.line(MARGIN, y - 5, TABLE_RIGHT, y - 5)
    return y - 20


def _draw_row(c: canvas.Canvas, row: ReportRow, y: float, colors: Dict[str, str]) -> None:
    tint = colors.get(row.raw_category or "", ROW_FALLBACK)
    c.saveState()
    c.setFillColor(HexColor(tint), alpha=0.2)
    c.rect(MARGIN, y - 5, TABLE_RIGHT - MARGIN, ROW_HEIGHT, stroke=0, fill=1)
    c.restoreState()

    widths = {title: width for title, _, width in COLUMNS}
    xs = {title: x for title, x, _ in COLUMNS}
    _text(c, xs["Data"], y, row.due_date)
    _text(c, xs["Descrição"], y, _fit(row.name, widths["Descrição"]))
    _text(c, xs["Categoria"], y, _fit(row.category or NO_CATEGORY, widths["Categoria"]))
    _text(c, xs["Status"], y, row.status_label, GREEN if row.status == "paid" else AMBER)
    _text(c, xs["Valor"], y, row.amount)
    _text(c, xs["Boleto"], y, yes_no(row.has_invoice), TITLE_BLUE if row.has_invoice else RED)
    _text(c, xs["Comprovante"], y, yes_no(row.has_proof), TITLE_BLUE if row.has_proof else RED)
    _text(c, xs["PIX"], y, yes_no(row.has_payment_instructions), GREEN if row.has_payment_instructions else RED)


def _draw_footer(c: canvas.Canvas, generated_at: datetime) -> None:
    _text(c, MARGIN, MARGIN, f"Relatório gerado em: {format_datetime(generated_at)}", FAINT, size=8)
    c.setFont(FONT, 8)
    c.drawRightString(PAGE_WIDTH - MARGIN, MARGIN, "Sistema Financeiro - Relatórios Automáticos")


def render_pdf(
    data: ReportData,
    category_colors: Optional[Dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> ReportFile:
    colors = category_colors or {}
    generated_at = generated_at or datetime.now()
    buf = io.BytesIO()

    # invariant=1 pins the document id/creation date so equal input gives equal bytes
    c = canvas.Canvas(buf, pagesize=(PAGE_WIDTH, PAGE_HEIGHT), invariant=1)
    c.setTitle(f"Relatório Mensal - {data.period_label}")
    c.setAuthor("Sistema Financeiro")
    c.setSubject("Relatório de Contas")

    y = _draw_header(c, data)
    if data.rows:
        y = _draw_legend(c, data, colors, y)
        c.setFont(FONT_BOLD, 13)
        c.setFillColor(HexColor(TEXT_DARK))
        c.drawCentredString(PAGE_WIDTH / 2, y, "DETALHAMENTO DAS CONTAS")
        y = _draw_table_header(c, y - 24)
        for row in data.rows:
            if y - ROW_HEIGHT < BOTTOM:
                _draw_footer(c, generated_at)
                c.showPage()
                y = _draw_table_header(c, TOP - 10)
            _draw_row(c, row, y, colors)
            y -= ROW_HEIGHT
    else:
        _text(c, MARGIN, y, "Nenhuma conta encontrada no período.", MUTED, size=10)

    _draw_footer(c, generated_at)
    c.save()

    return ReportFile(buf.getvalue(), report_filename(data.period, "pdf"), PDF_TYPE)
