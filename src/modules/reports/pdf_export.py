"""
PDF encoder for report tables.

Three levels, each tried only after the previous one raised:
WeasyPrint rendering of the report.html template, a reportlab canvas grid,
and a reportlab plain-text dump of the rows.
"""

import logging
from datetime import datetime
from io import BytesIO
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape, portrait
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from src.core.config import settings
from src.core.exceptions import PdfGenerationUnavailableError
from src.modules.reports.tables import RenderedDocument, ReportTable, report_filename
from src.shared.utils.dates import DISPLAY_FORMAT, TIMESTAMP_FORMAT
from src.shared.utils.fallback import AllStrategiesFailed, run_strategies

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates" / "pdf"
MEDIA_TYPE = "application/pdf"

BRAND_BLUE = colors.HexColor("#2980B9")
HEADER_BAND = colors.HexColor("#F5F5F5")
PERIOD_BOX = colors.HexColor("#F0F0F0")
ALT_ROW = colors.HexColor("#F5F5F5")
TEXT_DARK = colors.HexColor("#333333")
TEXT_MUTED = colors.HexColor("#646464")
TEXT_BODY = colors.HexColor("#505050")
TEXT_FAINT = colors.HexColor("#787878")

# Layout, in mm from the top-left corner
MARGIN = 14
TABLE_TOP = 70
ROW_HEIGHT = 10
TEXT_LINE_HEIGHT = 7
CONTINUATION_TOP = 20
BOTTOM_LIMIT = 30
INFO_BLOCK_HEIGHT = 25

# Characters that end a CSS string or the enclosing <style> element
CSS_ESCAPES = frozenset('"\\<>\n\r')


class NumberedCanvas(canvas.Canvas):
    """
    Canvas that holds every page until save() so the footer can print
    "Page i of n". Callers must end the last page with showPage().
    """

    def __init__(self, *args, footer_text: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict] = []
        self._footer_text = footer_text

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        width, height = self._pagesize
        self.setStrokeColor(BRAND_BLUE)
        self.setLineWidth(0.5 * mm)
        self.line(10 * mm, 18 * mm, width - 10 * mm, 18 * mm)
        self.setFont("Helvetica", 8)
        self.setFillColor(TEXT_MUTED)
        self.drawRightString(width - 20 * mm, 10 * mm, f"Page {self._pageNumber} of {total}")
        self.drawString(15 * mm, 10 * mm, self._footer_text)


class _ReportCanvas:
    """Top-origin mm coordinates over a reportlab canvas for one report."""

    def __init__(
        self,
        table: ReportTable,
        company: dict[str, str],
        footer_text: str,
        generated_at: datetime,
        page_compression: int,
    ) -> None:
        self.table = table
        self.company = company
        self.generated_at = generated_at
        pagesize = landscape(A4) if table.orientation == "landscape" else portrait(A4)
        self.width, self.height = pagesize
        self.buffer = BytesIO()
        self.c = NumberedCanvas(
            self.buffer,
            pagesize=pagesize,
            footer_text=footer_text,
            pageCompression=page_compression,
        )
        self.c.setTitle(table.title)
        self.c.setAuthor(company.get("name", ""))

    @property
    def page_width_mm(self) -> float:
        return self.width / mm

    @property
    def page_height_mm(self) -> float:
        return self.height / mm

    def y(self, top_mm: float) -> float:
        return self.height - top_mm * mm

    def new_page_needed(self, top_mm: float) -> bool:
        return top_mm > self.page_height_mm - BOTTOM_LIMIT

    def draw_header(self) -> None:
        c, w = self.c, self.page_width_mm
        c.setStrokeColor(BRAND_BLUE)
        c.setLineWidth(1 * mm)
        c.line(10 * mm, self.y(10), (w - 10) * mm, self.y(10))
        c.setFillColor(HEADER_BAND)
        c.rect(10 * mm, self.y(31), (w - 20) * mm, 20 * mm, stroke=0, fill=1)

        c.setFont("Helvetica-Bold", 16)
        c.setFillColor(TEXT_DARK)
        c.drawString(15 * mm, self.y(21), self.company.get("name", ""))
        c.setFont("Helvetica", 8)
        c.setFillColor(TEXT_MUTED)
        c.drawString(15 * mm, self.y(26), self.company.get("contact_line", ""))

        c.setFont("Helvetica-Bold", 14)
        c.setFillColor(BRAND_BLUE)
        c.drawCentredString(w / 2 * mm, self.y(40), self.table.title)
        if self.table.subtitle:
            c.setFont("Helvetica", 10)
            c.setFillColor(TEXT_MUTED)
            c.drawCentredString(w / 2 * mm, self.y(46), self.table.subtitle)

        c.setFillColor(PERIOD_BOX)
        c.roundRect((w / 2 - 50) * mm, self.y(58), 100 * mm, 10 * mm, 2 * mm, stroke=0, fill=1)
        c.setFont("Helvetica", 8)
        c.setFillColor(TEXT_BODY)
        period = (
            f"Period: {self.table.period_start.strftime(DISPLAY_FORMAT)}"
            f" - {self.table.period_end.strftime(DISPLAY_FORMAT)}"
        )
        c.drawCentredString(w / 2 * mm, self.y(54), period)

        c.setFont("Helvetica-Oblique", 7)
        c.setFillColor(TEXT_FAINT)
        c.drawRightString(
            (w - 15) * mm,
            self.y(65),
            f"Generated on: {self.generated_at.strftime(TIMESTAMP_FORMAT)}",
        )

    def draw_info_block(self) -> float:
        """Labelled box at the table position; returns where the body starts."""
        if not self.table.info_fields:
            return TABLE_TOP
        c, w = self.c, self.page_width_mm
        c.setFillColor(PERIOD_BOX)
        c.roundRect(
            MARGIN * mm,
            self.y(TABLE_TOP + INFO_BLOCK_HEIGHT),
            (w - 2 * MARGIN) * mm,
            INFO_BLOCK_HEIGHT * mm,
            2 * mm,
            stroke=0,
            fill=1,
        )
        c.setFont("Helvetica-Bold", 11)
        c.setFillColor(BRAND_BLUE)
        c.drawString(20 * mm, self.y(TABLE_TOP + 8), self.table.info_title)
        c.setFont("Helvetica", 10)
        c.setFillColor(TEXT_BODY)
        # Two columns: first half of the fields on the left, the rest on the right
        half = (len(self.table.info_fields) + 1) // 2
        for index, (label, value) in enumerate(self.table.info_fields):
            x = 20 if index < half else w - 80
            top = TABLE_TOP + 15 + 5 * (index % half)
            c.drawString(x * mm, self.y(top), f"{label}: {value}")
        return TABLE_TOP + INFO_BLOCK_HEIGHT + 5

    def draw_grid(self, top: float) -> None:
        c = self.c
        table_width = self.page_width_mm - 2 * MARGIN
        col_width = table_width / len(self.table.columns)

        c.setFillColor(BRAND_BLUE)
        c.rect(MARGIN * mm, self.y(top + ROW_HEIGHT), table_width * mm, ROW_HEIGHT * mm, stroke=0, fill=1)
        c.setFont("Helvetica-Bold", 9)
        c.setFillColor(colors.white)
        for i, header in enumerate(self.table.headers):
            self._cell(header, "Helvetica-Bold", MARGIN + i * col_width, col_width, top)

        y = top + ROW_HEIGHT
        for row_index, cells in enumerate(self.table.matrix()):
            if row_index > 0 and self.new_page_needed(y):
                c.showPage()
                y = CONTINUATION_TOP
            if row_index % 2 == 0:
                c.setFillColor(ALT_ROW)
                c.rect(MARGIN * mm, self.y(y + ROW_HEIGHT), table_width * mm, ROW_HEIGHT * mm, stroke=0, fill=1)
            c.setFont("Helvetica", 9)
            c.setFillColor(TEXT_BODY)
            for col_index, value in enumerate(cells):
                self._cell(str(value), "Helvetica", MARGIN + col_index * col_width, col_width, y)
            y += ROW_HEIGHT

    def _cell(self, text: str, font: str, left: float, width: float, top: float) -> None:
        fitted = _fit(text, font, 9, (width - 2) * mm)
        self.c.drawCentredString((left + width / 2) * mm, self.y(top + ROW_HEIGHT / 2 + 3), fitted)

    def draw_text_dump(self, top: float) -> None:
        c = self.c
        c.setFont("Helvetica", 10)
        c.setFillColor(colors.black)
        c.drawString(MARGIN * mm, self.y(top), "Error generating table. Basic data below:")
        y = top + 10
        headers = self.table.headers
        for row_index, cells in enumerate(self.table.matrix()):
            if row_index > 0 and self.new_page_needed(y):
                c.showPage()
                y = CONTINUATION_TOP
            line = " | ".join(f"{h}: {v}" for h, v in zip(headers, cells))
            c.setFont("Helvetica", 10)
            c.setFillColor(colors.black)
            c.drawString(MARGIN * mm, self.y(y), line)
            y += TEXT_LINE_HEIGHT

    def finish(self) -> bytes:
        self.c.showPage()
        self.c.save()
        return self.buffer.getvalue()


def css_string(value: str) -> Markup:
    """Escape text for a double-quoted CSS string inside a <style> block."""
    escaped = "".join(
        f"\\{ord(ch):x} " if ch in CSS_ESCAPES else ch for ch in str(value)
    )
    return Markup(escaped)


def _fit(text: str, font: str, size: float, max_width: float) -> str:
    """Cut text with an ellipsis so it stays inside its cell."""
    if stringWidth(text, font, size) <= max_width:
        return text
    while text and stringWidth(text + "...", font, size) > max_width:
        text = text[:-1]
    return text + "..."


class PDFService:
    """Render a ReportTable to PDF bytes, degrading through the strategy chain."""

    def __init__(
        self,
        company: dict[str, str] | None = None,
        footer_text: str | None = None,
        page_compression: int = 1,
    ) -> None:
        self.company = company or settings.company_info
        self.footer_text = settings.report_footer_text if footer_text is None else footer_text
        self.page_compression = page_compression
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=True,
        )
        self._env.filters["css_string"] = css_string

    def render(self, table: ReportTable, generated_at: datetime | None = None) -> RenderedDocument:
        generated_at = generated_at or datetime.now()
        try:
            content, strategy, level = run_strategies(
                "pdf",
                [
                    ("weasyprint-table", lambda: self._render_weasyprint(table, generated_at)),
                    ("reportlab-grid", lambda: self._render_grid(table, generated_at)),
                    ("reportlab-text", lambda: self._render_text(table, generated_at)),
                ],
            )
        except AllStrategiesFailed as e:
            raise PdfGenerationUnavailableError(str(e)) from e
        return RenderedDocument(
            filename=report_filename(table.file_stem, "pdf"),
            media_type=MEDIA_TYPE,
            content=content,
            strategy=strategy,
            level=level,
        )

    def build_context(self, table: ReportTable, generated_at: datetime) -> dict:
        """Template context for report.html."""
        return {
            "company": self.company,
            "title": table.title,
            "subtitle": table.subtitle,
            "period": (
                f"{table.period_start.strftime(DISPLAY_FORMAT)}"
                f" - {table.period_end.strftime(DISPLAY_FORMAT)}"
            ),
            "generated_on": generated_at.strftime(TIMESTAMP_FORMAT),
            "orientation": table.orientation,
            "headers": table.headers,
            "rows": [[str(v) for v in cells] for cells in table.matrix()],
            "info_title": table.info_title,
            "info_fields": table.info_fields,
            "footer_text": self.footer_text,
        }

    def _render_weasyprint(self, table: ReportTable, generated_at: datetime) -> bytes:
        try:
            from weasyprint import HTML
        except (OSError, ImportError) as e:
            raise PdfGenerationUnavailableError(
                f"PDF generation unavailable (WeasyPrint/system libs). {e!s}"
            ) from e
        template = self._env.get_template("report.html")
        html_content = template.render(**self.build_context(table, generated_at))
        return HTML(string=html_content).write_pdf()

    def _canvas(self, table: ReportTable, generated_at: datetime) -> _ReportCanvas:
        return _ReportCanvas(
            table, self.company, self.footer_text, generated_at, self.page_compression
        )

    def _render_grid(self, table: ReportTable, generated_at: datetime) -> bytes:
        if not table.columns:
            raise ValueError("report has no columns")
        doc = self._canvas(table, generated_at)
        doc.draw_header()
        doc.draw_grid(doc.draw_info_block())
        return doc.finish()

    def _render_text(self, table: ReportTable, generated_at: datetime) -> bytes:
        doc = self._canvas(table, generated_at)
        doc.draw_header()
        doc.draw_text_dump(doc.draw_info_block())
        return doc.finish()
