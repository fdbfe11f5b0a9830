"""Export report tables to Excel (XLSX)."""

import re
from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from src.core.config import settings
from src.core.exceptions import ExportError
from src.modules.reports.tables import RenderedDocument, ReportTable, report_filename

MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MAX_SHEET_TITLE = 31

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2980B9", end_color="2980B9", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center")


def _cell_value(v: Any) -> Any:
    """Convert value for Excel (Decimal -> float)."""
    if v is None:
        return ""
    if isinstance(v, Decimal):
        return float(v)
    return v


def sheet_title(name: str) -> str:
    """Excel forbids []:*?/\\ in sheet names and caps them at 31 characters."""
    cleaned = re.sub(r"[\[\]:*?/\\]", "_", name).strip("'") or "Report"
    return cleaned[:MAX_SHEET_TITLE]


def _write_table(ws: Any, rows: list[list[Any]], start_row: int = 1) -> None:
    """Write list of rows to sheet starting at start_row."""
    for i, row in enumerate(rows, start=start_row):
        for j, val in enumerate(row, start=1):
            cell = ws.cell(row=i, column=j, value=_cell_value(val))
            # Free text such as "=HYPERLINK(...)" stays text, never a formula
            if isinstance(val, str) and val.startswith("="):
                cell.data_type = "s"


def _autosize(ws: Any, table: ReportTable) -> None:
    """Column width = longest rendered value, header included."""
    for index, header in enumerate(table.headers, start=1):
        longest = max(
            [len(header)] + [len(str(cells[index - 1])) for cells in table.matrix()]
        )
        ws.column_dimensions[get_column_letter(index)].width = longest + 2


def build_workbook(table: ReportTable, created: datetime | None = None) -> Workbook:
    created = created or datetime.now()
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title(table.sheet_name)

    _write_table(ws, [table.headers])
    for c in range(1, len(table.headers) + 1):
        cell = ws.cell(1, c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
    _write_table(ws, table.matrix(), 2)
    _autosize(ws, table)

    wb.properties.title = table.file_stem
    wb.properties.subject = f"Report generated on {created:%Y-%m-%d}"
    wb.properties.creator = settings.report_author
    wb.properties.created = created
    return wb


def export_table(table: ReportTable, created: datetime | None = None) -> RenderedDocument:
    """Single-sheet workbook for one report table."""
    try:
        wb = build_workbook(table, created)
        buf = BytesIO()
        wb.save(buf)
    except Exception as e:
        raise ExportError("Excel", str(e)) from e
    return RenderedDocument(
        filename=report_filename(table.file_stem, "xlsx"),
        media_type=MEDIA_TYPE,
        content=buf.getvalue(),
        strategy="openpyxl",
    )
