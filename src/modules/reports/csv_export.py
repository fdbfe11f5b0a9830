"""Export report tables to CSV: csv module first, hand-quoted text as fallback."""

import csv
from io import StringIO
from urllib.parse import quote

from src.core.exceptions import ExportError
from src.modules.reports.tables import RenderedDocument, ReportTable, report_filename
from src.shared.utils.fallback import AllStrategiesFailed, run_strategies

MEDIA_TYPE = "text/csv"


def _write_csv(table: ReportTable) -> str:
    buf = StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(table.headers)
    writer.writerows(table.matrix())
    return buf.getvalue()


def _quote(value) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def manual_csv(table: ReportTable) -> str:
    """Every value quoted, embedded quotes doubled."""
    lines = [",".join(_quote(h) for h in table.headers)]
    lines += [",".join(_quote(v) for v in cells) for cells in table.matrix()]
    return "\n".join(lines)


def csv_data_uri(text: str) -> str:
    return f"data:text/csv;charset=utf-8,{quote(text)}"


def export_table(table: ReportTable) -> RenderedDocument:
    try:
        text, strategy, level = run_strategies(
            "csv",
            [
                ("csv-writer", lambda: _write_csv(table)),
                ("manual-quoted", lambda: manual_csv(table)),
            ],
        )
    except AllStrategiesFailed as e:
        raise ExportError("CSV", str(e.last_error)) from e
    return RenderedDocument(
        filename=report_filename(table.file_stem, "csv"),
        media_type=MEDIA_TYPE,
        content=text.encode("utf-8"),
        strategy=strategy,
        level=level,
        data_uri=csv_data_uri(text) if strategy == "manual-quoted" else None,
    )
