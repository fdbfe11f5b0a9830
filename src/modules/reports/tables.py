"""
Column schemas and row shaping shared by report transforms and encoders.

A report is a list of flat row dicts plus an ordered column schema. Every
row carries exactly the schema's keys (blank string where a cell does not
apply) because encoders project rows positionally by key.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Literal

Cell = str | int | Decimal
Row = dict[str, Cell]
Orientation = Literal["portrait", "landscape"]


@dataclass(frozen=True)
class Column:
    header: str
    key: str


def columns(*pairs: tuple[str, str]) -> tuple[Column, ...]:
    """columns(("Order #", "order_number"), ...) -> ordered schema."""
    return tuple(Column(header, key) for header, key in pairs)


def blank_row(schema: tuple[Column, ...]) -> Row:
    return {c.key: "" for c in schema}


def make_row(schema: tuple[Column, ...], **values: Cell) -> Row:
    """Row with the given cells filled and every other schema key blank."""
    unknown = set(values) - {c.key for c in schema}
    if unknown:
        raise KeyError(f"Unknown report columns: {', '.join(sorted(unknown))}")
    row = blank_row(schema)
    for key, value in values.items():
        row[key] = "" if value is None else value
    return row


def summary_block(schema: tuple[Column, ...], lines: list[Row]) -> list[Row]:
    """Spacer row + 'Summary' label row, then the summary lines."""
    label_key = schema[0].key
    return [blank_row(schema), make_row(schema, **{label_key: "Summary"}), *lines]


def slugify(name: str) -> str:
    """'Sales Summary Report' -> 'sales_summary_report'."""
    return re.sub(r"[^a-z0-9_]", "_", name.lower())


def report_filename(stem: str, extension: str) -> str:
    return f"{slugify(stem)}_report.{extension}"


@dataclass
class ReportTable:
    """One exportable document: what a transform hands to an encoder."""

    title: str
    subtitle: str
    columns: tuple[Column, ...]
    rows: list[Row]
    period_start: date
    period_end: date
    sheet_name: str
    file_stem: str
    orientation: Orientation = "landscape"
    # Extra labelled block drawn above the table in PDFs (DTR employee info)
    info_title: str = ""
    info_fields: list[tuple[str, str]] = field(default_factory=list)

    @property
    def headers(self) -> list[str]:
        return [c.header for c in self.columns]

    @property
    def keys(self) -> list[str]:
        return [c.key for c in self.columns]

    def matrix(self) -> list[list[Cell]]:
        """Rows projected in column order; a missing cell renders as ''."""
        return [[row.get(key, "") for key in self.keys] for row in self.rows]

    def check_shape(self) -> None:
        """Raise ValueError if any row's keys differ from the column schema."""
        expected = set(self.keys)
        for index, row in enumerate(self.rows):
            if set(row) != expected:
                missing = expected - set(row)
                extra = set(row) - expected
                raise ValueError(
                    f"Row {index} of '{self.title}' does not match its columns "
                    f"(missing={sorted(missing)}, extra={sorted(extra)})"
                )


@dataclass
class RenderedDocument:
    """Encoded file, ready for delivery."""

    filename: str
    media_type: str
    content: bytes
    strategy: str
    level: int = 1
    # Fallback delivery target (CSV manual serialization)
    data_uri: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)
