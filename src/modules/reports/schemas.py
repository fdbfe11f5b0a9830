"""Schemas for the reports API."""

import calendar
from datetime import date
from enum import StrEnum
from typing import Annotated, Any

from pydantic import AliasChoices, BeforeValidator, Field, model_validator

from src.modules.collections.schemas import DataBag
from src.shared.schemas.base import BaseSchema, Notice

ALL = "all"


class OutputFormat(StrEnum):
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"


class FilterName(StrEnum):
    EMPLOYEE_ID = "employee_id"
    CLIENT_ID = "client_id"
    SUPPLIER_ID = "supplier_id"
    STATUS = "status"
    MAINTENANCE_TYPE = "maintenance_type"


def _filter_value(v: Any) -> str:
    if v is None:
        return ALL
    text = str(v).strip()
    return text or ALL


FilterValue = Annotated[str, BeforeValidator(_filter_value)]


class ReportFilters(BaseSchema):
    """Optional categorical constraints; 'all' means the filter is off."""

    employee_id: FilterValue = Field(ALL, validation_alias=AliasChoices("employee_id", "employeeId"))
    client_id: FilterValue = Field(ALL, validation_alias=AliasChoices("client_id", "clientId"))
    supplier_id: FilterValue = Field(ALL, validation_alias=AliasChoices("supplier_id", "supplierId"))
    status: FilterValue = ALL
    maintenance_type: FilterValue = Field(
        ALL, validation_alias=AliasChoices("maintenance_type", "maintenanceType", "type")
    )

    def active(self, name: FilterName | str) -> str | None:
        """Filter value, or None when the filter is 'all'."""
        value = getattr(self, str(name))
        return None if value == ALL else value

    def restricted_to(self, names: tuple[FilterName, ...]) -> "ReportFilters":
        """Copy with every filter the report does not declare reset to 'all'."""
        allowed = {str(n) for n in names}
        return self.model_copy(
            update={n.value: ALL for n in FilterName if n.value not in allowed}
        )


def _month_bounds(today: date) -> tuple[date, date]:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


class ReportRequest(BaseSchema):
    """Body of POST /reports/generate."""

    report_type: str = Field(
        ..., validation_alias=AliasChoices("report_type", "reportType", "type")
    )
    format: OutputFormat = OutputFormat.PDF
    start_date: date | None = Field(None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: date | None = Field(None, validation_alias=AliasChoices("end_date", "endDate"))
    filters: ReportFilters = Field(default_factory=ReportFilters)
    data: DataBag | None = None

    @model_validator(mode="after")
    def default_to_current_month(self) -> "ReportRequest":
        if self.start_date is None or self.end_date is None:
            month_start, month_end = _month_bounds(date.today())
            if self.start_date is None:
                self.start_date = month_start
            if self.end_date is None:
                self.end_date = month_end
        return self


class ReportDescriptorResponse(BaseSchema):
    id: str
    name: str
    description: str
    formats: list[OutputFormat]
    extra_filters: list[FilterName]


class GeneratedFileResponse(BaseSchema):
    filename: str
    media_type: str
    size: int
    strategy: str
    disposition: str  # attachment | inline
    url: str


class ReportGenerationResponse(BaseSchema):
    report_type: str
    format: OutputFormat
    files: list[GeneratedFileResponse]
    notices: list[Notice] = []


class FilterOptionsRequest(BaseSchema):
    data: DataBag | None = None


class OptionItem(BaseSchema):
    id: str
    name: str


class FilterOptionsResponse(BaseSchema):
    employees: list[OptionItem]
    clients: list[OptionItem]
    suppliers: list[OptionItem]
    statuses: dict[str, list[str]]  # report id -> selectable status values
    maintenance_types: list[str]
    notices: list[Notice] = []
