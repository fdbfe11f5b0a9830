"""Static catalogue of report kinds: id -> descriptor with its transform."""

from dataclasses import dataclass

from src.core.exceptions import NotFoundError
from src.modules.reports import transforms
from src.modules.reports.schemas import FilterName, OutputFormat
from src.modules.reports.transforms import Transform

ALL_FORMATS = (OutputFormat.PDF, OutputFormat.EXCEL, OutputFormat.CSV)


@dataclass(frozen=True)
class ReportDescriptor:
    id: str
    name: str
    description: str
    transform: Transform
    extra_filters: tuple[FilterName, ...] = ()
    formats: tuple[OutputFormat, ...] = ALL_FORMATS


REPORTS: tuple[ReportDescriptor, ...] = (
    ReportDescriptor(
        id="sales_summary",
        name="Sales Summary",
        description="Summary of all sales transactions within the selected period",
        transform=transforms.sales_summary,
        extra_filters=(FilterName.CLIENT_ID, FilterName.STATUS),
    ),
    ReportDescriptor(
        id="inventory",
        name="Inventory Status Report",
        description="Current inventory levels, reorder suggestions, and inventory movements",
        transform=transforms.inventory,
        extra_filters=(FilterName.SUPPLIER_ID, FilterName.STATUS),
    ),
    ReportDescriptor(
        id="employee_attendance",
        name="Employee Attendance",
        description="Employee attendance records and summary for the selected period",
        transform=transforms.employee_attendance,
        extra_filters=(FilterName.EMPLOYEE_ID, FilterName.STATUS),
    ),
    ReportDescriptor(
        id="machinery_maintenance",
        name="Machinery Maintenance",
        description="Report on machinery maintenance activities and upcoming maintenance schedules",
        transform=transforms.machinery_maintenance,
        extra_filters=(FilterName.MAINTENANCE_TYPE,),
    ),
    ReportDescriptor(
        id="payroll",
        name="Payroll Report",
        description="Employee payroll information including overtime, bonuses, and deductions",
        transform=transforms.payroll,
        extra_filters=(FilterName.EMPLOYEE_ID, FilterName.STATUS),
    ),
    ReportDescriptor(
        id="dtr",
        name="Daily Time Record (DTR)",
        description="Individual employee daily time records with attendance summary",
        transform=transforms.dtr,
        extra_filters=(FilterName.EMPLOYEE_ID,),
    ),
    ReportDescriptor(
        id="printing_jobs",
        name="Printing Jobs Report",
        description="Detailed report of printing jobs with quantities, prices, and statuses",
        transform=transforms.printing_jobs,
        extra_filters=(FilterName.CLIENT_ID, FilterName.STATUS),
    ),
)

_BY_ID = {report.id: report for report in REPORTS}


def lookup(report_id: str) -> ReportDescriptor:
    try:
        return _BY_ID[report_id]
    except KeyError:
        raise NotFoundError("Report type", report_id) from None


def list_reports() -> list[ReportDescriptor]:
    return list(REPORTS)
