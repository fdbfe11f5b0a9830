"""
Report transforms: DataBag + period + filters -> ReportTable(s).

Each transform is a pure function. Records are selected by the inclusive
[start, end] period on the report's date field, then narrowed by the
active filters, then shaped into display rows followed by a summary block.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, TypeVar

from src.modules.collections.schemas import AttendanceRecord, DataBag, Employee, Order
from src.modules.reports.schemas import FilterName, OutputFormat, ReportFilters
from src.modules.reports.tables import Cell, ReportTable, columns, make_row, summary_block
from src.shared.schemas import Notice, Severity
from src.shared.utils.dates import SHORT_FORMAT, WEEKDAY_FORMAT, format_date, format_period, in_range
from src.shared.utils.money import format_money

logger = logging.getLogger(__name__)

T = TypeVar("T")

NA = "N/A"
DEFAULT_ATTENDANCE_STATUS = "Present"
PAID_STATUS = "Paid"
LOW_STOCK_FILTER = "lowStock"


@dataclass
class TransformResult:
    tables: list[ReportTable]
    notices: list[Notice] = field(default_factory=list)


Transform = Callable[[DataBag, OutputFormat, date, date, ReportFilters], TransformResult]


def _number(value: Decimal) -> Cell:
    """Quantities and hours: 5 stays 5, 2.50 becomes 2.5."""
    if value == value.to_integral_value():
        return int(value)
    return value.normalize()


def _apply_filters(
    records: Iterable[T],
    filters: ReportFilters,
    fields: dict[FilterName, Callable[[T], Any]],
) -> list[T]:
    """Keep records whose field equals every active filter (logical AND)."""
    active = {name: filters.active(name) for name in fields}
    active = {name: value for name, value in active.items() if value is not None}
    return [
        r for r in records
        if all(fields[name](r) == wanted for name, wanted in active.items())
    ]


def _attendance_status(record: AttendanceRecord) -> str:
    return record.status or DEFAULT_ATTENDANCE_STATUS


def _employee_name(employee: Employee | None, fallback: str | None) -> str:
    if employee is not None and employee.full_name:
        return employee.full_name
    return fallback or ""


def _orders_in_period(bag: DataBag, start: date, end: date, filters: ReportFilters) -> list[Order]:
    orders = [o for o in bag.orders if in_range(o.date, start, end)]
    return _apply_filters(
        orders,
        filters,
        {FilterName.CLIENT_ID: lambda o: o.client_id, FilterName.STATUS: lambda o: o.status},
    )


# --- Sales summary ---------------------------------------------------------

SALES_COLUMNS = columns(
    ("Order #", "order_number"),
    ("Client", "client_name"),
    ("Order Date", "order_date"),
    ("Delivery Date", "delivery_date"),
    ("Status", "status"),
    ("Amount", "total_amount"),
    ("Payment", "payment_status"),
)


def sales_summary(
    bag: DataBag,
    output_format: OutputFormat,
    start: date,
    end: date,
    filters: ReportFilters,
) -> TransformResult:
    orders = _orders_in_period(bag, start, end, filters)

    rows = [
        make_row(
            SALES_COLUMNS,
            order_number=o.display_number,
            client_name=o.client_name or "Unknown",
            order_date=format_date(o.date),
            delivery_date=format_date(o.delivery_date),
            status=o.status or "",
            total_amount=format_money(o.total_amount),
            payment_status=o.payment_status or NA,
        )
        for o in orders
    ]
    total_sales = sum((o.total_amount for o in orders), Decimal("0"))
    paid = sum(1 for o in orders if o.payment_status == PAID_STATUS)
    pending = len(orders) - paid
    rows += summary_block(
        SALES_COLUMNS,
        [
            make_row(SALES_COLUMNS, order_number="Total Orders", client_name=len(orders)),
            make_row(SALES_COLUMNS, order_number="Total Sales", total_amount=format_money(total_sales)),
            make_row(SALES_COLUMNS, order_number="Paid Orders", client_name=paid),
            make_row(SALES_COLUMNS, order_number="Pending Orders", client_name=pending),
        ],
    )
    return TransformResult(
        tables=[
            ReportTable(
                title="Sales Summary Report",
                subtitle=format_period(start, end),
                columns=SALES_COLUMNS,
                rows=rows,
                period_start=start,
                period_end=end,
                sheet_name="Sales Summary",
                file_stem="Sales Summary Report",
            )
        ]
    )


# --- Inventory -------------------------------------------------------------

INVENTORY_COLUMNS = columns(
    ("Item Code", "item_code"),
    ("Item Name", "item_name"),
    ("Category", "category"),
    ("Current Stock", "current_stock"),
    ("Reorder Level", "reorder_level"),
    ("Unit Price", "unit_price"),
    ("Total Value", "value"),
    ("Status", "status"),
)


def inventory(
    bag: DataBag,
    output_format: OutputFormat,
    start: date,
    end: date,
    filters: ReportFilters,
) -> TransformResult:
    """Current stock snapshot; the period only appears in the file metadata."""
    items = _apply_filters(bag.inventory, filters, {FilterName.SUPPLIER_ID: lambda i: i.supplier_id})
    if filters.active(FilterName.STATUS) == LOW_STOCK_FILTER:
        items = [i for i in items if i.is_low_stock]

    rows = [
        make_row(
            INVENTORY_COLUMNS,
            item_code=i.sku or i.id or "",
            item_name=i.name or NA,
            category=i.category or NA,
            current_stock=_number(i.quantity),
            reorder_level=_number(i.min_stock),
            unit_price=format_money(i.unit_price),
            value=format_money(i.stock_value),
            status="Low Stock" if i.is_low_stock else "In Stock",
        )
        for i in items
    ]
    total_value = sum((i.stock_value for i in items), Decimal("0"))
    rows += summary_block(
        INVENTORY_COLUMNS,
        [
            make_row(INVENTORY_COLUMNS, item_code="Total Items", item_name=len(items)),
            make_row(
                INVENTORY_COLUMNS,
                item_code="Low Stock Items",
                item_name=sum(1 for i in items if i.is_low_stock),
            ),
            make_row(
                INVENTORY_COLUMNS,
                item_code="Total Inventory Value",
                value=format_money(total_value),
            ),
        ],
    )
    return TransformResult(
        tables=[
            ReportTable(
                title="Inventory Status Report",
                subtitle=f"Generated on {format_date(date.today())}",
                columns=INVENTORY_COLUMNS,
                rows=rows,
                period_start=start,
                period_end=end,
                sheet_name="Inventory",
                file_stem="Inventory Status Report",
            )
        ]
    )


# --- Employee attendance ---------------------------------------------------

ATTENDANCE_COLUMNS = columns(
    ("Employee ID", "employee_id"),
    ("Employee Name", "employee_name"),
    ("Department", "department"),
    ("Date", "date"),
    ("Time In", "time_in"),
    ("Time Out", "time_out"),
    ("Status", "status"),
    ("Hours Worked", "hours_worked"),
    ("Overtime", "overtime"),
)


def employee_attendance(
    bag: DataBag,
    output_format: OutputFormat,
    start: date,
    end: date,
    filters: ReportFilters,
) -> TransformResult:
    records = [r for r in bag.attendance if in_range(r.date, start, end)]
    records = _apply_filters(
        records,
        filters,
        {FilterName.EMPLOYEE_ID: lambda r: r.employee_id, FilterName.STATUS: _attendance_status},
    )
    employees = bag.employees_by_id()

    rows = []
    for r in records:
        employee = employees.get(r.employee_id or "")
        rows.append(
            make_row(
                ATTENDANCE_COLUMNS,
                employee_id=r.employee_id or "",
                employee_name=_employee_name(employee, r.employee_name),
                department=(employee.department if employee else None) or NA,
                date=format_date(r.date),
                time_in=r.time_in or NA,
                time_out=r.time_out or NA,
                status=_attendance_status(r),
                hours_worked=_number(r.hours_worked) if r.hours_worked is not None else NA,
                overtime=_number(r.overtime),
            )
        )
    status_counts = Counter(_attendance_status(r) for r in records)
    rows += summary_block(
        ATTENDANCE_COLUMNS,
        [
            make_row(ATTENDANCE_COLUMNS, employee_id="Total Records", employee_name=len(records)),
            *(
                make_row(ATTENDANCE_COLUMNS, employee_id=label, employee_name=status_counts[label])
                for label in ("Present", "Late", "Absent")
            ),
        ],
    )
    return TransformResult(
        tables=[
            ReportTable(
                title="Employee Attendance Report",
                subtitle=format_period(start, end),
                columns=ATTENDANCE_COLUMNS,
                rows=rows,
                period_start=start,
                period_end=end,
                sheet_name="Attendance",
                file_stem="Employee Attendance Report",
            )
        ]
    )


# --- Machinery maintenance -------------------------------------------------

MAINTENANCE_COLUMNS = columns(
    ("Machinery ID", "machinery_id"),
    ("Machinery Name", "machinery_name"),
    ("Maintenance Type", "maintenance_type"),
    ("Date", "date"),
    ("Performed By", "performed_by"),
    ("Cost", "cost"),
    ("Details", "details"),
    ("Next Maintenance", "next_maintenance"),
)


def machinery_maintenance(
    bag: DataBag,
    output_format: OutputFormat,
    start: date,
    end: date,
    filters: ReportFilters,
) -> TransformResult:
    records = [r for r in bag.maintenance_records if in_range(r.date, start, end)]
    records = _apply_filters(
        records,
        filters,
        {FilterName.MAINTENANCE_TYPE: lambda r: r.maintenance_type},
    )
    machines = bag.machinery_by_id()

    rows = []
    for r in records:
        machine = machines.get(r.machinery_id or "")
        rows.append(
            make_row(
                MAINTENANCE_COLUMNS,
                machinery_id=r.machinery_id or "",
                machinery_name=(machine.name if machine else None) or "Unknown",
                maintenance_type=r.maintenance_type or "Routine",
                date=format_date(r.date),
                performed_by=r.performed_by or NA,
                cost=format_money(r.cost),
                details=r.description or NA,
                next_maintenance=format_date(machine.next_maintenance_date if machine else None),
            )
        )
    total_cost = sum((r.cost for r in records), Decimal("0"))
    type_counts = Counter(r.maintenance_type or "Routine" for r in records)
    rows += summary_block(
        MAINTENANCE_COLUMNS,
        [
            make_row(MAINTENANCE_COLUMNS, machinery_id="Total Records", machinery_name=len(records)),
            make_row(MAINTENANCE_COLUMNS, machinery_id="Total Cost", cost=format_money(total_cost)),
            *(
                make_row(MAINTENANCE_COLUMNS, machinery_id=f"{kind} Count", machinery_name=count)
                for kind, count in type_counts.items()
            ),
        ],
    )
    return TransformResult(
        tables=[
            ReportTable(
                title="Machinery Maintenance Report",
                subtitle=format_period(start, end),
                columns=MAINTENANCE_COLUMNS,
                rows=rows,
                period_start=start,
                period_end=end,
                sheet_name="Machinery Maintenance",
                file_stem="Machinery Maintenance Report",
            )
        ]
    )


# --- Payroll ---------------------------------------------------------------

PAYROLL_COLUMNS = columns(
    ("Employee ID", "employee_id"),
    ("Employee Name", "employee_name"),
    ("Department", "department"),
    ("Position", "position"),
    ("Pay Period", "pay_period"),
    ("Basic Salary", "basic_salary"),
    ("Overtime", "overtime"),
    ("Deductions", "deductions"),
    ("Net Salary", "net_salary"),
)


def payroll(
    bag: DataBag,
    output_format: OutputFormat,
    start: date,
    end: date,
    filters: ReportFilters,
) -> TransformResult:
    # A record belongs to the period its pay period ends in.
    records = [
        r for r in bag.payroll
        if r.period_start is not None
        and r.period_end is not None
        and in_range(r.period_end, start, end)
    ]
    records = _apply_filters(
        records,
        filters,
        {FilterName.EMPLOYEE_ID: lambda r: r.employee_id, FilterName.STATUS: lambda r: r.status},
    )
    employees = bag.employees_by_id()

    rows = []
    for r in records:
        employee = employees.get(r.employee_id or "")
        rows.append(
            make_row(
                PAYROLL_COLUMNS,
                employee_id=r.employee_id or "",
                employee_name=r.employee_name or _employee_name(employee, None),
                department=(employee.department if employee else None) or NA,
                position=(employee.position if employee else None) or NA,
                pay_period=(
                    f"{format_date(r.period_start, SHORT_FORMAT)} - {format_date(r.period_end)}"
                ),
                basic_salary=format_money(r.base_salary),
                overtime=format_money(r.overtime_pay),
                deductions=format_money(r.deductions),
                net_salary=format_money(r.net_salary),
            )
        )

    def total(attr: str) -> str:
        return format_money(sum((getattr(r, attr) for r in records), Decimal("0")))

    rows += summary_block(
        PAYROLL_COLUMNS,
        [
            make_row(PAYROLL_COLUMNS, employee_id="Total Employees", employee_name=len(records)),
            make_row(
                PAYROLL_COLUMNS,
                employee_id="Totals",
                basic_salary=total("base_salary"),
                overtime=total("overtime_pay"),
                deductions=total("deductions"),
                net_salary=total("net_salary"),
            ),
        ],
    )
    return TransformResult(
        tables=[
            ReportTable(
                title="Payroll Report",
                subtitle=format_period(start, end),
                columns=PAYROLL_COLUMNS,
                rows=rows,
                period_start=start,
                period_end=end,
                sheet_name="Payroll",
                file_stem="Payroll Report",
            )
        ]
    )


# --- Daily time record -----------------------------------------------------

DTR_COLUMNS = columns(
    ("Date", "date"),
    ("Day", "day"),
    ("Time In", "time_in"),
    ("Time Out", "time_out"),
    ("Hours", "hours_worked"),
    ("OT", "overtime"),
    ("Status", "status"),
    ("Remarks", "remarks"),
)


def _dtr_table(
    employee: Employee,
    records: list[AttendanceRecord],
    output_format: OutputFormat,
    start: date,
    end: date,
) -> ReportTable:
    name = employee.full_name or employee.id or "Employee"
    rows = [
        make_row(
            DTR_COLUMNS,
            date=format_date(r.date),
            day=format_date(r.date, WEEKDAY_FORMAT),
            time_in=r.time_in or NA,
            time_out=r.time_out or NA,
            hours_worked=_number(r.hours_worked) if r.hours_worked is not None else NA,
            overtime=_number(r.overtime),
            status=_attendance_status(r),
            remarks=r.remarks or "",
        )
        for r in records
    ]
    status_counts = Counter(_attendance_status(r) for r in records)
    total_hours = sum((r.hours_worked or Decimal("0") for r in records), Decimal("0"))
    total_overtime = sum((r.overtime for r in records), Decimal("0"))
    rows += summary_block(
        DTR_COLUMNS,
        [
            make_row(DTR_COLUMNS, date="Total Days", day=len(records)),
            make_row(DTR_COLUMNS, date="Present Days", day=status_counts["Present"]),
            make_row(DTR_COLUMNS, date="Late Days", day=status_counts["Late"]),
            make_row(DTR_COLUMNS, date="Absent Days", day=status_counts["Absent"]),
            make_row(DTR_COLUMNS, date="Total Hours", hours_worked=f"{total_hours:.2f}"),
            make_row(DTR_COLUMNS, date="Total Overtime", overtime=f"{total_overtime:.2f}"),
        ],
    )

    info_fields: list[tuple[str, str]] = []
    if output_format == OutputFormat.PDF:
        info_fields = [
            # Left column pair, then right column pair
            ("Employee Name", name),
            ("Position", employee.position or NA),
            ("Department", employee.department or NA),
            ("Employee ID", employee.id or NA),
        ]
    return ReportTable(
        title="Daily Time Record (DTR)",
        subtitle=(
            f"{name} - {employee.position or 'Employee'} - "
            f"{format_date(start, SHORT_FORMAT)} to {format_date(end)}"
        ),
        columns=DTR_COLUMNS,
        rows=rows,
        period_start=start,
        period_end=end,
        sheet_name=f"DTR - {name}",
        file_stem=f"DTR - {name} - {employee.id or 'unknown'}",
        orientation="portrait",
        info_title="Employee Information" if info_fields else "",
        info_fields=info_fields,
    )


def dtr(
    bag: DataBag,
    output_format: OutputFormat,
    start: date,
    end: date,
    filters: ReportFilters,
) -> TransformResult:
    """One table per employee with attendance in the period; others get an info notice."""
    employees = _apply_filters(bag.employees, filters, {FilterName.EMPLOYEE_ID: lambda e: e.id})

    by_employee: dict[str, list[AttendanceRecord]] = defaultdict(list)
    for record in bag.attendance:
        if record.employee_id and in_range(record.date, start, end):
            by_employee[record.employee_id].append(record)

    result = TransformResult(tables=[])
    for employee in employees:
        records = sorted(by_employee.get(employee.id or "", []), key=lambda r: r.date)
        if not records:
            name = employee.full_name or employee.id or "employee"
            logger.info("DTR skipped for %s: no attendance in %s..%s", name, start, end)
            result.notices.append(
                Notice(
                    severity=Severity.INFO,
                    message=f"No attendance records found for {name} in the selected period.",
                )
            )
            continue
        result.tables.append(_dtr_table(employee, records, output_format, start, end))
    return result


# --- Printing jobs ---------------------------------------------------------

PRINTING_JOB_COLUMNS = columns(
    ("Order #", "order_number"),
    ("Client", "client_name"),
    ("Product", "product_name"),
    ("Quantity", "quantity"),
    ("Unit Price", "unit_price"),
    ("Total Price", "total_price"),
    ("Order Date", "order_date"),
    ("Status", "status"),
)


def printing_jobs(
    bag: DataBag,
    output_format: OutputFormat,
    start: date,
    end: date,
    filters: ReportFilters,
) -> TransformResult:
    """One row per order line item."""
    orders = _orders_in_period(bag, start, end, filters)

    rows = []
    quantity_by_product: dict[str, Decimal] = {}
    total_quantity = Decimal("0")
    total_value = Decimal("0")
    for order in orders:
        for item in order.items:
            product = item.product_name or "Unknown"
            rows.append(
                make_row(
                    PRINTING_JOB_COLUMNS,
                    order_number=order.display_number,
                    client_name=order.client_name or "Unknown",
                    product_name=product,
                    quantity=_number(item.quantity),
                    unit_price=format_money(item.unit_price),
                    total_price=format_money(item.total_price),
                    order_date=format_date(order.date),
                    status=order.status or "",
                )
            )
            quantity_by_product[product] = quantity_by_product.get(product, Decimal("0")) + item.quantity
            total_quantity += item.quantity
            total_value += item.total_price

    rows += summary_block(
        PRINTING_JOB_COLUMNS,
        [
            make_row(
                PRINTING_JOB_COLUMNS,
                order_number="Total Job Items",
                client_name=len(rows),
            ),
            make_row(PRINTING_JOB_COLUMNS, order_number="Total Quantity", quantity=_number(total_quantity)),
            make_row(PRINTING_JOB_COLUMNS, order_number="Total Value", total_price=format_money(total_value)),
            *(
                make_row(
                    PRINTING_JOB_COLUMNS,
                    order_number="Product Count",
                    product_name=product,
                    quantity=_number(quantity),
                )
                for product, quantity in quantity_by_product.items()
            ),
        ],
    )
    return TransformResult(
        tables=[
            ReportTable(
                title="Printing Jobs Report",
                subtitle=format_period(start, end),
                columns=PRINTING_JOB_COLUMNS,
                rows=rows,
                period_start=start,
                period_end=end,
                sheet_name="Printing Jobs",
                file_stem="Printing Jobs Report",
            )
        ]
    )
