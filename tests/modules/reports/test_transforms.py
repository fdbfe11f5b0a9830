"""Tests for report transforms: period selection, filters, row shape, summaries."""

from datetime import date

import pytest

from src.modules.collections.schemas import DataBag
from src.modules.reports import transforms
from src.modules.reports.registry import REPORTS
from src.modules.reports.schemas import OutputFormat, ReportFilters
from src.modules.reports.tables import ReportTable

PERIOD_START = date(2025, 3, 1)
PERIOD_END = date(2025, 3, 31)


def _run(transform, bag, fmt=OutputFormat.CSV, start=PERIOD_START, end=PERIOD_END, **filters):
    return transform(bag, fmt, start, end, ReportFilters(**filters))


def _data_rows(table: ReportTable) -> list[dict]:
    """Rows above the blank spacer that opens the summary block."""
    rows = []
    for row in table.rows:
        if all(v == "" for v in row.values()):
            break
        rows.append(row)
    return rows


def _summary(table: ReportTable) -> dict[str, dict]:
    """Summary rows keyed by their label (first column)."""
    first_key = table.keys[0]
    start = table.rows.index(next(r for r in table.rows if r[first_key] == "Summary"))
    return {r[first_key]: r for r in table.rows[start + 1:]}


class TestRowShape:
    """Every row, data or summary, carries exactly the column keys."""

    @pytest.mark.parametrize("report", REPORTS, ids=lambda r: r.id)
    @pytest.mark.parametrize("fmt", list(OutputFormat))
    def test_rows_match_columns(self, bag: DataBag, report, fmt):
        result = report.transform(bag, fmt, PERIOD_START, PERIOD_END, ReportFilters())
        assert result.tables
        for table in result.tables:
            for row in table.rows:
                assert list(row) == table.keys
            table.check_shape()

    @pytest.mark.parametrize("report", REPORTS, ids=lambda r: r.id)
    def test_empty_bag_still_has_summary(self, report):
        result = report.transform(DataBag(), OutputFormat.CSV, PERIOD_START, PERIOD_END, ReportFilters())
        for table in result.tables:
            first_key = table.keys[0]
            assert table.rows[0] == {k: "" for k in table.keys}
            assert table.rows[1][first_key] == "Summary"

    @pytest.mark.parametrize("report", REPORTS, ids=lambda r: r.id)
    def test_transform_is_repeatable(self, bag: DataBag, report):
        first = report.transform(bag, OutputFormat.CSV, PERIOD_START, PERIOD_END, ReportFilters())
        second = report.transform(bag, OutputFormat.CSV, PERIOD_START, PERIOD_END, ReportFilters())
        assert [t.rows for t in first.tables] == [t.rows for t in second.tables]
        assert [t.headers for t in first.tables] == [t.headers for t in second.tables]


class TestSalesSummary:
    def test_period_is_inclusive(self, bag: DataBag):
        table = _run(transforms.sales_summary, bag).tables[0]
        numbers = [r["order_number"] for r in _data_rows(table)]
        assert numbers == ["ORD-001", "ORD-002"]

    def test_boundary_orders_drop_when_period_narrows(self, bag: DataBag):
        table = _run(
            transforms.sales_summary, bag, start=date(2025, 3, 2), end=date(2025, 3, 30)
        ).tables[0]
        assert _data_rows(table) == []
        assert _summary(table)["Total Orders"]["client_name"] == 0

    def test_row_values(self, bag: DataBag):
        first = _data_rows(_run(transforms.sales_summary, bag).tables[0])[0]
        assert first == {
            "order_number": "ORD-001",
            "client_name": "Acme Corp",
            "order_date": "Mar 01, 2025",
            "delivery_date": "Mar 10, 2025",
            "status": "Completed",
            "total_amount": "1,500.50",
            "payment_status": "Paid",
        }

    def test_summary_totals(self, bag: DataBag):
        summary = _summary(_run(transforms.sales_summary, bag).tables[0])
        assert summary["Total Orders"]["client_name"] == 2
        assert summary["Total Sales"]["total_amount"] == "3,500.50"
        assert summary["Paid Orders"]["client_name"] == 1
        assert summary["Pending Orders"]["client_name"] == 1

    def test_total_equals_sum_of_rows(self, bag: DataBag):
        table = _run(transforms.sales_summary, bag).tables[0]
        amounts = [r["total_amount"].replace(",", "") for r in _data_rows(table)]
        total = sum(float(a) for a in amounts)
        assert f"{total:,.2f}" == _summary(table)["Total Sales"]["total_amount"]

    def test_filters_combine_in_any_order(self, bag: DataBag):
        both = _data_rows(
            _run(transforms.sales_summary, bag, client_id="C1", status="Completed").tables[0]
        )
        by_client = _data_rows(_run(transforms.sales_summary, bag, client_id="C1").tables[0])
        by_status = _data_rows(_run(transforms.sales_summary, bag, status="Completed").tables[0])
        assert both == [r for r in by_client if r in by_status]
        assert both == [r for r in by_status if r in by_client]
        assert [r["order_number"] for r in both] == ["ORD-001"]

    def test_missing_fields_use_defaults(self):
        bag = DataBag.model_validate({"orders": [{"id": "x1", "date": "2025-03-02"}]})
        row = _data_rows(_run(transforms.sales_summary, bag).tables[0])[0]
        assert row["order_number"] == "x1"
        assert row["client_name"] == "Unknown"
        assert row["delivery_date"] == "N/A"
        assert row["payment_status"] == "N/A"
        assert row["total_amount"] == "0.00"

    def test_undated_orders_are_excluded(self):
        bag = DataBag.model_validate({"orders": [{"id": "x1", "date": "not a date"}]})
        assert _data_rows(_run(transforms.sales_summary, bag).tables[0]) == []


class TestInventory:
    def test_low_stock_is_strictly_below_minimum(self, bag: DataBag):
        rows = {r["item_code"]: r for r in _data_rows(_run(transforms.inventory, bag).tables[0])}
        assert rows["PAP-A4"]["status"] == "Low Stock"
        # quantity == reorder level is still in stock
        assert rows["INK-BK"]["status"] == "In Stock"
        assert rows["I3"]["status"] == "In Stock"

    def test_low_stock_filter(self, bag: DataBag):
        table = _run(transforms.inventory, bag, status="lowStock").tables[0]
        assert [r["item_code"] for r in _data_rows(table)] == ["PAP-A4"]
        assert _summary(table)["Low Stock Items"]["item_name"] == 1

    def test_supplier_filter(self, bag: DataBag):
        table = _run(transforms.inventory, bag, supplier_id="S1").tables[0]
        assert [r["item_name"] for r in _data_rows(table)] == ["A4 Paper", "Glossy Paper"]

    def test_summary(self, bag: DataBag):
        summary = _summary(_run(transforms.inventory, bag).tables[0])
        assert summary["Total Items"]["item_name"] == 3
        assert summary["Total Inventory Value"]["value"] == "13,397.50"

    def test_snapshot_ignores_period(self, bag: DataBag):
        table = _run(transforms.inventory, bag, start=date(2000, 1, 1), end=date(2000, 1, 2)).tables[0]
        assert len(_data_rows(table)) == 3
        assert table.subtitle.startswith("Generated on ")


class TestEmployeeAttendance:
    def test_rows_and_summary(self, bag: DataBag):
        table = _run(transforms.employee_attendance, bag).tables[0]
        rows = _data_rows(table)
        assert len(rows) == 5
        summary = _summary(table)
        assert summary["Total Records"]["employee_name"] == 5
        assert summary["Present"]["employee_name"] == 3
        assert summary["Late"]["employee_name"] == 1
        assert summary["Absent"]["employee_name"] == 1

    def test_unknown_employee_falls_back_to_record_name(self, bag: DataBag):
        rows = _data_rows(_run(transforms.employee_attendance, bag).tables[0])
        ghost = next(r for r in rows if r["employee_id"] == "X9")
        assert ghost["employee_name"] == "Ghost Worker"
        assert ghost["department"] == "N/A"

    def test_employee_and_status_filters(self, bag: DataBag):
        rows = _data_rows(
            _run(transforms.employee_attendance, bag, employee_id="E1", status="Late").tables[0]
        )
        assert len(rows) == 1
        assert rows[0]["employee_name"] == "John Doe"
        assert str(rows[0]["hours_worked"]) == "7.5"


class TestMachineryMaintenance:
    def test_summary_counts_per_type(self, bag: DataBag):
        table = _run(transforms.machinery_maintenance, bag).tables[0]
        summary = _summary(table)
        assert summary["Total Records"]["machinery_name"] == 3
        assert summary["Total Cost"]["cost"] == "17,300.25"
        assert summary["Scheduled Count"]["machinery_name"] == 1
        assert summary["Repair Count"]["machinery_name"] == 1
        assert summary["Routine Count"]["machinery_name"] == 1

    def test_row_joins_machine(self, bag: DataBag):
        rows = _data_rows(_run(transforms.machinery_maintenance, bag).tables[0])
        first = rows[0]
        assert first["machinery_name"] == "Heidelberg Press"
        assert first["next_maintenance"] == "Apr 10, 2025"
        assert first["details"] == "Roller cleaning"

    def test_type_filter(self, bag: DataBag):
        rows = _data_rows(
            _run(transforms.machinery_maintenance, bag, maintenance_type="Repair").tables[0]
        )
        assert [r["machinery_id"] for r in rows] == ["M2"]

    def test_type_filter_ignores_untyped_records(self, bag: DataBag):
        table = _run(transforms.machinery_maintenance, bag, maintenance_type="Routine").tables[0]
        assert _data_rows(table) == []
        assert _summary(table)["Total Records"]["machinery_name"] == 0


class TestPayroll:
    def test_records_without_full_period_are_excluded(self, bag: DataBag):
        rows = _data_rows(_run(transforms.payroll, bag).tables[0])
        assert [r["employee_id"] for r in rows] == ["E1", "E2"]

    def test_pay_period_and_totals(self, bag: DataBag):
        table = _run(transforms.payroll, bag).tables[0]
        rows = _data_rows(table)
        assert rows[0]["pay_period"] == "Mar 01 - Mar 15, 2025"
        assert rows[0]["overtime"] == "1,200.50"
        totals = _summary(table)["Totals"]
        assert totals["basic_salary"] == "33,000.00"
        assert totals["overtime"] == "1,200.50"
        assert totals["deductions"] == "1,800.00"
        assert totals["net_salary"] == "32,400.50"
        assert _summary(table)["Total Employees"]["employee_name"] == 2

    def test_status_filter(self, bag: DataBag):
        rows = _data_rows(_run(transforms.payroll, bag, status="Pending").tables[0])
        assert [r["employee_name"] for r in rows] == ["Maria Santos"]


class TestDTR:
    def test_one_table_per_employee_with_records(self, bag: DataBag):
        result = _run(transforms.dtr, bag)
        assert [t.file_stem for t in result.tables] == [
            "DTR - John Doe - E1",
            "DTR - Maria Santos - E2",
        ]
        assert len(result.notices) == 1
        assert result.notices[0].severity == "info"
        assert result.notices[0].message == (
            "No attendance records found for Pedro Cruz in the selected period."
        )

    def test_rows_sorted_by_date(self, bag: DataBag):
        table = _run(transforms.dtr, bag).tables[0]
        rows = _data_rows(table)
        assert [r["date"] for r in rows] == ["Mar 03, 2025", "Mar 05, 2025"]
        assert rows[0]["day"] == "Monday"
        assert rows[0]["remarks"] == "Traffic"

    def test_summary(self, bag: DataBag):
        summary = _summary(_run(transforms.dtr, bag).tables[0])
        assert summary["Total Days"]["day"] == 2
        assert summary["Present Days"]["day"] == 1
        assert summary["Late Days"]["day"] == 1
        assert summary["Absent Days"]["day"] == 0
        assert summary["Total Hours"]["hours_worked"] == "15.50"
        assert summary["Total Overtime"]["overtime"] == "1.00"

    def test_subtitle_and_orientation(self, bag: DataBag):
        table = _run(transforms.dtr, bag).tables[0]
        assert table.subtitle == "John Doe - Press Operator - Mar 01 to Mar 31, 2025"
        assert table.orientation == "portrait"
        assert table.sheet_name == "DTR - John Doe"

    def test_employee_tables_are_independent(self, bag: DataBag):
        everyone = {t.file_stem: t.rows for t in _run(transforms.dtr, bag).tables}
        only_e2 = _run(transforms.dtr, bag, employee_id="E2")
        assert len(only_e2.tables) == 1
        assert only_e2.tables[0].rows == everyone["DTR - Maria Santos - E2"]
        assert only_e2.notices == []

    def test_info_block_only_for_pdf(self, bag: DataBag):
        pdf_table = _run(transforms.dtr, bag, fmt=OutputFormat.PDF).tables[0]
        csv_table = _run(transforms.dtr, bag, fmt=OutputFormat.CSV).tables[0]
        assert pdf_table.info_title == "Employee Information"
        assert ("Employee ID", "E1") in pdf_table.info_fields
        assert csv_table.info_fields == []


class TestPrintingJobs:
    def test_one_row_per_line_item(self, bag: DataBag):
        rows = _data_rows(_run(transforms.printing_jobs, bag).tables[0])
        assert [(r["order_number"], r["product_name"]) for r in rows] == [
            ("ORD-001", "Flyers"),
            ("ORD-001", "Posters"),
            ("ORD-002", "Flyers"),
        ]

    def test_summary(self, bag: DataBag):
        table = _run(transforms.printing_jobs, bag).tables[0]
        summary = _summary(table)
        assert summary["Total Job Items"]["client_name"] == 3
        assert summary["Total Quantity"]["quantity"] == 1250
        assert summary["Total Value"]["total_price"] == "1,800.50"
        product_counts = {
            r["product_name"]: r["quantity"]
            for r in table.rows
            if r["order_number"] == "Product Count"
        }
        assert product_counts == {"Flyers": 1200, "Posters": 50}
