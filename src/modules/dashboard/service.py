"""Service for dashboard summary (main page cards)."""

import calendar
from datetime import date
from decimal import Decimal

from src.modules.collections.schemas import DataBag
from src.shared.utils.dates import in_range
from src.shared.utils.money import round_money

CLOSED_ORDER_STATUSES = frozenset({"Completed", "Cancelled", "Delivered"})
REVENUE_ORDER_STATUSES = frozenset({"Completed", "Delivered"})
UNPAID_PAYMENT_STATUSES = frozenset({"Pending", "Partial"})


def add_month(day: date) -> date:
    """Same day next month, clamped to that month's last day (Jan 31 -> Feb 28)."""
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


class DashboardService:
    """Aggregates a DataBag into the main page cards."""

    def __init__(self, bag: DataBag):
        self.bag = bag

    def get_summary(self, as_of: date | None = None) -> dict:
        """
        Build dashboard summary.

        Revenue counts completed or delivered orders dated in the calendar
        month of as_of. Expenses are the net salary of every payroll record
        in the bag. Upcoming maintenance looks one month ahead of as_of.
        """
        as_of = as_of or date.today()
        bag = self.bag
        month_start = as_of.replace(day=1)
        month_end = as_of.replace(day=calendar.monthrange(as_of.year, as_of.month)[1])

        revenue = sum(
            (
                o.total_amount
                for o in bag.orders
                if o.status in REVENUE_ORDER_STATUSES and in_range(o.date, month_start, month_end)
            ),
            Decimal("0"),
        )
        expenses = sum((p.net_salary for p in bag.payroll), Decimal("0"))
        pending = sum(
            (
                o.total_amount - o.amount_paid
                for o in bag.orders
                if o.payment_status in UNPAID_PAYMENT_STATUSES
            ),
            Decimal("0"),
        )
        horizon = add_month(as_of)

        return {
            "total_employees": len(bag.employees),
            "total_clients": len(bag.clients),
            "total_suppliers": len(bag.suppliers),
            "total_machinery": len(bag.machinery),
            "active_orders": sum(1 for o in bag.orders if o.status not in CLOSED_ORDER_STATUSES),
            "revenue_this_month": round_money(revenue),
            "expenses_this_month": round_money(expenses),
            "pending_payments": round_money(pending),
            "low_stock_items": sum(1 for i in bag.inventory if i.is_low_stock),
            "upcoming_maintenance": sum(
                1 for m in bag.machinery if in_range(m.next_maintenance_date, as_of, horizon)
            ),
            "as_of": as_of,
        }
