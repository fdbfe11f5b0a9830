"""Schemas for dashboard API (main page summary cards)."""

from datetime import date
from decimal import Decimal

from src.modules.collections.schemas import DataBag
from src.shared.schemas.base import BaseSchema, Notice


class DashboardRequest(BaseSchema):
    data: DataBag | None = None
    as_of: date | None = None  # default: today


class DashboardResponse(BaseSchema):
    """Summary data for main page cards."""

    # Headcounts
    total_employees: int = 0
    total_clients: int = 0
    total_suppliers: int = 0
    total_machinery: int = 0

    # Orders and money
    active_orders: int = 0
    revenue_this_month: Decimal = Decimal("0")
    expenses_this_month: Decimal = Decimal("0")
    pending_payments: Decimal = Decimal("0")

    # Alerts
    low_stock_items: int = 0
    upcoming_maintenance: int = 0

    # Context
    as_of: date
    notices: list[Notice] = []
