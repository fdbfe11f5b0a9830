"""
Canonical record shapes for the collections read from the hosted backend.

Upstream rows are loosely typed and use inconsistent field names
(totalAmount vs amount, minStockLevel vs reorderLevel, camelCase vs
snake_case). Every variant is mapped onto one field here, so report code
only ever reads the canonical attribute.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any

from pydantic import AliasChoices, AliasPath, BeforeValidator, Field, model_validator

from src.shared.schemas.base import BaseSchema
from src.shared.utils.dates import parse_date
from src.shared.utils.money import to_decimal


def _to_str(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    text = str(v).strip()
    return text or None


LooseStr = Annotated[str | None, BeforeValidator(_to_str)]
LooseDate = Annotated[date | None, BeforeValidator(parse_date)]
LooseDecimal = Annotated[Decimal, BeforeValidator(to_decimal)]


def _aliases(*names: str | AliasPath) -> AliasChoices:
    return AliasChoices(*names)


class RecordSchema(BaseSchema):
    """
    Base for upstream rows. Null and empty-string values are dropped before
    validation so that AliasChoices falls through to the next alias that
    actually carries a value, and the field default applies otherwise.
    """

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data


class OrderItem(RecordSchema):
    product_name: LooseStr = Field(None, validation_alias=_aliases("product_name", "productName"))
    quantity: LooseDecimal = Decimal("0")
    unit_price: LooseDecimal = Field(Decimal("0"), validation_alias=_aliases("unit_price", "unitPrice"))
    total_price: LooseDecimal = Field(
        Decimal("0"), validation_alias=_aliases("total_price", "totalPrice")
    )


class Order(RecordSchema):
    id: LooseStr = None
    order_number: LooseStr = Field(
        None, validation_alias=_aliases("order_id", "orderNumber", "order_number")
    )
    client_id: LooseStr = Field(None, validation_alias=_aliases("client_id", "clientId"))
    client_name: LooseStr = Field(
        None,
        validation_alias=_aliases("clientName", "client_name", AliasPath("clients", "name")),
    )
    date: LooseDate = Field(
        None, validation_alias=_aliases("date", "created_at", "orderDate", "order_date")
    )
    delivery_date: LooseDate = Field(
        None, validation_alias=_aliases("deliveryDate", "delivery_date")
    )
    status: LooseStr = None
    total_amount: LooseDecimal = Field(
        Decimal("0"), validation_alias=_aliases("amount", "totalAmount", "total_amount")
    )
    amount_paid: LooseDecimal = Field(
        Decimal("0"), validation_alias=_aliases("amountPaid", "amount_paid", "paidAmount")
    )
    payment_status: LooseStr = Field(
        None, validation_alias=_aliases("paymentStatus", "payment_status")
    )
    items: list[OrderItem] = Field(default_factory=list)

    @property
    def display_number(self) -> str:
        return self.order_number or self.id or ""


class InventoryItem(RecordSchema):
    id: LooseStr = None
    name: LooseStr = Field(None, validation_alias=_aliases("itemName", "item_name", "name"))
    sku: LooseStr = Field(None, validation_alias=_aliases("sku", "itemCode", "item_code"))
    category: LooseStr = Field(
        None, validation_alias=_aliases("itemType", "item_type", "category")
    )
    quantity: LooseDecimal = Field(
        Decimal("0"), validation_alias=_aliases("quantity", "currentStock", "current_stock")
    )
    min_stock: LooseDecimal = Field(
        Decimal("0"),
        validation_alias=_aliases(
            "minStockLevel", "min_stock_level", "reorderLevel", "reorder_level", "min_stock"
        ),
    )
    unit_price: LooseDecimal = Field(Decimal("0"), validation_alias=_aliases("unitPrice", "unit_price"))
    supplier_id: LooseStr = Field(None, validation_alias=_aliases("supplierId", "supplier_id"))

    @property
    def is_low_stock(self) -> bool:
        return self.quantity < self.min_stock

    @property
    def stock_value(self) -> Decimal:
        return self.quantity * self.unit_price


class Employee(RecordSchema):
    id: LooseStr = None
    first_name: LooseStr = Field(None, validation_alias=_aliases("firstName", "first_name"))
    last_name: LooseStr = Field(None, validation_alias=_aliases("lastName", "last_name"))
    given_full_name: LooseStr = Field(None, validation_alias=_aliases("fullName", "full_name"))
    department: LooseStr = None
    position: LooseStr = None
    status: LooseStr = None

    @property
    def full_name(self) -> str:
        if self.given_full_name:
            return self.given_full_name
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class AttendanceRecord(RecordSchema):
    id: LooseStr = None
    employee_id: LooseStr = Field(None, validation_alias=_aliases("employeeId", "employee_id"))
    employee_name: LooseStr = Field(
        None, validation_alias=_aliases("employeeName", "employee_name")
    )
    date: LooseDate = None
    time_in: LooseStr = Field(None, validation_alias=_aliases("timeIn", "time_in"))
    time_out: LooseStr = Field(None, validation_alias=_aliases("timeOut", "time_out"))
    status: LooseStr = None
    hours_worked: LooseDecimal | None = Field(
        None, validation_alias=_aliases("hoursWorked", "hours_worked")
    )
    overtime: LooseDecimal = Decimal("0")
    remarks: LooseStr = Field(None, validation_alias=_aliases("notes", "remarks"))


class PayrollRecord(RecordSchema):
    id: LooseStr = None
    employee_id: LooseStr = Field(None, validation_alias=_aliases("employeeId", "employee_id"))
    employee_name: LooseStr = Field(
        None, validation_alias=_aliases("employeeName", "employee_name")
    )
    period_start: LooseDate = Field(
        None, validation_alias=_aliases("startDate", "start_date", "payPeriodStart")
    )
    period_end: LooseDate = Field(
        None, validation_alias=_aliases("endDate", "end_date", "payPeriodEnd")
    )
    base_salary: LooseDecimal = Field(
        Decimal("0"), validation_alias=_aliases("baseSalary", "base_salary", "basicSalary")
    )
    overtime_pay: LooseDecimal = Field(
        Decimal("0"), validation_alias=_aliases("overtimePay", "overtime_pay")
    )
    deductions: LooseDecimal = Decimal("0")
    net_salary: LooseDecimal = Field(Decimal("0"), validation_alias=_aliases("netSalary", "net_salary"))
    status: LooseStr = None


class Machinery(RecordSchema):
    id: LooseStr = None
    name: LooseStr = None
    type: LooseStr = None
    last_maintenance_date: LooseDate = Field(
        None, validation_alias=_aliases("lastMaintenanceDate", "last_maintenance_date")
    )
    next_maintenance_date: LooseDate = Field(
        None, validation_alias=_aliases("nextMaintenanceDate", "next_maintenance_date")
    )
    status: LooseStr = None


class MaintenanceRecord(RecordSchema):
    id: LooseStr = None
    machinery_id: LooseStr = Field(None, validation_alias=_aliases("machineryId", "machinery_id"))
    date: LooseDate = None
    maintenance_type: LooseStr = Field(
        None, validation_alias=_aliases("type", "maintenanceType", "maintenance_type")
    )
    cost: LooseDecimal = Decimal("0")
    performed_by: LooseStr = Field(None, validation_alias=_aliases("performedBy", "performed_by"))
    description: LooseStr = Field(None, validation_alias=_aliases("description", "details"))


class Client(RecordSchema):
    id: LooseStr = None
    name: LooseStr = None
    contact_person: LooseStr = Field(
        None, validation_alias=_aliases("contactPerson", "contact_person")
    )
    email: LooseStr = None
    phone: LooseStr = None


class Supplier(Client):
    pass


class DataBag(RecordSchema):
    """
    Every source collection a report may read, as one immutable snapshot.

    Passed explicitly into each report call; an absent collection is an
    empty list, a collection that is not a list fails validation.
    """

    orders: list[Order] = Field(
        default_factory=list, validation_alias=_aliases("orders", "clientOrders", "client_orders")
    )
    inventory: list[InventoryItem] = Field(
        default_factory=list, validation_alias=_aliases("inventory", "inventoryItems")
    )
    employees: list[Employee] = Field(default_factory=list)
    attendance: list[AttendanceRecord] = Field(
        default_factory=list, validation_alias=_aliases("attendance", "attendanceRecords")
    )
    payroll: list[PayrollRecord] = Field(
        default_factory=list, validation_alias=_aliases("payroll", "payrollRecords")
    )
    machinery: list[Machinery] = Field(default_factory=list)
    maintenance_records: list[MaintenanceRecord] = Field(
        default_factory=list,
        validation_alias=_aliases(
            "maintenance_records",
            "maintenanceRecords",
            AliasPath("machineryStats", "maintenanceRecords"),
        ),
    )
    clients: list[Client] = Field(default_factory=list)
    suppliers: list[Supplier] = Field(default_factory=list)

    def employees_by_id(self) -> dict[str, Employee]:
        return {e.id: e for e in self.employees if e.id is not None}

    def machinery_by_id(self) -> dict[str, Machinery]:
        return {m.id: m for m in self.machinery if m.id is not None}
