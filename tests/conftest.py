from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.modules.collections.schemas import DataBag
from src.modules.reports.delivery import ReportDelivery
from src.modules.reports.pdf_export import PDFService
from src.modules.reports.router import get_dispatcher
from src.modules.reports.service import GenerationGuard, ReportDispatcher


def sample_payload() -> dict:
    """
    Representative upstream data for March 2025, in the mixed camelCase /
    snake_case shapes the hosted backend returns.
    """
    return {
        "employees": [
            {"id": "E1", "firstName": "John", "lastName": "Doe",
             "department": "Production", "position": "Press Operator"},
            {"id": "E2", "fullName": "Maria Santos", "department": "Finishing",
             "position": "Binder"},
            {"id": "E3", "first_name": "Pedro", "last_name": "Cruz", "department": "Design"},
        ],
        "clients": [
            {"id": "C1", "name": "Acme Corp", "contactPerson": "Ann"},
            {"id": "C2", "name": "Beta Prints"},
        ],
        "suppliers": [
            {"id": "S1", "name": "Paper Co"},
            {"id": "S2", "name": "Ink Ltd"},
        ],
        "clientOrders": [
            {
                "id": "o1", "order_id": "ORD-001", "client_id": "C1",
                "clients": {"name": "Acme Corp"},
                "date": "2025-03-01", "deliveryDate": "2025-03-10",
                "status": "Completed", "amount": 1500.50, "paymentStatus": "Paid",
                "amountPaid": 1500.50,
                "items": [
                    {"productName": "Flyers", "quantity": 1000, "unitPrice": 1.0, "totalPrice": 1000},
                    {"product_name": "Posters", "quantity": 50, "unit_price": 10.01,
                     "total_price": 500.50},
                ],
            },
            {
                "id": "o2", "orderNumber": "ORD-002", "clientId": "C2",
                "clientName": "Beta Prints", "created_at": "2025-03-31T23:00:00Z",
                "status": "Pending", "totalAmount": "2000", "paymentStatus": "Pending",
                "amountPaid": 500,
                "items": [
                    {"productName": "Flyers", "quantity": 200, "unitPrice": 1.5, "totalPrice": 300},
                ],
            },
            {
                "id": "o3", "order_id": "ORD-003", "client_id": "C1", "date": "2025-04-01",
                "status": "Completed", "amount": 999, "paymentStatus": "Paid",
            },
            {"id": "o4", "date": "2025-02-28", "status": "Cancelled", "amount": 10},
        ],
        "inventoryItems": [
            {"id": "I1", "itemName": "A4 Paper", "sku": "PAP-A4", "itemType": "Paper",
             "quantity": 5, "minStockLevel": 10, "unitPrice": 250, "supplierId": "S1"},
            {"id": "I2", "name": "Black Ink", "itemCode": "INK-BK", "category": "Ink",
             "currentStock": 10, "reorderLevel": 10, "unit_price": 1200.75, "supplier_id": "S2"},
            {"id": "I3", "itemName": "Glossy Paper", "quantity": 40, "minStockLevel": 15,
             "unitPrice": 3.5, "supplierId": "S1"},
        ],
        "attendanceRecords": [
            {"id": "A1", "employeeId": "E1", "date": "2025-03-05", "timeIn": "08:00",
             "timeOut": "17:00", "status": "Present", "hoursWorked": 8, "overtime": 1},
            {"id": "A2", "employeeId": "E1", "date": "2025-03-03", "timeIn": "08:30",
             "timeOut": "17:00", "status": "Late", "hoursWorked": 7.5, "overtime": 0,
             "notes": "Traffic"},
            {"id": "A3", "employeeId": "E1", "date": "2025-04-02", "status": "Present",
             "hoursWorked": 8},
            {"id": "A4", "employeeId": "E2", "date": "2025-03-04", "status": "Absent"},
            {"id": "A5", "employee_id": "E2", "date": "2025-03-31", "hours_worked": 8},
            {"id": "A6", "employeeId": "X9", "employeeName": "Ghost Worker",
             "date": "2025-03-10", "status": "Present", "hoursWorked": 4},
        ],
        "payrollRecords": [
            {"id": "P1", "employeeId": "E1", "startDate": "2025-03-01", "endDate": "2025-03-15",
             "baseSalary": 15000, "overtimePay": 1200.5, "deductions": 800,
             "netSalary": 15400.5, "status": "Paid"},
            {"id": "P2", "employeeId": "E2", "startDate": "2025-03-16", "endDate": "2025-03-31",
             "basicSalary": 18000, "overtime_pay": 0, "deductions": 1000,
             "net_salary": 17000, "status": "Pending"},
            {"id": "P3", "employeeId": "E1", "endDate": "2025-03-20", "baseSalary": 999,
             "netSalary": 999, "status": "Paid"},
            {"id": "P4", "employeeId": "E2", "startDate": "2025-02-16", "endDate": "2025-02-28",
             "baseSalary": 18000, "netSalary": 17000, "status": "Paid"},
        ],
        "machinery": [
            {"id": "M1", "name": "Heidelberg Press", "type": "Offset",
             "nextMaintenanceDate": "2025-04-10"},
            {"id": "M2", "name": "Guillotine", "type": "Cutter",
             "next_maintenance_date": "2025-06-01"},
        ],
        "maintenanceRecords": [
            {"id": "R1", "machineryId": "M1", "date": "2025-03-12", "type": "Scheduled",
             "cost": 5000, "performedBy": "Tech A", "description": "Roller cleaning"},
            {"id": "R2", "machinery_id": "M2", "date": "2025-03-20", "maintenanceType": "Repair",
             "cost": 12000.25, "performed_by": "Tech B", "details": "Blade replacement"},
            {"id": "R3", "machineryId": "M1", "date": "2025-03-25", "cost": 300},
            {"id": "R4", "machineryId": "M1", "date": "2025-05-01", "type": "Inspection",
             "cost": 100},
        ],
    }


@pytest.fixture
def bag_payload() -> dict:
    return sample_payload()


@pytest.fixture
def bag() -> DataBag:
    return DataBag.model_validate(sample_payload())


@pytest.fixture
def export_dir(tmp_path: Path) -> Path:
    return tmp_path / "exports"


@pytest.fixture
def dispatcher(export_dir: Path) -> ReportDispatcher:
    return ReportDispatcher(
        ReportDelivery(export_dir),
        PDFService(page_compression=0),
        guard=GenerationGuard(),
    )


@pytest.fixture
async def client(dispatcher: ReportDispatcher) -> AsyncGenerator[AsyncClient, None]:
    """Test HTTP client whose reports land in a temp export directory."""
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
