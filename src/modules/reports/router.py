"""API for report generation and download."""

from functools import lru_cache

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from src.core.config import settings
from src.modules.collections.service import resolve_bag
from src.modules.reports.delivery import ReportDelivery
from src.modules.reports.registry import list_reports
from src.modules.reports.schemas import (
    FilterOptionsRequest,
    FilterOptionsResponse,
    GeneratedFileResponse,
    OptionItem,
    ReportDescriptorResponse,
    ReportGenerationResponse,
    ReportRequest,
)
from src.modules.reports.service import ReportDispatcher
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/reports", tags=["Reports"])

ORDER_STATUSES = ["Pending", "Approved", "In Progress", "Completed", "Cancelled"]
ATTENDANCE_STATUSES = ["Present", "Absent", "Late"]
PAYROLL_STATUSES = ["Draft", "Pending", "Approved", "Paid"]
INVENTORY_STATUSES = ["lowStock"]
MAINTENANCE_TYPES = ["Scheduled", "Repair", "Inspection", "Emergency"]


@lru_cache
def get_dispatcher() -> ReportDispatcher:
    return ReportDispatcher(ReportDelivery(settings.export_dir))


@router.get(
    "",
    response_model=ApiResponse[list[ReportDescriptorResponse]],
)
async def list_report_types():
    """Report kinds with their formats and the filters each one honours."""
    data = [
        ReportDescriptorResponse(
            id=r.id,
            name=r.name,
            description=r.description,
            formats=list(r.formats),
            extra_filters=list(r.extra_filters),
        )
        for r in list_reports()
    ]
    return ApiResponse(data=data)


@router.post(
    "/filter-options",
    response_model=ApiResponse[FilterOptionsResponse],
)
async def get_filter_options(body: FilterOptionsRequest):
    """Selectable values for the filter dropdowns."""
    loaded = await resolve_bag(body.data)
    bag = loaded.bag
    data = FilterOptionsResponse(
        employees=[
            OptionItem(id=e.id, name=e.full_name or e.id) for e in bag.employees if e.id
        ],
        clients=[OptionItem(id=c.id, name=c.name or c.id) for c in bag.clients if c.id],
        suppliers=[OptionItem(id=s.id, name=s.name or s.id) for s in bag.suppliers if s.id],
        statuses={
            "sales_summary": ORDER_STATUSES,
            "printing_jobs": ORDER_STATUSES,
            "employee_attendance": ATTENDANCE_STATUSES,
            "payroll": PAYROLL_STATUSES,
            "inventory": INVENTORY_STATUSES,
        },
        maintenance_types=MAINTENANCE_TYPES,
        notices=loaded.notices,
    )
    return ApiResponse(data=data)


@router.post(
    "/generate",
    response_model=ApiResponse[ReportGenerationResponse],
)
async def generate_report(
    body: ReportRequest,
    dispatcher: ReportDispatcher = Depends(get_dispatcher),
):
    """
    Generate one report (DTR: one file per employee) in the requested format.

    Files are saved under the export directory and listed with their download
    URL; a PDF or CSV that cannot be saved comes back as an inline data URL.
    """
    loaded = await resolve_bag(body.data)
    result = await run_in_threadpool(dispatcher.generate, body, loaded.bag)
    data = ReportGenerationResponse(
        report_type=result.descriptor.id,
        format=body.format,
        files=[GeneratedFileResponse(**vars(f)) for f in result.files],
        notices=loaded.notices + result.notices,
    )
    message = (
        f"{result.descriptor.name} generated successfully."
        if result.files
        else f"{result.descriptor.name}: nothing to export for the selected period."
    )
    return ApiResponse(data=data, message=message)


@router.get("/files/{filename}")
async def download_report_file(
    filename: str,
    dispatcher: ReportDispatcher = Depends(get_dispatcher),
):
    """Download a previously generated file."""
    path = dispatcher.delivery.resolve(filename)
    return FileResponse(path, filename=path.name)
