"""Report dispatch: validate, transform, encode everything, then deliver."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from src.core.config import settings
from src.core.exceptions import (
    AppException,
    ReportBusyError,
    ReportGenerationError,
    ValidationError,
)
from src.modules.collections.schemas import DataBag
from src.modules.reports import csv_export, excel_export
from src.modules.reports.delivery import DeliveredFile, ReportDelivery
from src.modules.reports.pdf_export import PDFService
from src.modules.reports.registry import ReportDescriptor, lookup
from src.modules.reports.schemas import ALL, OutputFormat, ReportRequest
from src.modules.reports.tables import RenderedDocument, ReportTable
from src.modules.reports.transforms import TransformResult
from src.shared.schemas import Notice, Severity

logger = logging.getLogger(__name__)


class GenerationGuard:
    """Allows one generation at a time; a second caller is rejected, not queued."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise ReportBusyError()
        try:
            yield
        finally:
            self._lock.release()


generation_guard = GenerationGuard()


@dataclass
class GenerationResult:
    descriptor: ReportDescriptor
    files: list[DeliveredFile]
    notices: list[Notice] = field(default_factory=list)


class ReportDispatcher:
    """Runs one report request end to end."""

    def __init__(
        self,
        delivery: ReportDelivery | None = None,
        pdf_service: PDFService | None = None,
        guard: GenerationGuard | None = None,
    ) -> None:
        self.delivery = delivery or ReportDelivery(settings.export_dir)
        self.pdf_service = pdf_service or PDFService()
        self.guard = guard or generation_guard

    def generate(self, request: ReportRequest, bag: DataBag) -> GenerationResult:
        with self.guard.hold():
            self.validate(request)
            descriptor = lookup(request.report_type)
            if request.format not in descriptor.formats:
                raise ValidationError(
                    f"{descriptor.name} cannot be exported as {request.format.value}",
                    field="format",
                )
            result = self.run_transform(descriptor, request, bag)
            documents = [(table, self.encode(table, request.format)) for table in result.tables]
            files = self.delivery.deliver(documents)

        notices = list(result.notices)
        if not files:
            notices.append(
                Notice(
                    severity=Severity.WARNING,
                    message="No documents were generated for the selected filters.",
                )
            )
        logger.info(
            "Generated %s as %s: %d file(s)", descriptor.id, request.format.value, len(files)
        )
        return GenerationResult(descriptor=descriptor, files=files, notices=notices)

    def validate(self, request: ReportRequest) -> None:
        if not request.report_type or request.report_type == ALL:
            raise ValidationError("Please select a report type", field="report_type")
        if request.start_date > request.end_date:
            raise ValidationError("Start date must be on or before end date", field="start_date")

    def run_transform(
        self, descriptor: ReportDescriptor, request: ReportRequest, bag: DataBag
    ) -> TransformResult:
        filters = request.filters.restricted_to(descriptor.extra_filters)
        try:
            result = descriptor.transform(
                bag, request.format, request.start_date, request.end_date, filters
            )
            for table in result.tables:
                table.check_shape()
        except AppException:
            raise
        except Exception as e:
            logger.exception("Report %s failed during transform", descriptor.id)
            raise ReportGenerationError(str(e)) from e
        return result

    def encode(self, table: ReportTable, output_format: OutputFormat) -> RenderedDocument:
        if output_format == OutputFormat.PDF:
            return self.pdf_service.render(table)
        if output_format == OutputFormat.EXCEL:
            return excel_export.export_table(table)
        return csv_export.export_table(table)
