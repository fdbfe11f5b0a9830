from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    ReportGenerationError,
    ReportBusyError,
    ExportError,
    PdfGenerationUnavailableError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "ReportGenerationError",
    "ReportBusyError",
    "ExportError",
    "PdfGenerationUnavailableError",
]
