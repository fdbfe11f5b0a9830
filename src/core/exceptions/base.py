from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class ReportGenerationError(AppException):
    """A report transform failed (malformed or missing source data)."""

    def __init__(self, message: str):
        super().__init__(message=f"Failed to generate report: {message}", status_code=500)


class ReportBusyError(AppException):
    """Another report generation is still running."""

    def __init__(self, message: str = "A report is already being generated. Please wait."):
        super().__init__(message=message, status_code=409)


class ExportError(AppException):
    """Encoding or delivering an export file failed with no fallback left."""

    def __init__(self, fmt: str, message: str):
        super().__init__(
            message=f"Failed to generate {fmt} file: {message}",
            status_code=500,
            details={"format": fmt},
        )


class PdfGenerationUnavailableError(AppException):
    """No PDF strategy could render the document (WeasyPrint and reportlab both failed)."""

    def __init__(self, message: str | None = None):
        msg = message or (
            "PDF generation is not available on this system. "
            "Try Excel or CSV format instead."
        )
        super().__init__(message=msg, status_code=503)
