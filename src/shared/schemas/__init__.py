from src.shared.schemas.base import (
    BaseSchema,
    SuccessResponse,
    ApiResponse,
    ErrorResponse,
    ErrorDetail,
    Notice,
    Severity,
)

__all__ = [
    "BaseSchema",
    "SuccessResponse",
    "ApiResponse",
    "ErrorResponse",
    "ErrorDetail",
    "Notice",
    "Severity",
]
