"""Translate reconciliation errors into HTTP error responses."""

from typing import Any, Dict

from fastapi import HTTPException, status

from src.services.errors import (
    ConsumptionCalculationError,
    FinanceError,
    NotFoundError,
    ValidationError,
)


class AppError(Exception):
    """Base application error carrying an HTTP status."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


def to_app_error(error: FinanceError) -> AppError:
    """Map a FinanceError onto its error code and HTTP status."""
    if isinstance(error, NotFoundError):
        return AppError(str(error), "not_found", status.HTTP_404_NOT_FOUND)
    if isinstance(error, ValidationError):
        return AppError(str(error), "validation_error", status.HTTP_422_UNPROCESSABLE_ENTITY)
    if isinstance(error, ConsumptionCalculationError):
        return AppError(str(error), "calculation_error", status.HTTP_422_UNPROCESSABLE_ENTITY)
    return AppError(str(error), "finance_error", status.HTTP_400_BAD_REQUEST)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


def raise_app_error(error: FinanceError) -> None:
    """Raise an HTTPException from a FinanceError."""
    app_error = to_app_error(error)
    raise HTTPException(
        status_code=app_error.http_status,
        detail=error_response(app_error),
    ) from error
