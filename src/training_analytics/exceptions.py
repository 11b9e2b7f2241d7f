"""
Custom exceptions for the training analytics engine.

Each exception carries:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging

Metric calculators never raise for missing optional data; they return
None instead. These exceptions are for invalid input, missing records
and storage failures.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Stream / workout errors
    UNUSABLE_STREAM = "UNUSABLE_STREAM"
    UNKNOWN_DISCIPLINE = "UNKNOWN_DISCIPLINE"
    ANALYTICS_NOT_FOUND = "ANALYTICS_NOT_FOUND"

    # Zone configuration errors
    ZONE_CONFIG_INVALID = "ZONE_CONFIG_INVALID"

    # Data/Database errors
    DATABASE_ERROR = "DATABASE_ERROR"


class AnalyticsError(Exception):
    """
    Base exception for all training analytics errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors (400)
# ============================================================================

class ValidationError(AnalyticsError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class UnusableStreamError(ValidationError):
    """Raised when an activity stream has no time channel."""

    def __init__(self, message: str = "Activity stream has no time samples") -> None:
        super().__init__(message=message, field="time")
        self.code = ErrorCode.UNUSABLE_STREAM


class UnknownDisciplineError(ValidationError):
    """Raised when a discipline label is not run, bike, swim or brick."""

    def __init__(self, discipline: str) -> None:
        super().__init__(
            message=f"Unknown discipline: {discipline}",
            field="discipline",
        )
        self.code = ErrorCode.UNKNOWN_DISCIPLINE


class ZoneConfigError(ValidationError):
    """Raised when a stored plan zone configuration fails validation."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, field="zone_config", details=details)
        self.code = ErrorCode.ZONE_CONFIG_INVALID


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(AnalyticsError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        code: ErrorCode = ErrorCode.NOT_FOUND,
    ) -> None:
        super().__init__(
            message=f"{resource_type} not found: {resource_id}",
            code=code,
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class AnalyticsNotFoundError(NotFoundError):
    """Raised when no analytics record exists for a workout."""

    def __init__(self, workout_id: str) -> None:
        super().__init__(
            resource_type="WorkoutAnalytics",
            resource_id=workout_id,
            code=ErrorCode.ANALYTICS_NOT_FOUND,
        )


# ============================================================================
# Database Errors (500)
# ============================================================================

class DatabaseError(AnalyticsError):
    """Raised when a storage operation fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=error_details,
        )
