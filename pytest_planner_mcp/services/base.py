"""
Service Layer Base - Result and error types shared by every service.

- ServiceResult: success with data, or failure with a ServiceError
- ServiceError: code, message and optional details (e.g. "available")
- ErrorCode: string enum, serialized as its value
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Error codes returned by services."""
    # Input validation
    VALIDATION_ERROR = "validation_error"
    MISSING_INPUT = "missing_input"

    # File operations
    FILE_NOT_FOUND = "file_not_found"
    PERMISSION_DENIED = "permission_denied"
    FILE_TOO_LARGE = "file_too_large"
    INVALID_EXTENSION = "invalid_extension"

    # Class analysis
    SYNTAX_ERROR = "syntax_error"
    CLASS_NOT_FOUND = "class_not_found"
    METHOD_NOT_FOUND = "method_not_found"

    # Sessions
    SESSION_NOT_FOUND = "session_not_found"

    # General
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class ServiceError:
    """
    Structured error information.

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable error message
        details: Extra context; input errors put valid choices under "available"
    """
    code: ErrorCode
    message: str
    details: dict | None = None

    @property
    def available(self) -> list[str]:
        if not self.details:
            return []
        return list(self.details.get("available", []))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """
    Either success with data or failure with error, never both.

    Usage:
        result = service.analyze(code=source)
        if result.success:
            render(result.data)
        else:
            report(result.error)
    """
    success: bool
    data: T | None = None
    error: ServiceError | None = None

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        return cls(success=True, data=data, error=None)

    @classmethod
    def fail(
        cls,
        code: ErrorCode,
        message: str,
        details: dict | None = None
    ) -> ServiceResult[T]:
        return cls(
            success=False,
            data=None,
            error=ServiceError(code=code, message=message, details=details)
        )

    def map(self, func) -> ServiceResult:
        """Apply func to the data of a successful result; failures pass through."""
        if self.success and self.data is not None:
            return ServiceResult.ok(func(self.data))
        return self

    def unwrap(self) -> T:
        """
        Get the data.

        Raises:
            ValueError: If result is a failure
        """
        if not self.success or self.data is None:
            error_msg = self.error.message if self.error else "Unknown error"
            raise ValueError(f"Cannot unwrap failed result: {error_msg}")
        return self.data

    def unwrap_or(self, default: T) -> T:
        if self.success and self.data is not None:
            return self.data
        return default
