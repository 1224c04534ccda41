"""
Fundbook exception hierarchy.

All fundbook exceptions inherit from FundbookError. Each class carries a stable
error code and the HTTP status the API layer responds with.
"""

from typing import Any, Optional


class FundbookError(Exception):
    """Base exception class for all fundbook errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class MoneyArithmeticError(FundbookError, ArithmeticError):
    """Raised for division by zero or an unsupported rounding mode."""

    code = "ARITHMETIC_ERROR"
    status_code = 422


class ConsistencyError(FundbookError):
    """Raised when a multi-row write is detected as incomplete mid-transaction."""

    code = "CONSISTENCY_ERROR"
    status_code = 500


class NotFoundError(FundbookError):
    """Raised when a referenced investor, asset or snapshot does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: Any = None):
        super().__init__(f"{resource} not found", {"id": resource_id})
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(FundbookError):
    """Raised for invalid input values (e.g. a fee rate outside 0-100)."""

    code = "VALIDATION_ERROR"
    status_code = 422


class InvalidOperationError(FundbookError):
    """Raised when an operation is not allowed in the entity's current state."""

    code = "INVALID_OPERATION"
    status_code = 409


class SnapshotConflictError(InvalidOperationError):
    """Raised when a snapshot already exists for a date and duplicates are disabled."""

    code = "ALREADY_EXISTS"
