"""
Error Handling System

Provides the error codes and exceptions shared by every action.
Each failure reaches the client as the same structured envelope:

{
    "ok": false,
    "code": "NOT_FOUND",
    "message": "Event with slug 'react-conf' not found",
    "issues": []
}
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
from pydantic import ValidationError


class ErrorCode(str, Enum):
    """Error classes surfaced to the UI layer."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    UNKNOWN = "UNKNOWN"


STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def code_for_status(status_code: int) -> ErrorCode:
    """Map a bare HTTP status back onto an error class."""
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return ErrorCode.UNAUTHORIZED
    if status_code == status.HTTP_404_NOT_FOUND:
        return ErrorCode.NOT_FOUND
    if status_code == status.HTTP_409_CONFLICT:
        return ErrorCode.CONFLICT
    if 400 <= status_code < 500:
        return ErrorCode.VALIDATION_ERROR
    return ErrorCode.UNKNOWN


class ServiceError(HTTPException):
    """
    Base class for business logic errors.

    Raised by the service layer, caught by the FastAPI exception handler
    and rendered as the failure envelope. The HTTP status is derived from
    the error code unless given explicitly.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        issues: Optional[List[Dict[str, Any]]] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.issues = issues or []
        self.http_status = status_code or STATUS_BY_CODE[code]
        super().__init__(
            status_code=self.http_status,
            detail={
                "code": code.value,
                "message": message,
                "issues": self.issues,
            }
        )

    def to_result(self) -> Dict[str, Any]:
        """Failure envelope for this error."""
        result: Dict[str, Any] = {
            "ok": False,
            "code": self.code.value,
            "message": self.message,
        }
        if self.issues:
            result["issues"] = self.issues
        return result


def issues_from(exc: ValidationError) -> List[Dict[str, Any]]:
    """Reduce pydantic errors to JSON-safe issue dicts."""
    return [
        {
            "path": [str(part) for part in error.get("loc", ())],
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


# Convenience functions for common errors
def validation_error(message: str, issues: Optional[List[Dict[str, Any]]] = None) -> ServiceError:
    """Create a validation error (400 Bad Request)."""
    return ServiceError(ErrorCode.VALIDATION_ERROR, message, issues)


def not_found_error(message: str) -> ServiceError:
    """Create a not-found error (404 Not Found)."""
    return ServiceError(ErrorCode.NOT_FOUND, message)


def conflict_error(message: str) -> ServiceError:
    """Create a conflict error (409 Conflict)."""
    return ServiceError(ErrorCode.CONFLICT, message)


def unknown_error(message: str) -> ServiceError:
    """Create an unclassified error (500 Internal Server Error)."""
    return ServiceError(ErrorCode.UNKNOWN, message)
