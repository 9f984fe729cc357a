"""
Custom Exceptions for SafeDrive
===============================

Use these instead of generic Exception to:
1. Make errors more specific and debuggable
2. Enable proper error handling at API layer
3. Provide meaningful error messages to users

Usage:
    from safedrive.core.exceptions import DriverNotFoundError

    if not driver:
        raise DriverNotFoundError(driver_id)

Every SafeDriveError reaching the API layer is rendered by
``safedrive_error_handler`` as ``{"success": false, "error": ..., "code": ...}``.
"""

from typing import Optional, Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse


class SafeDriveError(Exception):
    """Base exception for all SafeDrive errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(SafeDriveError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid"""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


class TokenExpiredError(InvalidTokenError):
    """JWT token has expired"""

    def __init__(self):
        super().__init__("Authentication token has expired")
        self.code = "TOKEN_EXPIRED"


class AuthorizationError(SafeDriveError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(SafeDriveError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class DriverNotFoundError(ResourceNotFoundError):
    """Driver not found"""

    def __init__(self, driver_id: str):
        super().__init__("Driver", driver_id)


class AlertNotFoundError(ResourceNotFoundError):
    """System alert not found"""

    def __init__(self, alert_id: str):
        super().__init__("Alert", alert_id)


class NotificationNotFoundError(ResourceNotFoundError):
    """Notification not found"""

    def __init__(self, notification_id: str):
        super().__init__("Notification", notification_id)


class AttendanceRecordNotFoundError(ResourceNotFoundError):
    """No attendance record for the driver today"""

    def __init__(self, driver_id: str):
        super().__init__("Attendance", driver_id, "No check-in record found for today")


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(SafeDriveError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class DuplicateResourceError(SafeDriveError):
    """A unique field collides with an existing row"""

    status_code = 409

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="DUPLICATE_RESOURCE", details=details)


class AttendanceStateError(SafeDriveError):
    """Check-in/check-out does not match the state of today's record"""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, code="ATTENDANCE_CONFLICT")


class DriverIdExhaustedError(SafeDriveError):
    """No free DRV-nnn code was found within the attempt budget"""

    def __init__(self, attempts: int):
        super().__init__(
            "Failed to generate unique driver ID",
            code="DRIVER_ID_EXHAUSTED",
            details={"attempts": attempts}
        )


# ============================================
# Helper functions for API responses
# ============================================

def error_response(error: SafeDriveError) -> Dict[str, Any]:
    """Convert exception to API error envelope"""
    body: Dict[str, Any] = {
        "success": False,
        "error": error.message,
        "code": error.code,
    }
    if error.details:
        body["details"] = error.details
    return body


async def safedrive_error_handler(request: Request, exc: SafeDriveError) -> JSONResponse:
    """FastAPI exception handler for SafeDriveError and its subclasses"""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc),
        headers=headers
    )
