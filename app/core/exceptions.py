"""
Custom Exception Classes for the Employee Vaccination Inventory
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception class for API errors with enhanced error details."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        error_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.error_data = error_data or {}


# Authentication & Authorization Exceptions
class AuthenticationError(BaseAPIException):
    """Authentication failed."""

    def __init__(self, detail: str = "Authentication failed", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="AUTH_FAILED",
            error_data=error_data,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InvalidTokenError(BaseAPIException):
    """Invalid or expired token."""

    def __init__(self, detail: str = "Invalid or expired token", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="INVALID_TOKEN",
            error_data=error_data,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InsufficientPermissionsError(BaseAPIException):
    """User doesn't have required permissions."""

    def __init__(self, detail: str = "Insufficient permissions", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="INSUFFICIENT_PERMISSIONS",
            error_data=error_data
        )


# Resource Exceptions
class ResourceAlreadyExistsError(BaseAPIException):
    """Resource already exists."""

    def __init__(self, resource_type: str, field: str = None, value: str = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"{resource_type} already exists"
        if field and value:
            detail += f" with {field}: {value}"

        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="RESOURCE_ALREADY_EXISTS",
            error_data={"resource_type": resource_type, "field": field, "value": value, **(error_data or {})}
        )


class ResourceInactiveError(BaseAPIException):
    """Resource is inactive or disabled."""

    def __init__(self, resource_type: str, resource_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"{resource_type} is inactive"
        if resource_id:
            detail += f" (ID: {resource_id})"

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="RESOURCE_INACTIVE",
            error_data={"resource_type": resource_type, "resource_id": resource_id, **(error_data or {})}
        )


# Validation Exceptions
class ValidationError(BaseAPIException):
    """Data validation failed."""

    def __init__(self, detail: str, field: str = None, value: Any = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code="VALIDATION_ERROR",
            error_data={"field": field, "value": value, **(error_data or {})}
        )


# Business Logic Exceptions
class EmployeeError(BaseAPIException):
    """Employee operation rejected by a failed precondition.

    The kind (``dni-exist``, ``email-exist``, ``invalid-dni``,
    ``employee-not-found``, ``role-not-found``, ``vaccine-not-found``) is
    both the detail and the error code, so clients can branch on it.
    """

    DNI_EXIST = "dni-exist"
    EMAIL_EXIST = "email-exist"
    INVALID_DNI = "invalid-dni"
    EMPLOYEE_NOT_FOUND = "employee-not-found"
    ROLE_NOT_FOUND = "role-not-found"
    VACCINE_NOT_FOUND = "vaccine-not-found"

    def __init__(self, kind: str, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=kind,
            error_code=kind,
            error_data=error_data
        )
        self.kind = kind


# Database Exceptions
class DatabaseError(BaseAPIException):
    """Database operation failed."""

    def __init__(self, detail: str = "Database operation failed", operation: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="DATABASE_ERROR",
            error_data={"operation": operation, **(error_data or {})}
        )
