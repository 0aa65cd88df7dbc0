"""
Application exceptions

Each class carries the HTTP status and error code the API answers with;
``error_handlers`` turns them into the JSON error envelope.
"""

from typing import Any, Dict, Optional


class BaseAppException(Exception):
    status_code = 500
    error_code = "APP_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.status_code
        self.error_code = error_code or self.error_code
        self.details = details or {}


class ValidationError(BaseAppException):
    """Malformed request metadata (headers, query) outside the form body"""

    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class NotFoundError(BaseAppException):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Optional[str] = None):
        details = {"resource": resource}
        if identifier is not None:
            details["identifier"] = identifier
            message = f"{resource} {identifier} not found"
        else:
            message = f"{resource} not found"
        super().__init__(message, details=details)


class PlanNotEligibleError(BaseAppException):
    """The chosen plan is inactive, of another discipline or another age group"""

    status_code = 422
    error_code = "PLAN_NOT_ELIGIBLE"

    def __init__(self, plan_id: int, reason: str):
        super().__init__(
            f"Subscription plan {plan_id} is not eligible: {reason}",
            details={"plan_id": plan_id, "reason": reason},
        )


class RegistrationError(BaseAppException):
    """
    Registration failed at some step of the submission flow.

    The message is the single text shown in the form banner. ``reason``
    (plan_not_found, plan_not_eligible, invalid_birthdate, storage_failure)
    and any cause details stay in ``details`` and in the logs.
    """

    error_code = "REGISTRATION_ERROR"
    DEFAULT_MESSAGE = (
        "Une erreur est survenue lors de l'inscription. Veuillez réessayer."
    )

    def __init__(
        self,
        reason: str,
        status_code: int = 500,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message or self.DEFAULT_MESSAGE,
            status_code,
            details={**(details or {}), "reason": reason},
        )
        self.reason = reason


class DatabaseError(BaseAppException):
    error_code = "DATABASE_ERROR"

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class DatabaseConnectionError(DatabaseError):
    status_code = 503
    error_code = "DATABASE_CONNECTION_ERROR"


class DatabaseTimeoutError(DatabaseError):
    status_code = 504
    error_code = "DATABASE_TIMEOUT"

    def __init__(self, operation: str, timeout: int):
        super().__init__(
            f"{operation} timed out after {timeout}s",
            {"operation": operation, "timeout": timeout},
        )


class DatabaseIntegrityError(DatabaseError):
    status_code = 409
    error_code = "DATABASE_INTEGRITY_ERROR"

    def __init__(self, constraint: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Constraint {constraint} violated",
            {**(details or {}), "constraint": constraint},
        )


class ConfigurationError(BaseAppException):
    error_code = "CONFIGURATION_ERROR"

    def __init__(self, parameter: str, message: Optional[str] = None):
        super().__init__(
            message or f"Setting {parameter} is invalid or missing",
            details={"parameter": parameter},
        )
