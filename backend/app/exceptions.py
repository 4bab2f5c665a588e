"""
Employees API — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the error scenarios of the API.
Why:   Services raise these; global exception handlers (registered in
       main.py) turn them into the JSON envelopes clients expect, with the
       correct HTTP status codes.
How:   Each exception class carries a message and optional context dict.
Who:   Raised by services and middleware; caught by global handlers.

Exception Hierarchy:
    EmployeesAPIError (base)         → 500 Internal Server Error
    ├── ValidationError              → 422 Unprocessable Entity
    ├── NotFoundError                → 404 Not Found
    │   └── EmptyCollectionError     → 404 (legacy list envelope)
    └── DatabaseError                → 500 Internal Server Error

Write throttling answers 429 directly from its middleware, which runs
outside the exception handlers.
"""

from typing import Any, Dict, List, Optional


VALIDATION_FAILED_MESSAGE = "Error de validación"
EMPLOYEE_NOT_FOUND_MESSAGE = "Empleado no encontrado"
EMPLOYEES_EMPTY_MESSAGE = "Empleados no encontradas"


class EmployeesAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EmployeesAPIError):
    """
    Raised when a create/update payload breaks one or more field rules.

    HTTP:    422 Unprocessable Entity

    `errors` maps every failing field to all of its messages, in rule order:
        {
            "status": "error",
            "message": "Error de validación",
            "errors": {"phone": ["El teléfono debe tener entre 8 y 15 dígitos"]}
        }
    """

    def __init__(
        self,
        errors: Dict[str, List[str]],
        message: str = VALIDATION_FAILED_MESSAGE,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["fields"] = sorted(errors)
        super().__init__(message=message, context=ctx)
        self.errors = errors


class NotFoundError(EmployeesAPIError):
    """
    Raised when an identifier does not resolve to a record.

    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception so routes stay free of status handling.
    """

    def __init__(
        self,
        message: str = EMPLOYEE_NOT_FOUND_MESSAGE,
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class EmptyCollectionError(NotFoundError):
    """
    Raised by the list operation when the table holds no employees.

    HTTP:    404 Not Found, with the legacy body {"error": ..., "code": 200}
    which existing clients of the list endpoint depend on.
    """

    def __init__(self, message: str = EMPLOYEES_EMPTY_MESSAGE):
        super().__init__(message=message)


class DatabaseError(EmployeesAPIError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP:    500 Internal Server Error

    `message` is the operation-specific text ("Error al crear el registro");
    `error` is the diagnostic string of the underlying failure, which the
    envelope returns as its "error" field. Never retried.
    """

    def __init__(
        self,
        message: str = "Error interno del servidor",
        error: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.error = error
