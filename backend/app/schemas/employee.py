"""
Employees API — Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the JSON envelopes of the API.
Why:   Automatic serialization and OpenAPI doc generation for every route.
How:   Route handlers return these; exception handlers in main.py build the
       error envelopes from the same models so the shapes cannot drift.

Request bodies are NOT modelled here. Create/update payloads are validated
by the rule table in app/services/employee_rules.py, which reports every
failing field with the API's own messages instead of Pydantic's.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Record
# ══════════════════════════════════════════════════════════════════════════


class EmployeeResponse(BaseModel):
    """One employee record as returned by every endpoint."""
    id: int = Field(description="System-generated identifier")
    name: str = Field(description="Full name")
    email: str = Field(description="Email address, unique across employees")
    phone: str = Field(description="Phone number, 8-15 digits")
    position: str = Field(description="Job position")
    created_at: datetime = Field(description="When the record was created (UTC)")
    updated_at: datetime = Field(description="When the record was last written (UTC)")

    model_config = {"from_attributes": True}


class EmployeeWrite(BaseModel):
    """
    Documentation-only shape of the create/update body.

    Attached to the OpenAPI schema of POST/PUT; never used to parse requests.
    """
    name: str = Field(max_length=255, examples=["Ana"])
    email: str = Field(max_length=255, examples=["ana@acme.com"])
    phone: str = Field(pattern=r"^[0-9]{8,15}$", examples=["12345678"])
    position: str = Field(max_length=255, examples=["Dev"])


# ══════════════════════════════════════════════════════════════════════════
# Success Envelopes
# ══════════════════════════════════════════════════════════════════════════


class EmployeeEnvelope(BaseModel):
    """Create/update success: status, message and the written record."""
    status: str = Field(default="success")
    message: str
    data: EmployeeResponse


class EmployeeDetailEnvelope(BaseModel):
    """Get-by-id success: status and the record, no message."""
    status: str = Field(default="success")
    data: EmployeeResponse


class MessageEnvelope(BaseModel):
    """Delete success: confirmation message only."""
    status: str = Field(default="success")
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error Envelopes
# ══════════════════════════════════════════════════════════════════════════


class ValidationErrorResponse(BaseModel):
    """
    422 body. `errors` maps each failing field to all of its messages.

    Example:
        {
            "status": "error",
            "message": "Error de validación",
            "errors": {"email": ["Este correo electrónico ya está registrado"]}
        }
    """
    status: str = Field(default="error")
    message: str
    errors: Dict[str, List[str]]


class ErrorResponse(BaseModel):
    """404 body, and 500 body when `error` carries the diagnostic text."""
    status: str = Field(default="error")
    message: str
    error: Optional[str] = Field(default=None, description="Diagnostic text (500 only)")


class EmptyListResponse(BaseModel):
    """Legacy 404 body of GET /employees on an empty table."""
    error: str
    code: int = 200


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
