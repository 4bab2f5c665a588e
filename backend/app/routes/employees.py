"""
Employees API — Employee Route Handlers
==========================================

What:  The five /employees endpoints.
Why:   HTTP entry point for the employee CRUD operations.
How:   Extracts path/body, delegates to EmployeeService, wraps the result in
       the success envelope. Errors propagate as application exceptions and
       are rendered by the handlers registered in main.py.

Route Inventory:
    GET    /employees          list
    GET    /employees/{id}     get-by-id
    POST   /employees          create     (201)
    PUT    /employees/{id}     update
    DELETE /employees/{id}     delete
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.schemas.employee import (
    EmployeeDetailEnvelope,
    EmployeeEnvelope,
    EmployeeResponse,
    EmployeeWrite,
    EmptyListResponse,
    ErrorResponse,
    MessageEnvelope,
    ValidationErrorResponse,
)
from app.services.employee_service import (
    CREATED_MESSAGE,
    DELETED_MESSAGE,
    UPDATED_MESSAGE,
    employee_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])

# The body is validated by the rule table, not by Pydantic; this only
# documents its shape in the OpenAPI schema.
_WRITE_BODY_DOC = {
    "requestBody": {
        "content": {"application/json": {"schema": EmployeeWrite.model_json_schema()}}
    }
}

_NOT_FOUND = {"description": "Employee not found", "model": ErrorResponse}
_INVALID = {"description": "Validation failed", "model": ValidationErrorResponse}
_INTERNAL = {"description": "Persistence failure", "model": ErrorResponse}


@router.get(
    "",
    response_model=List[EmployeeResponse],
    responses={
        404: {"description": "No employees stored", "model": EmptyListResponse},
        500: _INTERNAL,
    },
    summary="List all employees",
)
async def list_employees(
    db: AsyncSession = Depends(get_db_session),
) -> List[EmployeeResponse]:
    """
    Every employee in store order, as a bare JSON array.

    An empty table answers 404 {"error": ..., "code": 200} unless
    EMPTY_LIST_AS_NOT_FOUND is disabled, in which case it answers 200 [].
    """
    employees = await employee_service.list_employees(
        db, empty_as_not_found=settings.empty_list_as_not_found
    )
    return [EmployeeResponse.model_validate(e) for e in employees]


@router.get(
    "/{employee_id}",
    response_model=EmployeeDetailEnvelope,
    responses={404: _NOT_FOUND, 500: _INTERNAL},
    summary="Get an employee by id",
)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> EmployeeDetailEnvelope:
    employee = await employee_service.get_employee(db, employee_id)
    return EmployeeDetailEnvelope(data=EmployeeResponse.model_validate(employee))


@router.post(
    "",
    status_code=201,
    response_model=EmployeeEnvelope,
    responses={422: _INVALID, 500: _INTERNAL},
    openapi_extra=_WRITE_BODY_DOC,
    summary="Create an employee",
)
async def create_employee(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> EmployeeEnvelope:
    """
    Validate and insert a new employee.

    All four fields are required; every failing field is reported in one
    422 response and nothing is written.
    """
    employee = await employee_service.create_employee(db, payload)
    return EmployeeEnvelope(
        message=CREATED_MESSAGE,
        data=EmployeeResponse.model_validate(employee),
    )


@router.put(
    "/{employee_id}",
    response_model=EmployeeEnvelope,
    responses={404: _NOT_FOUND, 422: _INVALID, 500: _INTERNAL},
    openapi_extra=_WRITE_BODY_DOC,
    summary="Replace an employee",
)
async def update_employee(
    employee_id: int,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> EmployeeEnvelope:
    """
    Full replacement of name, email, phone and position.

    Unknown ids answer 404 before the body is validated. Re-submitting the
    employee's current email is not a uniqueness violation.
    """
    employee = await employee_service.update_employee(db, employee_id, payload)
    return EmployeeEnvelope(
        message=UPDATED_MESSAGE,
        data=EmployeeResponse.model_validate(employee),
    )


@router.delete(
    "/{employee_id}",
    response_model=MessageEnvelope,
    responses={404: _NOT_FOUND, 500: _INTERNAL},
    summary="Delete an employee",
)
async def delete_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> MessageEnvelope:
    await employee_service.delete_employee(db, employee_id)
    return MessageEnvelope(message=DELETED_MESSAGE)
