"""
Employees API — Employee Service (Business Logic)
====================================================

What:  The five employee operations: list, get, create, update, delete.
Why:   Keeps validation and persistence out of the route handlers, so the
       operations can be tested without HTTP.
How:   Each method receives the request's AsyncSession, resolves/validates,
       writes through the ORM, and flushes. The commit happens in
       get_db_session once the handler returns.
Who:   Called by route handlers in app/routes/employees.py.

Error Handling Strategy:
    - Missing rows become NotFoundError (404), resolved before validation.
    - Rule failures raise ValidationError (422) from the rule table.
    - A unique-index violation on email (concurrent writers racing past the
      validator) is reported as the same ValidationError on "email".
    - Anything else is wrapped in DatabaseError (500) carrying the
      operation's message and the original exception text.
"""

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DatabaseError,
    EmployeesAPIError,
    EmptyCollectionError,
    NotFoundError,
    ValidationError,
)
from app.models.employee import Employee
from app.services.employee_rules import unique_message, validate_employee

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "Registro creado exitosamente"
UPDATED_MESSAGE = "Registro actualizado exitosamente"
DELETED_MESSAGE = "Empleado eliminado exitosamente"

CREATE_FAILED_MESSAGE = "Error al crear el registro"
UPDATE_FAILED_MESSAGE = "Error al actualizar el registro"
DELETE_FAILED_MESSAGE = "Error al eliminar el empleado"
GET_FAILED_MESSAGE = "Error al obtener el empleado"
LIST_FAILED_MESSAGE = "Error al obtener los empleados"

# Upper bound of the BIGINT primary key
MAX_EMPLOYEE_ID = 2**63 - 1


class EmployeeService:
    """
    Stateless service; one instance is shared by all requests.

    Responsibilities:
        - list_employees(): all rows in store order
        - get_employee():   single row or NotFoundError
        - create_employee(): validate → insert
        - update_employee(): resolve → validate (excluding self) → overwrite
        - delete_employee(): resolve → delete
    """

    async def list_employees(
        self, db: AsyncSession, empty_as_not_found: bool = True
    ) -> List[Employee]:
        """
        Return every employee ordered by id.

        Raises:
            EmptyCollectionError: table is empty and empty_as_not_found is set
            DatabaseError:        query failed
        """
        try:
            result = await db.execute(select(Employee).order_by(Employee.id))
            employees = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing employees: %s", str(e), exc_info=True)
            raise DatabaseError(message=LIST_FAILED_MESSAGE, error=str(e))

        if not employees and empty_as_not_found:
            raise EmptyCollectionError()
        return employees

    async def get_employee(self, db: AsyncSession, employee_id: int) -> Employee:
        """
        Fetch one employee by primary key.

        Raises:
            NotFoundError: no row with this id (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            employee = await self._find(db, employee_id)
        except Exception as e:
            logger.error("Database error fetching employee %s: %s", employee_id, str(e))
            raise DatabaseError(
                message=GET_FAILED_MESSAGE,
                error=str(e),
                context={"employee_id": employee_id},
            )

        if employee is None:
            raise NotFoundError(resource_id=employee_id)
        return employee

    async def create_employee(
        self, db: AsyncSession, payload: Mapping[str, Any]
    ) -> Employee:
        """
        Validate a candidate record and insert it.

        Returns:
            The new Employee with its generated id and timestamps loaded.

        Raises:
            ValidationError: one or more field rules failed; nothing written
            DatabaseError:   insert failed unexpectedly
        """
        try:
            values = await validate_employee(payload, self._lookup(db))

            employee = Employee(**values)
            db.add(employee)
            await db.flush()  # Assigns the id without committing
            await db.refresh(employee)
            logger.info("Employee created: id=%s", employee.id)
            return employee

        except IntegrityError as e:
            await db.rollback()
            raise self._integrity_to_validation(e)
        except EmployeesAPIError:
            raise
        except Exception as e:
            logger.error("Unexpected error creating employee: %s", str(e), exc_info=True)
            raise DatabaseError(message=CREATE_FAILED_MESSAGE, error=str(e))

    async def update_employee(
        self, db: AsyncSession, employee_id: int, payload: Mapping[str, Any]
    ) -> Employee:
        """
        Replace all four fields of an existing employee.

        The id is resolved before validation, so an unknown id is a 404 even
        when the body is invalid. The uniqueness rule ignores this record's
        own email.

        Raises:
            NotFoundError:   no row with this id
            ValidationError: one or more field rules failed; row untouched
            DatabaseError:   update failed unexpectedly
        """
        try:
            employee = await self._find(db, employee_id)
            if employee is None:
                raise NotFoundError(resource_id=employee_id)

            values = await validate_employee(
                payload, self._lookup(db), exclude_id=employee.id
            )

            for field, value in values.items():
                setattr(employee, field, value)
            await db.flush()
            await db.refresh(employee)
            logger.info("Employee updated: id=%s", employee.id)
            return employee

        except IntegrityError as e:
            await db.rollback()
            raise self._integrity_to_validation(e)
        except EmployeesAPIError:
            raise
        except Exception as e:
            logger.error(
                "Unexpected error updating employee %s: %s", employee_id, str(e), exc_info=True
            )
            raise DatabaseError(
                message=UPDATE_FAILED_MESSAGE,
                error=str(e),
                context={"employee_id": employee_id},
            )

    async def delete_employee(self, db: AsyncSession, employee_id: int) -> None:
        """
        Permanently remove an employee.

        Raises:
            NotFoundError: no row with this id
            DatabaseError: delete failed unexpectedly
        """
        try:
            employee = await self._find(db, employee_id)
            if employee is None:
                raise NotFoundError(resource_id=employee_id)

            await db.delete(employee)
            await db.flush()
            logger.info("Employee deleted: id=%s", employee_id)

        except EmployeesAPIError:
            raise
        except Exception as e:
            logger.error(
                "Unexpected error deleting employee %s: %s", employee_id, str(e), exc_info=True
            )
            raise DatabaseError(
                message=DELETE_FAILED_MESSAGE,
                error=str(e),
                context={"employee_id": employee_id},
            )

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find(self, db: AsyncSession, employee_id: int) -> Optional[Employee]:
        # Ids outside the BIGINT column cannot exist; the driver would overflow
        if not 1 <= employee_id <= MAX_EMPLOYEE_ID:
            return None
        result = await db.execute(select(Employee).where(Employee.id == employee_id))
        return result.scalar_one_or_none()

    def _lookup(self, db: AsyncSession):
        """Bind the uniqueness query of the rule table to this session."""

        async def value_taken(column: str, value: str, exclude_id: Optional[int]) -> bool:
            attr = getattr(Employee, column)
            # Emails that differ only by case are the same address
            query = select(Employee.id).where(func.lower(attr) == value.lower())
            if exclude_id is not None:
                query = query.where(Employee.id != exclude_id)
            result = await db.execute(query.limit(1))
            return result.scalar_one_or_none() is not None

        return value_taken

    @staticmethod
    def _integrity_to_validation(exc: IntegrityError) -> ValidationError:
        # Only the email column carries a unique constraint
        logger.warning("Unique constraint hit after validation: %s", str(exc.orig))
        return ValidationError(errors={"email": [unique_message("email")]})


# ── Singleton Instance ────────────────────────────────────────────────────
employee_service = EmployeeService()
