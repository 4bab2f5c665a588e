"""
Employees API — Employee SQLAlchemy Model
============================================

What:  ORM model representing the `employees` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by EmployeeService for CRUD operations and by Alembic for schema management.

Table Design:
    - Integer auto-increment primary key: ids are handed out by the database
    - email: unique index; the validator checks uniqueness first and the
      index catches the race between two concurrent writes
    - phone: stored as text so leading zeros survive
    - created_at / updated_at: UTC with timezone
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    """
    One employee row.

    Lifecycle:
        1. Inserted by create
        2. All four user fields replaced by update (updated_at refreshed)
        3. Removed permanently by delete; no soft delete
    """

    __tablename__ = "employees"

    # BigInteger on PostgreSQL, plain INTEGER on SQLite so it autoincrements
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    phone: Mapped[str] = mapped_column(String(15), nullable=False)

    position: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, email='{self.email}')>"
