"""
Employee Entity

Staff records: platform staff (no tenant) and restaurant staff.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import EmployeeStatus


class Employee(SQLModel, table=True):
    """
    Employee entity - consumed read-only by this service.

    Business Rules:
    - tenant_id IS NULL marks platform staff; active platform staff with an
      administrator role are on the administrator roster
    - email takes part in the cross-entity email uniqueness check
    """

    __tablename__ = "employees"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: Optional[UUID] = Field(default=None, index=True)
    tenant_id: Optional[UUID] = Field(default=None, index=True)

    email: str = Field(max_length=255, nullable=False)
    role: str = Field(max_length=50)
    status: EmployeeStatus = Field(default=EmployeeStatus.ACTIVE)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_employee_email", "email"),)
