"""
Tenant Entity

A provisioned restaurant organization.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import TenantStatus


class Tenant(SQLModel, table=True):
    """
    Tenant entity - a provisioned organization.

    Business Rules:
    - slug is unique among tenants where deleted_at IS NULL
    - owner_identity_id, once set, points at an existing tenant_owner identity
    - Soft delete only: deleted_at frees the slug, the row stays
    """

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=50, nullable=False)
    contact_email: Optional[str] = Field(default=None, max_length=255)

    owner_identity_id: Optional[UUID] = Field(
        default=None, foreign_key="identities.id", index=True
    )
    status: TenantStatus = Field(default=TenantStatus.provisioning)

    # Profile
    timezone: str = Field(default="UTC", max_length=64)
    currency: str = Field(default="USD", max_length=3)
    description: Optional[str] = Field(default=None, max_length=1000)
    phone: Optional[str] = Field(default=None, max_length=50)
    website: Optional[str] = Field(default=None, max_length=255)
    address: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "uq_tenant_slug_active",
            "slug",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("idx_tenant_contact_email", "contact_email"),
        Index("idx_tenant_deleted_at", "deleted_at"),
    )
