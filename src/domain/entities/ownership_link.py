"""
OwnershipLink Entity

Which identity currently administers which tenant.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import OwnershipLinkStatus


class OwnershipLink(SQLModel, table=True):
    """
    OwnershipLink entity - explicit tenant/owner join.

    Business Rules:
    - Written in the same transaction as the tenant row (status=pending)
    - Moves to completed only after verification succeeds
    - Kept separate from Tenant.owner_identity_id so ownership stays
      resolvable during partial failures
    """

    __tablename__ = "ownership_links"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    owner_identity_id: UUID = Field(nullable=False, index=True)

    status: OwnershipLinkStatus = Field(default=OwnershipLinkStatus.pending)
    granted_by: UUID = Field(nullable=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_ownership_link_status", "status"),)
