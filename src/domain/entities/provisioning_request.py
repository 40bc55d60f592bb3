"""
ProvisioningRequest Entity

Idempotency ledger row for one tenant provisioning attempt.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import ProvisioningStatus


class ProvisioningRequest(SQLModel, table=True):
    """
    ProvisioningRequest entity - one idempotent provisioning attempt.

    Business Rules:
    - idempotency_key is globally unique; the unique index is the only
      concurrency gate between concurrent submissions
    - completed is terminal: replays return `result` without side effects
    - failed is retryable by resubmitting the same key
    - owner_identity_id / tenant_id are persisted as soon as each saga step
      commits so an abandoned attempt can be resumed
    - Never deleted (audit anchor)
    """

    __tablename__ = "provisioning_requests"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    idempotency_key: str = Field(max_length=255, nullable=False)

    actor_id: UUID = Field(nullable=False, index=True)
    tenant_slug: str = Field(max_length=50)
    owner_email: str = Field(max_length=255)
    payload: dict = Field(default_factory=dict, sa_column=Column(JSON))

    status: ProvisioningStatus = Field(default=ProvisioningStatus.pending)

    # Saga progress
    owner_identity_id: Optional[UUID] = Field(default=None)
    tenant_id: Optional[UUID] = Field(default=None)

    result: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    error_code: Optional[str] = Field(default=None, max_length=100)
    error_message: Optional[str] = Field(default=None, max_length=1000)
    retryable: Optional[bool] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("uq_provisioning_idempotency_key", "idempotency_key", unique=True),
        Index("idx_provisioning_status", "status"),
    )
