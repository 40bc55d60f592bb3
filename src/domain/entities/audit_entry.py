"""
AuditEntry Entity

Append-only record of every provisioning and rotation transition.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import AuditOutcome


class AuditEntry(SQLModel, table=True):
    """
    AuditEntry entity - immutable log of orchestrator transitions.

    Business Rules:
    - Immutable (never updated or deleted within retention)
    - correlation_id is the idempotency key or a generated rotation id
    - payload is redacted before it gets here: no raw credentials, masked emails
    - id is monotonic so entries sharing a timestamp keep insertion order
    """

    __tablename__ = "audit_entries"

    id: Optional[int] = Field(default=None, primary_key=True)

    correlation_id: str = Field(max_length=255, nullable=False)
    actor_id: Optional[UUID] = Field(default=None)
    action: str = Field(max_length=100)
    outcome: AuditOutcome = Field(nullable=False)

    tenant_id: Optional[UUID] = Field(default=None, index=True)
    identity_id: Optional[UUID] = Field(default=None, index=True)
    payload: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_correlation_id", "correlation_id"),
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_action_created", "action", "created_at"),
    )
