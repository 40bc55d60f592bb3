"""
Identity Entity

Local mirror of an identity-service account.
"""

from datetime import datetime
from uuid import UUID

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import CredentialState, IdentityKind


class Identity(SQLModel, table=True):
    """
    Identity entity - mirror of an account held by the identity service.

    Business Rules:
    - id is the identity service's own id, never generated locally
    - email is stored lower-cased
    - kind is immutable after creation
    - No credential material is ever stored here
    """

    __tablename__ = "identities"

    id: UUID = Field(primary_key=True)
    email: str = Field(max_length=255, nullable=False)
    kind: IdentityKind = Field(nullable=False)
    credential_state: CredentialState = Field(default=CredentialState.unverified)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_identity_email", "email"),
        Index("idx_identity_kind", "kind"),
    )
