"""
Credential Use Case DTOs (Data Transfer Objects)

Command and Response classes for owner credential management.
"""

from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import CredentialField


# ============================================================================
# Command DTOs
# ============================================================================


class RotateOwnerCredentialCommand(BaseModel):
    tenant_id: UUID
    actor_id: UUID
    field: CredentialField
    new_value: str

    def __repr__(self) -> str:
        # new_value may be a password
        return (
            f"RotateOwnerCredentialCommand(tenant_id={self.tenant_id}, "
            f"actor_id={self.actor_id}, field={self.field.value})"
        )


# ============================================================================
# Response DTOs
# ============================================================================


class RotateOwnerCredentialResponse(BaseModel):
    """Response for rotate owner credential use case"""

    ok: bool
    correlation_id: str
    owner_identity_id: str
    owner_created: bool = False


class SendOwnerSetupLinkResponse(BaseModel):
    """Response for send owner setup link use case"""

    sent: bool
    correlation_id: str
