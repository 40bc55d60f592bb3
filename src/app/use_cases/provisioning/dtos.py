"""
Provisioning Use Case DTOs (Data Transfer Objects)

Command and Response classes for tenant provisioning.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class ProvisionTenantCommand(BaseModel):
    """
    Provision tenant command - one idempotent provisioning intent

    Created by the API layer after request validation passes. The actor id
    comes from the caller's token, never from the body.
    """

    idempotency_key: str
    actor_id: UUID
    tenant_name: str
    tenant_slug: str
    owner_email: str

    # Optional tenant profile
    timezone: str = "UTC"
    currency: str = "USD"
    description: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[Dict[str, Any]] = None

    def profile(self) -> Dict[str, Any]:
        return self.model_dump(
            include={"timezone", "currency", "description", "phone", "website", "address"}
        )


# ============================================================================
# Response DTOs
# ============================================================================


class ProvisionTenantResponse(BaseModel):
    """Never carries a credential of any kind"""

    tenant_id: str
    owner_identity_id: str
    setup_link_sent: bool


class ProvisioningRequestResponse(BaseModel):
    """Ledger view of one provisioning attempt"""

    idempotency_key: str
    status: str
    tenant_slug: str
    tenant_id: Optional[str] = None
    owner_identity_id: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    retryable: Optional[bool] = None
    created_at: str
    completed_at: Optional[str] = None
