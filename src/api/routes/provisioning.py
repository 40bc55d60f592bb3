"""
Provisioning API Routes

Idempotent tenant + owner provisioning for platform administrators.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import raise_for_error
from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.identity_service import IIdentityService
from src.app.services.orchestrator_settings import OrchestratorSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.provisioning import (
    GetProvisioningRequestUseCase,
    ProvisionTenantCommand,
    ProvisionTenantResponse,
    ProvisionTenantUseCase,
    ProvisioningRequestResponse,
)
from src.depends import (
    get_administrator_roster,
    get_current_administrator,
    get_identity_service,
    get_orchestrator_settings,
    get_unit_of_work,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Provisioning"])


class ProvisionTenantRequest(BaseModel):
    """
    Provision tenant HTTP request payload

    Deliberately has no password field: the owner sets one through the
    verification link.
    """

    idempotency_key: str = Field(..., min_length=1, max_length=255)
    tenant_name: str = Field(..., min_length=1, max_length=255)
    tenant_slug: str = Field(..., description="3-50 chars, lowercase, digits, hyphens")
    owner_email: EmailStr

    timezone: str = "UTC"
    currency: str = Field("USD", min_length=3, max_length=3)
    description: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[Dict[str, Any]] = None


@router.post(
    "/tenants/provision",
    status_code=status.HTTP_201_CREATED,
    response_model=ProvisionTenantResponse,
)
async def provision_tenant(
    request: ProvisionTenantRequest,
    actor_id: UUID = Depends(get_current_administrator),
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity_service: IIdentityService = Depends(get_identity_service),
    roster: AdministratorRoster = Depends(get_administrator_roster),
    settings: OrchestratorSettings = Depends(get_orchestrator_settings),
):
    """
    Provision Tenant

    Creates the owner identity, the tenant and its ownership link as one
    saga. Resubmitting the same idempotency key returns the first result.

    Raises:
        - 400 Bad Request: invalid/reserved/taken slug, email already in use
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: actor is not a platform administrator
        - 409 Conflict: same key is in flight or was used for another tenant
        - 503 Service Unavailable: identity service unavailable (retryable)
        - 500 Internal Server Error: verification failed, rolled back
    """
    command = ProvisionTenantCommand(actor_id=actor_id, **request.model_dump())

    use_case = ProvisionTenantUseCase(uow, identity_service, roster, settings)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/provisioning-requests/{idempotency_key}",
    status_code=status.HTTP_200_OK,
    response_model=ProvisioningRequestResponse,
)
async def get_provisioning_request(
    idempotency_key: str,
    actor_id: UUID = Depends(get_current_administrator),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Provisioning Request

    Poll an attempt after a 409 instead of resubmitting it.
    """
    result = await GetProvisioningRequestUseCase(uow).execute(idempotency_key)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
