"""
Owner Credential API Routes
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import raise_for_error
from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.identity_service import IIdentityService
from src.app.services.orchestrator_settings import OrchestratorSettings
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.credentials import (
    RotateOwnerCredentialCommand,
    RotateOwnerCredentialResponse,
    RotateOwnerCredentialUseCase,
    SendOwnerSetupLinkResponse,
    SendOwnerSetupLinkUseCase,
)
from src.depends import (
    get_administrator_roster,
    get_current_administrator,
    get_identity_service,
    get_orchestrator_settings,
    get_unit_of_work,
)
from src.domain.entities import CredentialField

router = APIRouter(prefix="/admin/tenants", tags=["Credentials"])


class RotateOwnerCredentialRequest(BaseModel):
    field: CredentialField
    new_value: str = Field(..., min_length=1, max_length=255)


@router.post(
    "/{tenant_id}/owner-credentials",
    status_code=status.HTTP_200_OK,
    response_model=RotateOwnerCredentialResponse,
)
async def rotate_owner_credential(
    tenant_id: UUID,
    request: RotateOwnerCredentialRequest,
    actor_id: UUID = Depends(get_current_administrator),
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity_service: IIdentityService = Depends(get_identity_service),
    roster: AdministratorRoster = Depends(get_administrator_roster),
    settings: OrchestratorSettings = Depends(get_orchestrator_settings),
):
    """
    Rotate Owner Credential

    Changes the email or password of the tenant's owner identity. Refuses
    with 403 SAFETY_VIOLATION if the owner resolves to an administrator.

    Raises:
        - 400 Bad Request: weak password, invalid or taken email
        - 403 Forbidden: FORBIDDEN or SAFETY_VIOLATION
        - 404 Not Found: TENANT_NOT_FOUND
        - 503 Service Unavailable: identity service unavailable
    """
    command = RotateOwnerCredentialCommand(
        tenant_id=tenant_id,
        actor_id=actor_id,
        field=request.field,
        new_value=request.new_value,
    )
    use_case = RotateOwnerCredentialUseCase(uow, identity_service, roster, settings)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{tenant_id}/owner-setup-link",
    status_code=status.HTTP_200_OK,
    response_model=SendOwnerSetupLinkResponse,
)
async def send_owner_setup_link(
    tenant_id: UUID,
    actor_id: UUID = Depends(get_current_administrator),
    uow: UnitOfWork = Depends(get_unit_of_work),
    identity_service: IIdentityService = Depends(get_identity_service),
    roster: AdministratorRoster = Depends(get_administrator_roster),
    settings: OrchestratorSettings = Depends(get_orchestrator_settings),
):
    """
    Send Owner Setup Link

    Re-issues the owner's verification / password-setup email.

    Raises:
        - 403 Forbidden: FORBIDDEN or SAFETY_VIOLATION
        - 404 Not Found: TENANT_NOT_FOUND, OWNER_NOT_FOUND
        - 429 Too Many Requests: TENANT_RATE_LIMITED, ACTOR_RATE_LIMITED
    """
    use_case = SendOwnerSetupLinkUseCase(uow, identity_service, roster, settings)
    result = await use_case.execute(tenant_id, actor_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
