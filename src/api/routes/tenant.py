from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.error import raise_for_error
from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.tenants import SoftDeleteTenantResponse, SoftDeleteTenantUseCase
from src.depends import get_administrator_roster, get_current_administrator, get_unit_of_work

router = APIRouter(prefix="/admin/tenants", tags=["Tenant"])


@router.delete(
    "/{tenant_id}",
    status_code=status.HTTP_200_OK,
    response_model=SoftDeleteTenantResponse,
)
async def delete_tenant(
    tenant_id: UUID,
    actor_id: UUID = Depends(get_current_administrator),
    uow: UnitOfWork = Depends(get_unit_of_work),
    roster: AdministratorRoster = Depends(get_administrator_roster),
):
    """
    Soft Delete Tenant

    Sets deleted_at; the row is kept and its slug becomes free immediately.

    Raises:
        - 403 Forbidden: actor is not a platform administrator
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: ALREADY_DELETED
    """
    result = await SoftDeleteTenantUseCase(uow, roster).execute(actor_id, tenant_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
