"""
Get Provisioning Request Use Case

Lets a caller that received a ConflictError poll the attempt instead of
resubmitting it.
"""

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import NotFoundError

from .dtos import ProvisioningRequestResponse


class GetProvisioningRequestUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, idempotency_key: str) -> Result[ProvisioningRequestResponse]:
        async with self.uow:
            request = await self.uow.provisioning_requests.get_by_key(idempotency_key)

        if request is None:
            return Return.err(
                NotFoundError(
                    "REQUEST_NOT_FOUND",
                    "No provisioning request for this idempotency key",
                    correlation_id=idempotency_key,
                ).to_error()
            )

        return Return.ok(
            ProvisioningRequestResponse(
                idempotency_key=request.idempotency_key,
                status=request.status.value,
                tenant_slug=request.tenant_slug,
                tenant_id=str(request.tenant_id) if request.tenant_id else None,
                owner_identity_id=(
                    str(request.owner_identity_id) if request.owner_identity_id else None
                ),
                result=request.result,
                error_code=request.error_code,
                error_message=request.error_message,
                retryable=request.retryable,
                created_at=request.created_at.isoformat() + "Z",
                completed_at=(
                    request.completed_at.isoformat() + "Z" if request.completed_at else None
                ),
            )
        )
