"""
Use Case: Soft Delete Tenant

Marks a tenant deleted without removing the row. The slug is released as
soon as deleted_at is set.
"""

import logging
from uuid import UUID, uuid4

from pydantic import BaseModel

from libs.result import Result, Return
from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.audit_log import AuditLog
from src.app.services.identity_safety_guard import IdentitySafetyGuard
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditOutcome, TenantStatus
from src.domain.errors import ConflictError, NotFoundError, ProvisioningError

logger = logging.getLogger(__name__)


class SoftDeleteTenantResponse(BaseModel):
    """Response DTO for SoftDeleteTenantUseCase"""

    status: str
    tenant_id: str
    slug: str
    deleted_at: str
    correlation_id: str


class SoftDeleteTenantUseCase:
    """
    Soft delete a tenant (platform administrators only).

    Business Logic:
    1. Validate actor is an administrator
    2. Tenant must exist and not already be deleted
    3. Set status suspended and deleted_at
    4. Create audit entry
    """

    def __init__(self, uow: UnitOfWork, roster: AdministratorRoster):
        self.uow = uow
        self.guard = IdentitySafetyGuard(roster)

    async def execute(self, actor_id: UUID, tenant_id: UUID) -> Result[SoftDeleteTenantResponse]:
        """
        Errors:
            - FORBIDDEN: actor is not an administrator
            - TENANT_NOT_FOUND: tenant does not exist
            - ALREADY_DELETED: tenant is already soft-deleted
        """
        correlation_id = f"tenant-delete-{uuid4()}"
        try:
            await self.guard.ensure_actor_is_administrator(actor_id)
        except ProvisioningError as e:
            return Return.err(e.with_correlation(correlation_id).to_error())

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                return Return.err(
                    NotFoundError(
                        "TENANT_NOT_FOUND", "Tenant not found", correlation_id=correlation_id
                    ).to_error()
                )
            if tenant.deleted_at is not None:
                return Return.err(
                    ConflictError(
                        "ALREADY_DELETED",
                        "Tenant is already deleted",
                        correlation_id=correlation_id,
                    ).to_error()
                )

            now = utcnow()
            tenant.status = TenantStatus.suspended
            tenant.deleted_at = now
            tenant.updated_at = now
            await self.uow.tenants.update(tenant)

            await AuditLog(self.uow).record(
                correlation_id,
                "tenant_deleted",
                AuditOutcome.tenant_deleted,
                actor_id=actor_id,
                tenant_id=tenant_id,
                identity_id=tenant.owner_identity_id,
                payload={"slug": tenant.slug, "name": tenant.name},
            )
            await self.uow.commit()

        logger.info(f"[{correlation_id}] Tenant {tenant_id} ({tenant.slug}) soft-deleted")
        return Return.ok(
            SoftDeleteTenantResponse(
                status="deleted",
                tenant_id=str(tenant_id),
                slug=tenant.slug,
                deleted_at=now.isoformat() + "Z",
                correlation_id=correlation_id,
            )
        )
