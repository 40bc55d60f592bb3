"""
Verification & Rollback Coordinator

Re-reads what the registrar wrote, flips it live when it is consistent, and
otherwise undoes the saga in reverse order of creation.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from src.app.services.audit_log import AuditLog
from src.app.services.idempotency_ledger import IdempotencyLedger
from src.app.services.identity_service import IIdentityService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    AuditOutcome,
    IdentityKind,
    OwnershipLinkStatus,
    TenantStatus,
)
from src.domain.errors import ProvisioningError, VerificationError

logger = logging.getLogger(__name__)


class CompensationSkipped(Exception):
    """A step left in place because an earlier step did not complete"""


class VerificationCoordinator:
    def __init__(
        self,
        uow: UnitOfWork,
        identity_service: IIdentityService,
        ledger: Optional[IdempotencyLedger] = None,
        transaction_timeout_seconds: float = 5.0,
    ):
        self.uow = uow
        self.identity_service = identity_service
        self.ledger = ledger
        self.transaction_timeout_seconds = transaction_timeout_seconds

    async def verify_and_finalize(
        self,
        tenant_id: UUID,
        owner_identity_id: UUID,
        *,
        actor_id: UUID,
        correlation_id: str,
    ) -> None:
        """
        Confirm tenant, link and owner agree, then move the link to
        completed and the tenant to active in one transaction.

        Raises VerificationError on any mismatch; nothing is changed then.
        """
        await asyncio.wait_for(
            self._verify(tenant_id, owner_identity_id, actor_id, correlation_id),
            timeout=self.transaction_timeout_seconds,
        )

    async def _verify(
        self,
        tenant_id: UUID,
        owner_identity_id: UUID,
        actor_id: UUID,
        correlation_id: str,
    ) -> None:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            link = await self.uow.ownership_links.get_current_for_tenant(tenant_id)
            owner = await self.uow.identities.get_by_id(owner_identity_id)

            if tenant is None or tenant.deleted_at is not None:
                self._mismatch(correlation_id, "TENANT_MISSING", "Tenant row not found")
            if tenant.owner_identity_id != owner_identity_id:
                self._mismatch(correlation_id, "OWNER_MISMATCH", "Tenant owner does not match")
            if owner is None or owner.kind != IdentityKind.tenant_owner:
                self._mismatch(correlation_id, "OWNER_MISSING", "Owner identity not found")
            if link is None or link.owner_identity_id != owner_identity_id:
                self._mismatch(correlation_id, "LINK_MISMATCH", "Ownership link does not match")
            if link.status != OwnershipLinkStatus.pending:
                self._mismatch(correlation_id, "LINK_STATE", f"Ownership link is {link.status.value}")
            if tenant.status not in (TenantStatus.provisioning, TenantStatus.active):
                self._mismatch(correlation_id, "TENANT_STATE", f"Tenant is {tenant.status.value}")

            now = utcnow()
            link.status = OwnershipLinkStatus.completed
            link.updated_at = now
            await self.uow.ownership_links.update(link)

            tenant.status = TenantStatus.active
            tenant.updated_at = now
            await self.uow.tenants.update(tenant)

            await AuditLog(self.uow).record(
                correlation_id,
                "tenant_verified",
                AuditOutcome.verified,
                actor_id=actor_id,
                tenant_id=tenant_id,
                identity_id=owner_identity_id,
                payload={"link_id": link.id},
            )
            await self.uow.commit()

        logger.info(f"[{correlation_id}] Tenant {tenant_id} verified and active")

    async def is_finalized(self, tenant_id: UUID, owner_identity_id: UUID) -> bool:
        """True when an earlier attempt already verified this tenant"""
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            link = await self.uow.ownership_links.get_current_for_tenant(tenant_id)
        return (
            tenant is not None
            and tenant.deleted_at is None
            and tenant.status == TenantStatus.active
            and tenant.owner_identity_id == owner_identity_id
            and link is not None
            and link.owner_identity_id == owner_identity_id
            and link.status == OwnershipLinkStatus.completed
        )

    def _mismatch(self, correlation_id: str, code: str, message: str):
        logger.error(f"[{correlation_id}] Verification failed: {code}")
        raise VerificationError(code, message, correlation_id=correlation_id)

    async def send_setup_link(self, identity_id: UUID, correlation_id: str) -> bool:
        """Best effort: a failed email does not undo a verified tenant"""
        try:
            await self.identity_service.send_verification_link(identity_id)
        except ProvisioningError as e:
            logger.warning(f"[{correlation_id}] Setup link not sent to {identity_id}: {e.code}")
            return False
        return True

    async def compensate(
        self,
        cause: ProvisioningError,
        *,
        correlation_id: str,
        actor_id: UUID,
        identity_id: Optional[UUID] = None,
        tenant_id: Optional[UUID] = None,
        delete_tenant: bool = True,
        idempotency_key: Optional[str] = None,
    ) -> ProvisioningError:
        """
        Undo the saga in reverse order: ownership link, tenant, identity.

        Every step is attempted even if an earlier one fails, and every step
        leaves an audit entry. The identity is only deleted once the tenant
        no longer references it. With delete_tenant=False the tenant existed
        before the saga and only loses its owner reference. Returns `cause`
        so callers can surface the original failure.
        """
        audit = AuditLog(self.uow)
        await audit.append(
            correlation_id,
            "verification_failed",
            AuditOutcome.verification_failed,
            actor_id=actor_id,
            tenant_id=tenant_id,
            identity_id=identity_id,
            payload={"code": cause.code, "retryable": cause.retryable},
        )

        tenant_released = True
        if tenant_id is not None:
            await self._step(
                "ownership_link",
                self._fail_link(tenant_id, identity_id),
                correlation_id, actor_id, tenant_id, identity_id,
            )
            tenant_released = await self._step(
                "tenant",
                self._release_tenant(tenant_id, identity_id, delete_tenant),
                correlation_id, actor_id, tenant_id, identity_id,
            )

        identity_deleted = True
        if identity_id is not None:
            if tenant_released:
                identity_deleted = await self._step(
                    "identity",
                    self._delete_identity(identity_id),
                    correlation_id, actor_id, tenant_id, identity_id,
                )
            else:
                # The tenant may still reference the identity
                identity_deleted = await self._step(
                    "identity",
                    self._keep_identity(identity_id),
                    correlation_id, actor_id, tenant_id, identity_id,
                )

        if idempotency_key is not None and self.ledger is not None:
            # Whatever survived stays on the request so a retry reuses it
            await self.ledger.fail(
                idempotency_key,
                cause,
                retryable=cause.retryable,
                actor_id=actor_id,
                clear_identity=identity_deleted,
                clear_tenant=tenant_released,
            )
        return cause

    async def _step(self, step, action, correlation_id, actor_id, tenant_id, identity_id) -> bool:
        try:
            await action
        except Exception as e:
            logger.error(
                f"[{correlation_id}] Compensation step {step} failed, manual reconciliation needed",
                exc_info=e,
            )
            outcome, payload = AuditOutcome.compensation_failed, {"step": step, "error": type(e).__name__}
        else:
            outcome, payload = AuditOutcome.rolled_back, {"step": step}

        await AuditLog(self.uow).append(
            correlation_id,
            "compensation",
            outcome,
            actor_id=actor_id,
            tenant_id=tenant_id,
            identity_id=identity_id,
            payload=payload,
        )
        return outcome == AuditOutcome.rolled_back

    async def _fail_link(self, tenant_id: UUID, identity_id: Optional[UUID]):
        async with self.uow:
            link = await self.uow.ownership_links.get_current_for_tenant(tenant_id)
            if link is None or (identity_id and link.owner_identity_id != identity_id):
                return
            link.status = OwnershipLinkStatus.failed
            link.updated_at = utcnow()
            await self.uow.ownership_links.update(link)
            await self.uow.commit()

    async def _release_tenant(
        self, tenant_id: UUID, identity_id: Optional[UUID], delete_tenant: bool
    ):
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                return
            now = utcnow()
            if tenant.owner_identity_id == identity_id:
                tenant.owner_identity_id = None
            if delete_tenant and tenant.deleted_at is None:
                tenant.deleted_at = now
            tenant.updated_at = now
            await self.uow.tenants.update(tenant)
            await self.uow.commit()

    async def _delete_identity(self, identity_id: UUID):
        await self.identity_service.delete_identity(identity_id)
        async with self.uow:
            await self.uow.identities.delete(identity_id)
            await self.uow.commit()

    async def _keep_identity(self, identity_id: UUID):
        raise CompensationSkipped(f"Identity {identity_id} still referenced by its tenant")
