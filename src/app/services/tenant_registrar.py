"""
Atomic Tenant Registrar

Writes the tenant row and its ownership link in one relational transaction,
both pointing at an identity that already exists.
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from src.app.services.audit_log import AuditLog
from src.app.services.idempotency_ledger import IdempotencyLedger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import normalize_email, utcnow
from src.domain.entities import (
    AuditOutcome,
    IdentityKind,
    OwnershipLink,
    OwnershipLinkStatus,
    ProvisioningRequest,
    Tenant,
    TenantStatus,
)
from src.domain.errors import ValidationError, VerificationError
from src.domain.slug import validate_slug

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("timezone", "currency", "description", "phone", "website", "address")


class TenantRegistrar:
    def __init__(
        self,
        uow: UnitOfWork,
        ledger: Optional[IdempotencyLedger] = None,
        transaction_timeout_seconds: float = 5.0,
    ):
        self.uow = uow
        self.ledger = ledger
        self.transaction_timeout_seconds = transaction_timeout_seconds

    async def ensure_slug_available(
        self, slug: str, exclude_tenant_id: Optional[UUID] = None
    ) -> str:
        """
        Reserved-word and uniqueness check. Soft-deleted tenants do not
        hold their slug.
        """
        slug = validate_slug(slug)
        async with self.uow:
            holder = await self.uow.tenants.get_active_by_slug(slug)
        if holder and holder.id != exclude_tenant_id:
            raise ValidationError("SLUG_TAKEN", f'Slug "{slug}" is already in use')
        return slug

    async def register_tenant(
        self,
        name: str,
        slug: str,
        contact_email: str,
        owner_identity_id: UUID,
        *,
        actor_id: UUID,
        correlation_id: str,
        profile: Optional[Dict[str, Any]] = None,
        request: Optional[ProvisioningRequest] = None,
    ) -> Tenant:
        """
        Insert Tenant (provisioning) and OwnershipLink (pending) atomically.

        Raises VerificationError if the owner is not a real tenant_owner
        identity, TimeoutError if the transaction exceeds its bound. On any
        failure nothing is persisted.
        """
        return await asyncio.wait_for(
            self._register(
                name,
                slug,
                contact_email,
                owner_identity_id,
                actor_id,
                correlation_id,
                profile or {},
                request,
            ),
            timeout=self.transaction_timeout_seconds,
        )

    async def _register(
        self,
        name: str,
        slug: str,
        contact_email: str,
        owner_identity_id: UUID,
        actor_id: UUID,
        correlation_id: str,
        profile: Dict[str, Any],
        request: Optional[ProvisioningRequest],
    ) -> Tenant:
        async with self.uow:
            await self._ensure_owner(owner_identity_id)

            tenant = Tenant(
                name=name,
                slug=slug,
                contact_email=normalize_email(contact_email),
                owner_identity_id=owner_identity_id,
                status=TenantStatus.provisioning,
                **{k: v for k, v in profile.items() if k in PROFILE_FIELDS and v is not None},
            )
            tenant = await self.uow.tenants.create(tenant)

            link = await self.uow.ownership_links.create(
                OwnershipLink(
                    tenant_id=tenant.id,
                    owner_identity_id=owner_identity_id,
                    status=OwnershipLinkStatus.pending,
                    granted_by=actor_id,
                )
            )

            if request is not None and self.ledger is not None:
                await self.ledger.note_tenant(request, tenant.id)

            await AuditLog(self.uow).record(
                correlation_id,
                "tenant_created",
                AuditOutcome.tenant_created,
                actor_id=actor_id,
                tenant_id=tenant.id,
                identity_id=owner_identity_id,
                payload={"slug": tenant.slug, "name": tenant.name, "link_id": link.id},
            )
            await self.uow.commit()

        logger.info(f"[{correlation_id}] Tenant {tenant.id} ({slug}) registered")
        return tenant

    async def attach_owner(
        self,
        tenant_id: UUID,
        owner_identity_id: UUID,
        *,
        actor_id: UUID,
        correlation_id: str,
    ) -> OwnershipLink:
        """
        Point an existing tenant that has no owner at a freshly created one.
        Same single-transaction guarantee as register_tenant.
        """
        return await asyncio.wait_for(
            self._attach(tenant_id, owner_identity_id, actor_id, correlation_id),
            timeout=self.transaction_timeout_seconds,
        )

    async def _attach(
        self,
        tenant_id: UUID,
        owner_identity_id: UUID,
        actor_id: UUID,
        correlation_id: str,
    ) -> OwnershipLink:
        async with self.uow:
            await self._ensure_owner(owner_identity_id)

            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None or tenant.deleted_at is not None:
                raise VerificationError(
                    "TENANT_NOT_FOUND", "Tenant disappeared while attaching owner", retryable=False
                )

            tenant.owner_identity_id = owner_identity_id
            tenant.updated_at = utcnow()
            await self.uow.tenants.update(tenant)

            link = await self.uow.ownership_links.create(
                OwnershipLink(
                    tenant_id=tenant.id,
                    owner_identity_id=owner_identity_id,
                    status=OwnershipLinkStatus.pending,
                    granted_by=actor_id,
                )
            )

            await AuditLog(self.uow).record(
                correlation_id,
                "owner_attached",
                AuditOutcome.owner_attached,
                actor_id=actor_id,
                tenant_id=tenant.id,
                identity_id=owner_identity_id,
                payload={"link_id": link.id},
            )
            await self.uow.commit()

        logger.info(f"[{correlation_id}] Owner {owner_identity_id} attached to tenant {tenant_id}")
        return link

    async def relink_owner(
        self,
        tenant_id: UUID,
        owner_identity_id: UUID,
        *,
        actor_id: UUID,
        correlation_id: str,
    ) -> bool:
        """
        Resume an earlier attempt's tenant: when its link was failed by
        compensation, attach the owner again. Returns True if a link was written.
        """
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            link = await self.uow.ownership_links.get_current_for_tenant(tenant_id)
        if (
            tenant is not None
            and tenant.owner_identity_id == owner_identity_id
            and link is not None
            and link.owner_identity_id == owner_identity_id
            and link.status == OwnershipLinkStatus.pending
        ):
            return False

        logger.info(f"[{correlation_id}] Re-linking owner {owner_identity_id} to tenant {tenant_id}")
        await self.attach_owner(
            tenant_id, owner_identity_id, actor_id=actor_id, correlation_id=correlation_id
        )
        return True

    async def _ensure_owner(self, owner_identity_id: UUID):
        owner = await self.uow.identities.get_by_id(owner_identity_id)
        if owner is None or owner.kind != IdentityKind.tenant_owner:
            raise VerificationError(
                "OWNER_NOT_FOUND",
                "Owner reference does not resolve to a tenant owner identity",
                retryable=False,
            )
