"""
Identity Provisioner

Creates the owner account at the external identity service and mirrors it
locally. The identity service assigns the id; nothing downstream ever sees a
locally generated placeholder.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.audit_log import AuditLog
from src.app.services.idempotency_ledger import IdempotencyLedger
from src.app.services.identity_service import IIdentityService, IdentityRecord
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import mask_email, normalize_email
from src.domain.entities import (
    AuditOutcome,
    CredentialState,
    Identity,
    IdentityKind,
    ProvisioningRequest,
)
from src.domain.errors import ProvisioningError, ValidationError

logger = logging.getLogger(__name__)


class IdentityProvisioner:
    def __init__(
        self,
        uow: UnitOfWork,
        identity_service: IIdentityService,
        ledger: Optional[IdempotencyLedger] = None,
    ):
        self.uow = uow
        self.identity_service = identity_service
        self.ledger = ledger

    async def ensure_email_available(
        self,
        email: str,
        exclude_identity_id: Optional[UUID] = None,
        exclude_tenant_id: Optional[UUID] = None,
    ) -> str:
        """
        Cross-entity email uniqueness check.

        The email must not belong to any identity, any non-deleted tenant's
        contact address or any staff record. Returns the normalized email;
        raises ValidationError naming the table that holds the conflict.
        """
        email = normalize_email(email)
        if "@" not in email:
            raise ValidationError("INVALID_EMAIL", "Owner email is not a valid address")

        async with self.uow:
            identity = await self.uow.identities.get_by_email(email)
            if identity and identity.id != exclude_identity_id:
                self._conflict(email, "identities")

            tenant = await self.uow.tenants.get_active_by_contact_email(email)
            if tenant and tenant.id != exclude_tenant_id:
                self._conflict(email, "tenants")

            employee = await self.uow.employees.get_by_email(email)
            if employee and (exclude_identity_id is None or employee.user_id != exclude_identity_id):
                self._conflict(email, "employees")

        return email

    def _conflict(self, email: str, table: str):
        logger.warning(f"Email {mask_email(email)} already in use in {table}")
        raise ValidationError(
            "EMAIL_IN_USE",
            f"Email is already registered ({table})",
            details={"table": table},
        )

    async def resolve_or_create_owner(
        self,
        email: str,
        *,
        actor_id: UUID,
        correlation_id: str,
        request: Optional[ProvisioningRequest] = None,
        exclude_tenant_id: Optional[UUID] = None,
    ) -> Identity:
        """
        Create a dedicated tenant_owner identity for `email`.

        The account is created unverified: no password is chosen or seen
        here, the owner sets one through the verification link. The new id
        is written to the provisioning request in the same transaction as
        the local mirror so a retry can reuse it.
        """
        email = await self.ensure_email_available(email, exclude_tenant_id=exclude_tenant_id)

        record = await self.identity_service.create_identity(email, IdentityKind.tenant_owner)
        logger.info(f"[{correlation_id}] Identity {record.id} created for {mask_email(email)}")

        try:
            return await self._mirror(record, actor_id, correlation_id, request)
        except Exception:
            # The local transaction is gone; do not leave the account orphaned
            logger.error(f"[{correlation_id}] Could not mirror identity {record.id}, deleting it")
            try:
                await self.identity_service.delete_identity(record.id)
            except ProvisioningError as cleanup_error:
                logger.error(
                    f"[{correlation_id}] Orphaned identity {record.id}: {cleanup_error.code}"
                )
            raise

    async def _mirror(
        self,
        record: IdentityRecord,
        actor_id: UUID,
        correlation_id: str,
        request: Optional[ProvisioningRequest],
    ) -> Identity:
        async with self.uow:
            identity = await self.uow.identities.create(
                Identity(
                    id=record.id,
                    email=normalize_email(record.email),
                    kind=IdentityKind.tenant_owner,
                    credential_state=CredentialState.unverified,
                )
            )
            if request is not None and self.ledger is not None:
                await self.ledger.note_identity(request, identity.id)

            await AuditLog(self.uow).record(
                correlation_id,
                "identity_created",
                AuditOutcome.identity_created,
                actor_id=actor_id,
                identity_id=identity.id,
                payload={"email": identity.email, "kind": identity.kind.value},
            )
            await self.uow.commit()
            return identity
