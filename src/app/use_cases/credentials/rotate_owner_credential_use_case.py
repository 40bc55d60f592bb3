import logging
from typing import Tuple
from uuid import UUID, uuid4

from libs.result import Result, Return

from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.audit_log import REDACTED, AuditLog
from src.app.services.failure_policy import classify_failure
from src.app.services.identity_provisioner import IdentityProvisioner
from src.app.services.identity_safety_guard import IdentitySafetyGuard
from src.app.services.identity_service import IIdentityService
from src.app.services.orchestrator_settings import OrchestratorSettings
from src.app.services.owner_resolution import OwnerIdentityResolver
from src.app.services.tenant_registrar import TenantRegistrar
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.verification_coordinator import VerificationCoordinator
from src.domain.base import utcnow
from src.domain.entities import AuditOutcome, CredentialField, CredentialState, Tenant
from src.domain.errors import NotFoundError, ValidationError

from .dtos import RotateOwnerCredentialCommand, RotateOwnerCredentialResponse

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
ROTATION_ACTION = "owner_credential_rotated"
ROTATION_FAILED_ACTION = "owner_credential_rotation_failed"


class RotateOwnerCredentialUseCase:
    """
    Rotate Owner Credential Use Case

    Business Logic:
    1. Actor must be a platform administrator
    2. Resolve the tenant's owner identity (owner reference, then ownership
       link, else provision a dedicated owner)
    3. Safety guard: an administrator target aborts with zero writes
    4. Change exactly that identity's credential, addressed by id
    5. Audit the change with a redacted before/after summary
    """

    def __init__(
        self,
        uow: UnitOfWork,
        identity_service: IIdentityService,
        roster: AdministratorRoster,
        settings: OrchestratorSettings,
    ):
        self.uow = uow
        self.identity_service = identity_service
        self.guard = IdentitySafetyGuard(roster)
        self.resolver = OwnerIdentityResolver(uow)
        self.provisioner = IdentityProvisioner(uow, identity_service)
        self.registrar = TenantRegistrar(uow, None, settings.transaction_timeout_seconds)
        self.coordinator = VerificationCoordinator(
            uow, identity_service, None, settings.transaction_timeout_seconds
        )

    async def execute(
        self, command: RotateOwnerCredentialCommand
    ) -> Result[RotateOwnerCredentialResponse]:
        correlation_id = f"rotation-{uuid4()}"
        try:
            await self.guard.ensure_actor_is_administrator(command.actor_id)
            self._validate(command)

            async with self.uow:
                tenant = await self.uow.tenants.get_by_id(command.tenant_id)
            if tenant is None or tenant.deleted_at is not None:
                raise NotFoundError("TENANT_NOT_FOUND", "Tenant not found")

            identity_id, created = await self._resolve_owner(tenant, command, correlation_id)

            await self.guard.ensure_not_administrator(
                identity_id,
                "rotate_owner_credential",
                actor_id=command.actor_id,
                correlation_id=correlation_id,
            )

            if command.field == CredentialField.email:
                await self._rotate_email(tenant, identity_id, command, correlation_id, created)
            else:
                await self._rotate_password(tenant, identity_id, command, correlation_id)
        except Exception as e:
            return Return.err(classify_failure(e, correlation_id).to_error())

        return Return.ok(
            RotateOwnerCredentialResponse(
                ok=True,
                correlation_id=correlation_id,
                owner_identity_id=str(identity_id),
                owner_created=created,
            )
        )

    def _validate(self, command: RotateOwnerCredentialCommand):
        if command.field == CredentialField.password:
            if len(command.new_value) < MIN_PASSWORD_LENGTH:
                raise ValidationError(
                    "WEAK_PASSWORD",
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                )
        elif "@" not in command.new_value:
            raise ValidationError("INVALID_EMAIL", "New email is not a valid address")

    async def _resolve_owner(
        self, tenant: Tenant, command: RotateOwnerCredentialCommand, correlation_id: str
    ) -> Tuple[UUID, bool]:
        identity_id = await self.resolver.resolve(tenant)
        if identity_id is not None:
            return identity_id, False

        # Tenant never had an owner: provision one the same way ProvisionTenant does
        email = (
            command.new_value
            if command.field == CredentialField.email
            else tenant.contact_email
        )
        if not email:
            raise ValidationError(
                "OWNER_EMAIL_REQUIRED", "Tenant has no owner and no contact email"
            )
        logger.info(f"[{correlation_id}] Tenant {tenant.id} has no owner, provisioning one")

        identity = await self.provisioner.resolve_or_create_owner(
            email,
            actor_id=command.actor_id,
            correlation_id=correlation_id,
            exclude_tenant_id=tenant.id,
        )
        try:
            await self.registrar.attach_owner(
                tenant.id,
                identity.id,
                actor_id=command.actor_id,
                correlation_id=correlation_id,
            )
            await self.coordinator.verify_and_finalize(
                tenant.id,
                identity.id,
                actor_id=command.actor_id,
                correlation_id=correlation_id,
            )
        except Exception as e:
            cause = classify_failure(e, correlation_id)
            await self.coordinator.compensate(
                cause,
                correlation_id=correlation_id,
                actor_id=command.actor_id,
                identity_id=identity.id,
                tenant_id=tenant.id,
                delete_tenant=False,
            )
            raise cause

        await self.coordinator.send_setup_link(identity.id, correlation_id)
        return identity.id, True

    async def _rotate_email(
        self,
        tenant: Tenant,
        identity_id: UUID,
        command: RotateOwnerCredentialCommand,
        correlation_id: str,
        created: bool = False,
    ):
        new_email = await self.provisioner.ensure_email_available(
            command.new_value,
            exclude_identity_id=identity_id,
            exclude_tenant_id=tenant.id,
        )
        previous = tenant.contact_email
        if not created:
            # A freshly provisioned owner already carries the new email
            async with self.uow:
                identity = await self.uow.identities.get_by_id(identity_id)
            if identity is not None:
                previous = identity.email
            await self.identity_service.update_identity(identity_id, email=new_email)

        try:
            async with self.uow:
                now = utcnow()
                identity = await self.uow.identities.get_by_id(identity_id)
                if identity is not None:
                    identity.email = new_email
                    identity.updated_at = now
                    await self.uow.identities.update(identity)

                current = await self.uow.tenants.get_by_id(tenant.id)
                if current is None:
                    raise NotFoundError("TENANT_NOT_FOUND", "Tenant disappeared during rotation")
                current.contact_email = new_email
                current.updated_at = now
                await self.uow.tenants.update(current)

                await AuditLog(self.uow).record(
                    correlation_id,
                    ROTATION_ACTION,
                    AuditOutcome.credential_rotated,
                    actor_id=command.actor_id,
                    tenant_id=tenant.id,
                    identity_id=identity_id,
                    payload={
                        "field": "email",
                        "email_before": previous,
                        "email_after": new_email,
                    },
                )
                await self.uow.commit()
        except Exception:
            await self._record_failure(tenant.id, identity_id, command, correlation_id)
            raise

        logger.info(f"[{correlation_id}] Owner email rotated for tenant {tenant.id}")

    async def _rotate_password(
        self,
        tenant: Tenant,
        identity_id: UUID,
        command: RotateOwnerCredentialCommand,
        correlation_id: str,
    ):
        await self.identity_service.update_identity(identity_id, password=command.new_value)

        try:
            async with self.uow:
                identity = await self.uow.identities.get_by_id(identity_id)
                if identity is not None:
                    identity.credential_state = CredentialState.active
                    identity.updated_at = utcnow()
                    await self.uow.identities.update(identity)

                await AuditLog(self.uow).record(
                    correlation_id,
                    ROTATION_ACTION,
                    AuditOutcome.credential_rotated,
                    actor_id=command.actor_id,
                    tenant_id=tenant.id,
                    identity_id=identity_id,
                    payload={"field": "password", "before": REDACTED, "after": REDACTED},
                )
                await self.uow.commit()
        except Exception:
            await self._record_failure(tenant.id, identity_id, command, correlation_id)
            raise

        logger.info(f"[{correlation_id}] Owner password rotated for tenant {tenant.id}")

    async def _record_failure(
        self,
        tenant_id: UUID,
        identity_id: UUID,
        command: RotateOwnerCredentialCommand,
        correlation_id: str,
    ):
        """The identity service already holds the new value; keep that traceable"""
        logger.error(
            f"[{correlation_id}] {command.field.value} changed upstream for {identity_id} "
            f"but the local record failed, manual reconciliation needed"
        )
        try:
            await AuditLog(self.uow).append(
                correlation_id,
                ROTATION_FAILED_ACTION,
                AuditOutcome.credential_rotation_failed,
                actor_id=command.actor_id,
                tenant_id=tenant_id,
                identity_id=identity_id,
                payload={"field": command.field.value, "remote_applied": True},
            )
        except Exception as e:
            logger.error(f"[{correlation_id}] Could not audit failed rotation", exc_info=e)
