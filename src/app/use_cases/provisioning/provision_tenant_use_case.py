import logging
from datetime import timedelta

from libs.result import Result, Return

from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.failure_policy import classify_failure
from src.app.services.idempotency_ledger import BeginStatus, IdempotencyLedger
from src.app.services.identity_provisioner import IdentityProvisioner
from src.app.services.identity_safety_guard import IdentitySafetyGuard
from src.app.services.identity_service import IIdentityService
from src.app.services.orchestrator_settings import OrchestratorSettings
from src.app.services.tenant_registrar import TenantRegistrar
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.verification_coordinator import VerificationCoordinator
from src.domain.base import normalize_email, utcnow
from src.domain.entities import ProvisioningRequest, ProvisioningStatus
from src.domain.errors import ConflictError, ProvisioningError, ValidationError
from src.domain.slug import normalize_slug

from .dtos import ProvisionTenantCommand, ProvisionTenantResponse

logger = logging.getLogger(__name__)


class ProvisionTenantUseCase:
    """
    Provision Tenant Use Case

    Command/Response Pattern:
    - Input: ProvisionTenantCommand
    - Output: Result[ProvisionTenantResponse]

    Business Logic:
    1. Actor must be a platform administrator
    2. Completed key -> cached result, nothing re-executes
    3. Validate slug and owner email before any write
    4. Claim the key in the idempotency ledger
    5. Create the owner identity (or reuse the one a previous attempt made)
    6. Insert Tenant + OwnershipLink in one transaction
    7. Verify and flip live; on failure compensate in reverse order
    8. Send the owner setup link, complete the ledger entry

    The returned response never contains a credential.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        identity_service: IIdentityService,
        roster: AdministratorRoster,
        settings: OrchestratorSettings,
    ):
        self.uow = uow
        self.settings = settings
        self.guard = IdentitySafetyGuard(roster)
        self.ledger = IdempotencyLedger(uow, settings.processing_lease_seconds)
        self.provisioner = IdentityProvisioner(uow, identity_service, self.ledger)
        self.registrar = TenantRegistrar(
            uow, self.ledger, settings.transaction_timeout_seconds
        )
        self.coordinator = VerificationCoordinator(
            uow, identity_service, self.ledger, settings.transaction_timeout_seconds
        )

    async def execute(self, command: ProvisionTenantCommand) -> Result[ProvisionTenantResponse]:
        key = command.idempotency_key

        try:
            await self.guard.ensure_actor_is_administrator(command.actor_id)

            existing = await self.ledger.lookup(key)
            if existing is not None:
                if existing.status == ProvisioningStatus.completed:
                    return Return.ok(ProvisionTenantResponse(**existing.result))
                self._ensure_same_payload(existing, command)
                self._ensure_not_in_flight(existing)

            # Pre-flight: nothing below this point runs on invalid input
            name = command.tenant_name.strip()
            if not name:
                raise ValidationError("INVALID_NAME", "Tenant name is required")
            slug = await self.registrar.ensure_slug_available(
                command.tenant_slug,
                exclude_tenant_id=existing.tenant_id if existing else None,
            )
            email = await self.provisioner.ensure_email_available(
                command.owner_email,
                exclude_identity_id=existing.owner_identity_id if existing else None,
                exclude_tenant_id=existing.tenant_id if existing else None,
            )

            outcome = await self.ledger.begin(
                key,
                command.actor_id,
                slug,
                email,
                command.model_dump(mode="json", exclude={"idempotency_key", "actor_id"}),
            )
            if outcome.status == BeginStatus.cached_result:
                return Return.ok(ProvisionTenantResponse(**outcome.result))
            if outcome.status == BeginStatus.in_flight:
                raise ConflictError(
                    "REQUEST_IN_FLIGHT",
                    "A provisioning attempt with this key is already running",
                )
        except ProvisioningError as e:
            return Return.err(e.with_correlation(key).to_error())

        await self.ledger.start(key)
        return await self._run_saga(command, outcome.request, name, slug, email)

    async def _run_saga(
        self,
        command: ProvisionTenantCommand,
        request: ProvisioningRequest,
        name: str,
        slug: str,
        email: str,
    ) -> Result[ProvisionTenantResponse]:
        key = command.idempotency_key
        actor_id = command.actor_id
        identity_id = request.owner_identity_id
        tenant_id = request.tenant_id

        # Step 1: identity. Nothing local exists yet, so a failure here
        # needs no compensation.
        if identity_id is None:
            try:
                identity = await self.provisioner.resolve_or_create_owner(
                    email, actor_id=actor_id, correlation_id=key, request=request
                )
                identity_id = identity.id
            except Exception as e:
                cause = classify_failure(e, key)
                await self.ledger.fail(key, cause, retryable=cause.retryable, actor_id=actor_id)
                return Return.err(cause.to_error())
        else:
            logger.info(f"[{key}] Resuming with identity {identity_id}")

        # Step 2 + 3: tenant/link transaction, then verification
        resumed_tenant = tenant_id is not None
        try:
            if tenant_id is None:
                tenant = await self.registrar.register_tenant(
                    name,
                    slug,
                    email,
                    identity_id,
                    actor_id=actor_id,
                    correlation_id=key,
                    profile=command.profile(),
                    request=request,
                )
                tenant_id = tenant.id
            if not await self.coordinator.is_finalized(tenant_id, identity_id):
                if resumed_tenant:
                    await self.registrar.relink_owner(
                        tenant_id, identity_id, actor_id=actor_id, correlation_id=key
                    )
                await self.coordinator.verify_and_finalize(
                    tenant_id, identity_id, actor_id=actor_id, correlation_id=key
                )
        except Exception as e:
            cause = classify_failure(e, key)
            if tenant_id is None:
                # A timeout can land after the commit; trust the ledger
                progress = await self.ledger.lookup(key)
                tenant_id = progress.tenant_id if progress else None
            await self.coordinator.compensate(
                cause,
                correlation_id=key,
                actor_id=actor_id,
                identity_id=identity_id,
                tenant_id=tenant_id,
                idempotency_key=key,
            )
            return Return.err(cause.to_error())

        setup_link_sent = await self.coordinator.send_setup_link(identity_id, key)
        response = ProvisionTenantResponse(
            tenant_id=str(tenant_id),
            owner_identity_id=str(identity_id),
            setup_link_sent=setup_link_sent,
        )

        try:
            await self.ledger.complete(key, response.model_dump(), actor_id=actor_id)
        except Exception as e:
            # Tenant is live; the request resumes once its lease expires
            cause = classify_failure(e, key)
            return Return.err(cause.to_error())

        logger.info(f"[{key}] Tenant {tenant_id} provisioned")
        return Return.ok(response)

    def _ensure_same_payload(self, existing: ProvisioningRequest, command: ProvisionTenantCommand):
        if (
            existing.tenant_slug != normalize_slug(command.tenant_slug)
            or existing.owner_email != normalize_email(command.owner_email)
        ):
            raise ConflictError(
                "IDEMPOTENCY_KEY_REUSED",
                "Idempotency key was already used for a different tenant",
            )

    def _ensure_not_in_flight(self, existing: ProvisioningRequest):
        lease = timedelta(seconds=self.settings.processing_lease_seconds)
        if existing.status in (ProvisioningStatus.pending, ProvisioningStatus.processing):
            if existing.updated_at > utcnow() - lease:
                raise ConflictError(
                    "REQUEST_IN_FLIGHT",
                    "A provisioning attempt with this key is already running",
                )
