"""
Send Owner Setup Link Use Case

Re-issues the verification / password-setup link to a tenant's owner. The
administrator never sees or sets the password.
"""

import logging
from datetime import timedelta
from uuid import UUID, uuid4

from libs.result import Result, Return

from src.app.services.administrator_roster import AdministratorRoster
from src.app.services.audit_log import AuditLog
from src.app.services.failure_policy import classify_failure
from src.app.services.identity_safety_guard import IdentitySafetyGuard
from src.app.services.identity_service import IIdentityService
from src.app.services.orchestrator_settings import OrchestratorSettings
from src.app.services.owner_resolution import OwnerIdentityResolver
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditOutcome
from src.domain.errors import NotFoundError, RateLimitedError

from .dtos import SendOwnerSetupLinkResponse

logger = logging.getLogger(__name__)

SETUP_LINK_ACTION = "owner_setup_link_sent"


class SendOwnerSetupLinkUseCase:
    """
    Business Rules:
    - Actor must be a platform administrator
    - Target must not be an administrator identity
    - At most N links per tenant and M per actor inside their windows,
      counted from the audit log
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
        self.settings = settings
        self.guard = IdentitySafetyGuard(roster)
        self.resolver = OwnerIdentityResolver(uow)

    async def execute(self, tenant_id: UUID, actor_id: UUID) -> Result[SendOwnerSetupLinkResponse]:
        correlation_id = f"setup-link-{uuid4()}"
        try:
            await self.guard.ensure_actor_is_administrator(actor_id)

            async with self.uow:
                tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None or tenant.deleted_at is not None:
                raise NotFoundError("TENANT_NOT_FOUND", "Tenant not found")

            identity_id = await self.resolver.resolve(tenant)
            if identity_id is None:
                raise NotFoundError("OWNER_NOT_FOUND", "Tenant has no owner identity")

            await self.guard.ensure_not_administrator(
                identity_id,
                "send_owner_setup_link",
                actor_id=actor_id,
                correlation_id=correlation_id,
            )
            await self._check_rate_limits(tenant_id, actor_id)

            await self.identity_service.send_verification_link(identity_id)

            await AuditLog(self.uow).append(
                correlation_id,
                SETUP_LINK_ACTION,
                AuditOutcome.setup_link_sent,
                actor_id=actor_id,
                tenant_id=tenant_id,
                identity_id=identity_id,
                payload={"contact_email": tenant.contact_email},
            )
        except Exception as e:
            return Return.err(classify_failure(e, correlation_id).to_error())

        logger.info(f"[{correlation_id}] Setup link sent for tenant {tenant_id}")
        return Return.ok(SendOwnerSetupLinkResponse(sent=True, correlation_id=correlation_id))

    async def _check_rate_limits(self, tenant_id: UUID, actor_id: UUID):
        now = utcnow()
        tenant_window = timedelta(minutes=self.settings.setup_link_tenant_window_minutes)
        actor_window = timedelta(minutes=self.settings.setup_link_actor_window_minutes)

        async with self.uow:
            per_tenant = await self.uow.audit_entries.count_since(
                SETUP_LINK_ACTION, now - tenant_window, tenant_id=tenant_id
            )
            per_actor = await self.uow.audit_entries.count_since(
                SETUP_LINK_ACTION, now - actor_window, actor_id=actor_id
            )

        if per_tenant >= self.settings.setup_link_tenant_limit:
            raise RateLimitedError(
                "TENANT_RATE_LIMITED",
                "Too many setup links for this tenant, try again later",
                details={"retry_after_seconds": int(tenant_window.total_seconds())},
            )
        if per_actor >= self.settings.setup_link_actor_limit:
            raise RateLimitedError(
                "ACTOR_RATE_LIMITED",
                "Too many setup links sent, try again later",
                details={"retry_after_seconds": int(actor_window.total_seconds())},
            )
