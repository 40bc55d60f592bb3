"""
Idempotency Ledger

Durable record of provisioning attempts keyed by the caller's idempotency
key. The unique index on that key is the only concurrency gate: there are
no locks anywhere else in the orchestrator.
"""

import logging
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from src.app.services.audit_log import AuditLog
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditOutcome, ProvisioningRequest, ProvisioningStatus
from src.domain.errors import ProvisioningError

logger = logging.getLogger(__name__)

IN_FLIGHT_STATUSES = (ProvisioningStatus.pending, ProvisioningStatus.processing)


class BeginStatus(str, Enum):
    fresh = "fresh"
    in_flight = "in_flight"
    cached_result = "cached_result"


class BeginOutcome:
    """What `begin` decided for a submission"""

    def __init__(self, status: BeginStatus, request: ProvisioningRequest, resumed: bool = False):
        self.status = status
        self.request = request
        self.resumed = resumed

    @property
    def result(self) -> Optional[Dict[str, Any]]:
        return self.request.result


class IdempotencyLedger:
    def __init__(self, uow: UnitOfWork, processing_lease_seconds: int = 300):
        self.uow = uow
        self.processing_lease = timedelta(seconds=processing_lease_seconds)

    async def lookup(self, idempotency_key: str) -> Optional[ProvisioningRequest]:
        async with self.uow:
            return await self.uow.provisioning_requests.get_by_key(idempotency_key)

    async def begin(
        self,
        idempotency_key: str,
        actor_id: UUID,
        tenant_slug: str,
        owner_email: str,
        payload: Dict[str, Any],
    ) -> BeginOutcome:
        """
        Claim an idempotency key.

        - new key: inserted as pending -> fresh
        - completed: cached_result, nothing re-executes
        - pending/processing: in_flight, unless the lease has expired, in
          which case the attempt is taken over and resumed -> fresh
        - failed: moved back to processing -> fresh
        """
        audit = AuditLog(self.uow)
        async with self.uow:
            request = ProvisioningRequest(
                idempotency_key=idempotency_key,
                actor_id=actor_id,
                tenant_slug=tenant_slug,
                owner_email=owner_email,
                payload=payload,
                status=ProvisioningStatus.pending,
            )
            if await self.uow.provisioning_requests.insert_if_absent(request):
                await audit.record(
                    idempotency_key,
                    "provisioning_requested",
                    AuditOutcome.initiated,
                    actor_id=actor_id,
                    payload={"tenant_slug": tenant_slug, "owner_email": owner_email},
                )
                await self.uow.commit()
                return BeginOutcome(BeginStatus.fresh, request)

            existing = await self.uow.provisioning_requests.get_by_key(idempotency_key)

            if existing.status == ProvisioningStatus.completed:
                logger.info(f"[{idempotency_key}] Replay of completed request")
                return BeginOutcome(BeginStatus.cached_result, existing)

            if existing.status == ProvisioningStatus.failed:
                moved = await self.uow.provisioning_requests.transition(
                    idempotency_key,
                    [ProvisioningStatus.failed],
                    ProvisioningStatus.processing,
                )
                action = "provisioning_retried"
            else:
                moved = await self.uow.provisioning_requests.transition(
                    idempotency_key,
                    IN_FLIGHT_STATUSES,
                    ProvisioningStatus.processing,
                    updated_before=utcnow() - self.processing_lease,
                )
                action = "provisioning_resumed"

            if not moved:
                return BeginOutcome(BeginStatus.in_flight, existing)

            await audit.record(
                idempotency_key,
                action,
                AuditOutcome.initiated,
                actor_id=actor_id,
                payload={"tenant_slug": tenant_slug, "owner_email": owner_email},
            )
            await self.uow.commit()
            logger.info(f"[{idempotency_key}] {action}")

        return BeginOutcome(
            BeginStatus.fresh, await self.lookup(idempotency_key), resumed=True
        )

    async def start(self, idempotency_key: str) -> None:
        """pending -> processing once execution begins"""
        async with self.uow:
            if await self.uow.provisioning_requests.transition(
                idempotency_key,
                [ProvisioningStatus.pending],
                ProvisioningStatus.processing,
            ):
                await self.uow.commit()

    async def note_identity(self, request: ProvisioningRequest, identity_id: UUID) -> None:
        """Persist the created identity id. Joins the caller's transaction."""
        request.owner_identity_id = identity_id
        request.updated_at = utcnow()
        await self.uow.provisioning_requests.update(request)

    async def note_tenant(self, request: ProvisioningRequest, tenant_id: UUID) -> None:
        """Persist the registered tenant id. Joins the caller's transaction."""
        request.tenant_id = tenant_id
        request.updated_at = utcnow()
        await self.uow.provisioning_requests.update(request)

    async def complete(
        self, idempotency_key: str, result: Dict[str, Any], actor_id: Optional[UUID] = None
    ) -> None:
        async with self.uow:
            request = await self.uow.provisioning_requests.get_by_key(idempotency_key)
            now = utcnow()
            request.status = ProvisioningStatus.completed
            request.result = result
            request.error_code = None
            request.error_message = None
            request.retryable = None
            request.updated_at = now
            request.completed_at = now
            await self.uow.provisioning_requests.update(request)

            await AuditLog(self.uow).record(
                idempotency_key,
                "provisioning_completed",
                AuditOutcome.completed,
                actor_id=actor_id,
                tenant_id=request.tenant_id,
                identity_id=request.owner_identity_id,
                payload=result,
            )
            await self.uow.commit()

    async def fail(
        self,
        idempotency_key: str,
        error: ProvisioningError,
        retryable: bool,
        actor_id: Optional[UUID] = None,
        clear_identity: bool = False,
        clear_tenant: bool = False,
    ) -> None:
        """
        Mark the attempt failed. Progress ids are cleared only for the steps
        that were compensated; a retry resumes from the ones that remain.
        """
        async with self.uow:
            request = await self.uow.provisioning_requests.get_by_key(idempotency_key)
            if request is None:
                return
            now = utcnow()
            request.status = ProvisioningStatus.failed
            request.error_code = error.code
            request.error_message = error.message
            request.retryable = retryable
            request.updated_at = now
            request.completed_at = now
            if clear_identity:
                request.owner_identity_id = None
            if clear_tenant:
                request.tenant_id = None
            await self.uow.provisioning_requests.update(request)

            await AuditLog(self.uow).record(
                idempotency_key,
                "provisioning_failed",
                AuditOutcome.failed,
                actor_id=actor_id,
                payload={"code": error.code, "retryable": retryable},
            )
            await self.uow.commit()
        logger.warning(
            f"[{idempotency_key}] Provisioning failed: {error.code} (retryable={retryable})"
        )
