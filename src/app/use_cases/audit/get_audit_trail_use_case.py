"""
Get Audit Trail Use Case

Returns every audit entry for one correlation id (an idempotency key or a
rotation id) in the order they were written.
"""

from typing import Any, Dict

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import NotFoundError


class GetAuditTrailUseCase:
    """
    Business Rules:
    - Results ordered oldest first (write order)
    - Payloads are returned as stored: already redacted
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, correlation_id: str) -> Result[Dict[str, Any]]:
        async with self.uow:
            entries = await self.uow.audit_entries.list_by_correlation_id(correlation_id)

        if not entries:
            return Return.err(
                NotFoundError(
                    "AUDIT_TRAIL_NOT_FOUND",
                    "No audit entries for this correlation id",
                    correlation_id=correlation_id,
                ).to_error()
            )

        events = [
            {
                "action": entry.action,
                "outcome": entry.outcome.value,
                "actor_id": str(entry.actor_id) if entry.actor_id else None,
                "tenant_id": str(entry.tenant_id) if entry.tenant_id else None,
                "identity_id": str(entry.identity_id) if entry.identity_id else None,
                "timestamp": entry.created_at.isoformat() + "Z",
                "payload": entry.payload or {},
            }
            for entry in entries
        ]
        return Return.ok({"correlation_id": correlation_id, "events": events})
