"""
Audit Log

Append-only writer for AuditEntry rows. Payloads are redacted on the way in:
credential-like keys are replaced and emails are masked.
"""

from typing import Any, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import mask_email
from src.domain.entities import AuditEntry, AuditOutcome

REDACTED = "[REDACTED]"
SENSITIVE_KEYS = frozenset(
    {"password", "new_value", "credential", "secret", "token", "one_time_credential"}
)


def redact(value: Any, key: Optional[str] = None) -> Any:
    if key is not None:
        lowered = key.lower()
        if lowered in SENSITIVE_KEYS:
            return REDACTED
        if "email" in lowered and isinstance(value, str):
            return mask_email(value)
    if isinstance(value, dict):
        return {k: redact(v, k) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    if isinstance(value, UUID):
        return str(value)
    return value


class AuditLog:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def record(
        self,
        correlation_id: str,
        action: str,
        outcome: AuditOutcome,
        *,
        actor_id: Optional[UUID] = None,
        tenant_id: Optional[UUID] = None,
        identity_id: Optional[UUID] = None,
        payload: Optional[dict] = None,
    ) -> AuditEntry:
        """Add an entry to the caller's open transaction (caller commits)"""
        entry = AuditEntry(
            correlation_id=correlation_id,
            actor_id=actor_id,
            action=action,
            outcome=outcome,
            tenant_id=tenant_id,
            identity_id=identity_id,
            payload=redact(payload or {}),
        )
        return await self.uow.audit_entries.create(entry)

    async def append(
        self,
        correlation_id: str,
        action: str,
        outcome: AuditOutcome,
        **kwargs,
    ) -> AuditEntry:
        """Write an entry in its own transaction"""
        async with self.uow:
            entry = await self.record(correlation_id, action, outcome, **kwargs)
            await self.uow.commit()
        return entry
