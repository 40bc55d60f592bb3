"""
Identity Safety Guard

Refuses any mutation whose target identity is on the administrator roster.
Every destructive or credential-changing path calls this before its first
write.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.administrator_roster import AdministratorRoster, RosterSnapshot
from src.domain.errors import AuthorizationError, SafetyViolationError

logger = logging.getLogger(__name__)


def is_administrator(identity_id: Optional[UUID], snapshot: RosterSnapshot) -> bool:
    return identity_id is not None and identity_id in snapshot


class IdentitySafetyGuard:
    def __init__(self, roster: AdministratorRoster):
        self.roster = roster

    async def is_administrator(self, identity_id: Optional[UUID]) -> bool:
        return is_administrator(identity_id, await self.roster.snapshot())

    async def ensure_not_administrator(
        self,
        identity_id: UUID,
        operation: str,
        actor_id: Optional[UUID] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """
        Raise SafetyViolationError if `identity_id` is an administrator.

        A violation is an incident, not a user error: it is logged at
        CRITICAL and nothing is written, the audit trail included.
        """
        if await self.is_administrator(identity_id):
            logger.critical(
                f"[{correlation_id}] SAFETY VIOLATION: {operation} targeted "
                f"administrator identity {identity_id} (actor={actor_id})"
            )
            raise SafetyViolationError(
                "SAFETY_VIOLATION",
                "Operation would modify a platform administrator identity",
                correlation_id=correlation_id,
            )

    async def ensure_actor_is_administrator(self, actor_id: UUID) -> None:
        if not await self.is_administrator(actor_id):
            logger.warning(f"Actor {actor_id} is not a platform administrator")
            raise AuthorizationError(
                "FORBIDDEN", "Only platform administrators may perform this action"
            )
