"""
SQL-backed administrator roster with a short in-process cache.
"""

import logging
import time
from typing import Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.services.administrator_roster import AdministratorRoster, RosterSnapshot
from src.domain.entities import (
    ADMINISTRATOR_ROLES,
    Employee,
    EmployeeStatus,
    Identity,
    IdentityKind,
)

logger = logging.getLogger(__name__)


class SqlAdministratorRoster(AdministratorRoster):
    """
    Administrators are identities of kind platform_administrator plus active
    platform staff (no tenant) holding an administrator role.

    Snapshots are cached for `cache_seconds`; a few seconds of staleness is
    acceptable for the safety guard.
    """

    def __init__(self, session_factory, cache_seconds: float = 5.0):
        self.session_factory = session_factory
        self.cache_seconds = cache_seconds
        self._cached: Optional[RosterSnapshot] = None
        self._loaded_at = 0.0

    async def snapshot(self) -> RosterSnapshot:
        now = time.monotonic()
        if self._cached is not None and now - self._loaded_at < self.cache_seconds:
            return self._cached

        async with self.session_factory() as session:
            self._cached = await self._load(session)
        self._loaded_at = now
        return self._cached

    def invalidate(self) -> None:
        self._cached = None

    async def _load(self, session: AsyncSession) -> RosterSnapshot:
        identities = await session.exec(
            select(Identity.id).where(Identity.kind == IdentityKind.platform_administrator)
        )
        staff = await session.exec(
            select(Employee.user_id).where(
                Employee.tenant_id.is_(None),
                Employee.user_id.is_not(None),
                Employee.status == EmployeeStatus.ACTIVE,
                Employee.role.in_(list(ADMINISTRATOR_ROLES)),
            )
        )
        ids = frozenset(identities.all()) | frozenset(staff.all())
        logger.debug(f"Administrator roster loaded: {len(ids)} ids")
        return RosterSnapshot(administrator_ids=ids)
