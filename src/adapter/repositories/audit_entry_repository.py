from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.audit_entry_repository import IAuditEntryRepository
from src.domain.entities import AuditEntry


class AuditEntryRepository(IAuditEntryRepository):
    """AuditEntry repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: AuditEntry) -> AuditEntry:
        """Create a new audit entry (immutable)"""
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def list_by_correlation_id(self, correlation_id: str) -> List[AuditEntry]:
        # id breaks ties between entries written in the same instant
        stmt = (
            select(AuditEntry)
            .where(AuditEntry.correlation_id == correlation_id)
            .order_by(AuditEntry.created_at, AuditEntry.id)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def count_since(
        self,
        action: str,
        since: datetime,
        tenant_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
    ) -> int:
        stmt = select(func.count()).select_from(AuditEntry).where(
            AuditEntry.action == action, AuditEntry.created_at >= since
        )
        if tenant_id is not None:
            stmt = stmt.where(AuditEntry.tenant_id == tenant_id)
        if actor_id is not None:
            stmt = stmt.where(AuditEntry.actor_id == actor_id)
        result = await self.session.exec(stmt)
        return result.one()
