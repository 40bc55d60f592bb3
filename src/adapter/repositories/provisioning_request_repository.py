from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.provisioning_request_repository import (
    IProvisioningRequestRepository,
)
from src.domain.base import utcnow
from src.domain.entities import ProvisioningRequest, ProvisioningStatus


class ProvisioningRequestRepository(IProvisioningRequestRepository):
    """ProvisioningRequest repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_key(self, idempotency_key: str) -> Optional[ProvisioningRequest]:
        """Get request by idempotency key"""
        stmt = (
            select(ProvisioningRequest)
            .where(ProvisioningRequest.idempotency_key == idempotency_key)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def insert_if_absent(self, request: ProvisioningRequest) -> bool:
        """Insert unless the key exists; the unique index decides"""
        self.session.add(request)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            return False
        await self.session.refresh(request)
        return True

    async def transition(
        self,
        idempotency_key: str,
        from_statuses: Iterable[ProvisioningStatus],
        to_status: ProvisioningStatus,
        updated_before: Optional[datetime] = None,
    ) -> bool:
        """Compare-and-set: a single conditional UPDATE"""
        stmt = (
            update(ProvisioningRequest)
            .where(ProvisioningRequest.idempotency_key == idempotency_key)
            .where(ProvisioningRequest.status.in_(list(from_statuses)))
            .values(status=to_status, updated_at=utcnow(), completed_at=None)
        )
        if updated_before is not None:
            stmt = stmt.where(ProvisioningRequest.updated_at < updated_before)
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def update(self, request: ProvisioningRequest) -> ProvisioningRequest:
        """Update existing request"""
        self.session.add(request)
        await self.session.flush()
        await self.session.refresh(request)
        return request
