from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.ownership_link_repository import IOwnershipLinkRepository
from src.domain.entities import OwnershipLink, OwnershipLinkStatus


class OwnershipLinkRepository(IOwnershipLinkRepository):
    """OwnershipLink repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, link_id: UUID) -> Optional[OwnershipLink]:
        stmt = (
            select(OwnershipLink)
            .where(OwnershipLink.id == link_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_current_for_tenant(self, tenant_id: UUID) -> Optional[OwnershipLink]:
        stmt = (
            select(OwnershipLink)
            .where(
                OwnershipLink.tenant_id == tenant_id,
                OwnershipLink.status != OwnershipLinkStatus.failed,
            )
            .order_by(OwnershipLink.created_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, link: OwnershipLink) -> OwnershipLink:
        self.session.add(link)
        await self.session.flush()
        await self.session.refresh(link)
        return link

    async def update(self, link: OwnershipLink) -> OwnershipLink:
        self.session.add(link)
        await self.session.flush()
        await self.session.refresh(link)
        return link
