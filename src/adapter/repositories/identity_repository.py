from typing import Optional
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.identity_repository import IIdentityRepository
from src.domain.entities import Identity


class IdentityRepository(IIdentityRepository):
    """Identity mirror repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, identity_id: UUID) -> Optional[Identity]:
        stmt = (
            select(Identity)
            .where(Identity.id == identity_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[Identity]:
        stmt = select(Identity).where(Identity.email == email)
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, identity: Identity) -> Identity:
        self.session.add(identity)
        await self.session.flush()
        await self.session.refresh(identity)
        return identity

    async def update(self, identity: Identity) -> Identity:
        self.session.add(identity)
        await self.session.flush()
        await self.session.refresh(identity)
        return identity

    async def delete(self, identity_id: UUID) -> bool:
        result = await self.session.execute(delete(Identity).where(Identity.id == identity_id))
        return result.rowcount > 0
