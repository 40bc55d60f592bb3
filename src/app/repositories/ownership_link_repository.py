from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import OwnershipLink


class IOwnershipLinkRepository(ABC):
    """OwnershipLink repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, link_id: UUID) -> Optional[OwnershipLink]:
        """Get link by ID (always re-read from the database)"""
        pass

    @abstractmethod
    async def get_current_for_tenant(self, tenant_id: UUID) -> Optional[OwnershipLink]:
        """Newest link for a tenant that is not failed"""
        pass

    @abstractmethod
    async def create(self, link: OwnershipLink) -> OwnershipLink:
        """Create a new link"""
        pass

    @abstractmethod
    async def update(self, link: OwnershipLink) -> OwnershipLink:
        """Update existing link"""
        pass
