from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Identity


class IIdentityRepository(ABC):
    """Identity mirror repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, identity_id: UUID) -> Optional[Identity]:
        """Get identity by the identity service's id"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Identity]:
        """Get identity by (normalized) email"""
        pass

    @abstractmethod
    async def create(self, identity: Identity) -> Identity:
        """Mirror a newly created identity"""
        pass

    @abstractmethod
    async def update(self, identity: Identity) -> Identity:
        """Update existing identity"""
        pass

    @abstractmethod
    async def delete(self, identity_id: UUID) -> bool:
        """Remove the mirror row; False if it was already gone"""
        pass
