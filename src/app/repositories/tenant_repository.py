from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Tenant


class ITenantRepository(ABC):
    """Tenant repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        """Get tenant by ID (always re-read from the database)"""
        pass

    @abstractmethod
    async def get_active_by_slug(self, slug: str) -> Optional[Tenant]:
        """Get the tenant holding a slug, ignoring soft-deleted tenants"""
        pass

    @abstractmethod
    async def get_active_by_contact_email(self, email: str) -> Optional[Tenant]:
        """Get a non-deleted tenant by (normalized) contact email"""
        pass

    @abstractmethod
    async def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant"""
        pass

    @abstractmethod
    async def update(self, tenant: Tenant) -> Tenant:
        """Update existing tenant"""
        pass
