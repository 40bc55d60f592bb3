"""
Owner identity resolution for an existing tenant.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Tenant

logger = logging.getLogger(__name__)


class OwnerIdentityResolver:
    """
    Find the identity that owns a tenant, in order:

    1. tenant.owner_identity_id, when it resolves to a mirrored identity
    2. the tenant's current (non-failed) ownership link
    3. nothing: the caller has to provision a new owner

    The result is never filtered by kind or roster here. Whatever is found
    goes to the safety guard, so a tenant pointing at an administrator is
    refused rather than silently skipped.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def resolve(self, tenant: Tenant) -> Optional[UUID]:
        async with self.uow:
            if tenant.owner_identity_id is not None:
                owner = await self.uow.identities.get_by_id(tenant.owner_identity_id)
                if owner is not None:
                    return owner.id
                logger.warning(
                    f"Tenant {tenant.id} owner {tenant.owner_identity_id} has no identity record"
                )

            link = await self.uow.ownership_links.get_current_for_tenant(tenant.id)
            if link is not None:
                return link.owner_identity_id

        return None
