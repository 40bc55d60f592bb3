from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_entry_repository import AuditEntryRepository
from src.adapter.repositories.employee_repository import EmployeeRepository
from src.adapter.repositories.identity_repository import IdentityRepository
from src.adapter.repositories.ownership_link_repository import OwnershipLinkRepository
from src.adapter.repositories.provisioning_request_repository import (
    ProvisioningRequestRepository,
)
from src.adapter.repositories.tenant_repository import TenantRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.provisioning_requests = ProvisioningRequestRepository(self.session)
        self.identities = IdentityRepository(self.session)
        self.tenants = TenantRepository(self.session)
        self.ownership_links = OwnershipLinkRepository(self.session)
        self.audit_entries = AuditEntryRepository(self.session)
        self.employees = EmployeeRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # close() rolls back anything uncommitted and detaches loaded
        # entities without expiring them, so they stay readable after the block
        await self.session.close()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
