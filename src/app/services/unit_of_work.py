from abc import ABC, abstractmethod

from src.app.repositories.audit_entry_repository import IAuditEntryRepository
from src.app.repositories.employee_repository import IEmployeeRepository
from src.app.repositories.identity_repository import IIdentityRepository
from src.app.repositories.ownership_link_repository import IOwnershipLinkRepository
from src.app.repositories.provisioning_request_repository import (
    IProvisioningRequestRepository,
)
from src.app.repositories.tenant_repository import ITenantRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management

    One instance may be entered several times in sequence; every
    `async with` block is one relational transaction and anything not
    committed is rolled back on exit.
    """

    # Repository properties (initialized in __aenter__)
    provisioning_requests: IProvisioningRequestRepository
    identities: IIdentityRepository
    tenants: ITenantRepository
    ownership_links: IOwnershipLinkRepository
    audit_entries: IAuditEntryRepository
    employees: IEmployeeRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
