import pytest
from unittest.mock import AsyncMock, MagicMock

from tests.fakes.identity_service import InMemoryIdentityService

REPOSITORIES = (
    "provisioning_requests",
    "identities",
    "tenants",
    "ownership_links",
    "audit_entries",
    "employees",
)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    for name in REPOSITORIES:
        setattr(uow, name, AsyncMock())
    # Audit writes echo the entry back, like the real repository
    uow.audit_entries.create = AsyncMock(side_effect=lambda entry: entry)
    return uow


@pytest.fixture
def identity_service():
    return InMemoryIdentityService()
