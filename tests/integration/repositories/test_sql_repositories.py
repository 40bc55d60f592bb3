"""
Repository reads against the real database, without sqlmodel's
`session.execute` deprecation path.
"""

import warnings
from uuid import uuid4

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.entities import (
    Employee,
    Identity,
    IdentityKind,
    OwnershipLink,
    ProvisioningRequest,
    Tenant,
)


def exec_deprecations(caught):
    return [w for w in caught if "session.exec" in str(w.message)]


@pytest.mark.asyncio
async def test_lookups_return_rows_without_deprecation_warnings(db_session: AsyncSession):
    identity = Identity(id=uuid4(), email="owner@acme.com", kind=IdentityKind.tenant_owner)
    tenant = Tenant(name="Acme", slug="acme", contact_email="owner@acme.com")
    db_session.add(identity)
    db_session.add(tenant)
    db_session.add(Employee(email="chef@acme.com", role="CHEF", tenant_id=tenant.id))
    db_session.add(
        ProvisioningRequest(
            idempotency_key="key-1",
            actor_id=uuid4(),
            tenant_slug="acme",
            owner_email="owner@acme.com",
        )
    )
    await db_session.flush()
    db_session.add(
        OwnershipLink(tenant_id=tenant.id, owner_identity_id=identity.id, granted_by=uuid4())
    )
    await db_session.commit()

    uow = SqlAlchemyUnitOfWork(db_session)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        async with uow:
            assert (await uow.identities.get_by_id(identity.id)).email == "owner@acme.com"
            assert (await uow.identities.get_by_email("owner@acme.com")).id == identity.id
            assert (await uow.tenants.get_by_id(tenant.id)).slug == "acme"
            assert (await uow.tenants.get_active_by_slug("acme")).id == tenant.id
            assert (await uow.tenants.get_active_by_contact_email("owner@acme.com")).id == tenant.id
            assert (await uow.employees.get_by_email("chef@acme.com")).role == "CHEF"
            assert (await uow.provisioning_requests.get_by_key("key-1")) is not None
            link = await uow.ownership_links.get_current_for_tenant(tenant.id)
            assert link.owner_identity_id == identity.id
            assert await uow.tenants.get_by_id(uuid4()) is None

    assert exec_deprecations(caught) == []
