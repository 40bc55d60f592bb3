"""
A tenant never points at an identity that does not exist, including while
the saga is paused between its steps.
"""

import asyncio

import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.app.services.tenant_registrar import TenantRegistrar
from src.domain.entities import Identity, Tenant, TenantStatus
from tests.utils.provisioning import PROVISION_URL, provision_body


async def dangling_owner_references(session_factory):
    async with session_factory() as session:
        tenants = (
            await session.exec(select(Tenant).where(Tenant.owner_identity_id.is_not(None)))
        ).all()
        dangling = []
        for tenant in tenants:
            if await session.get(Identity, tenant.owner_identity_id) is None:
                dangling.append(tenant.id)
        return dangling


@pytest.mark.asyncio
async def test_tenant_owner_exists_between_registration_and_verification(
    client: AsyncClient, session_factory, admin, monkeypatch
):
    registered = asyncio.Event()
    resume = asyncio.Event()
    original = TenantRegistrar.register_tenant

    async def paused_register(self, *args, **kwargs):
        tenant = await original(self, *args, **kwargs)
        registered.set()
        await resume.wait()
        return tenant

    monkeypatch.setattr(TenantRegistrar, "register_tenant", paused_register)

    request = asyncio.create_task(
        client.post(PROVISION_URL, json=provision_body(), headers=admin.headers)
    )
    await asyncio.wait_for(registered.wait(), timeout=5)

    async with session_factory() as session:
        tenant = (await session.exec(select(Tenant).where(Tenant.slug == "acme"))).one()
    # Written, not yet live
    assert tenant.status == TenantStatus.provisioning
    assert await dangling_owner_references(session_factory) == []

    resume.set()
    response = await request

    assert response.status_code == 201
    assert await dangling_owner_references(session_factory) == []
