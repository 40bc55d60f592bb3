from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.domain.entities import AuditEntry, Tenant

PROVISION_URL = "/admin/tenants/provision"

SUCCESS_PATH = ["initiated", "identity_created", "tenant_created", "verified", "completed"]
FAILURE_PATH = [
    "initiated",
    "identity_created",
    "tenant_created",
    "verification_failed",
    "rolled_back",
    "failed",
]


def provision_body(key: str = "key-1", slug: str = "acme", email: str = "owner@acme.com", **extra):
    body = {
        "idempotency_key": key,
        "tenant_name": "Acme Bistro",
        "tenant_slug": slug,
        "owner_email": email,
    }
    body.update(extra)
    return body


async def audit_trail(db_session: AsyncSession, correlation_id: str) -> List[AuditEntry]:
    result = await db_session.exec(
        select(AuditEntry)
        .where(AuditEntry.correlation_id == correlation_id)
        .order_by(AuditEntry.id)
    )
    return list(result.all())


async def tenants_with_slug(db_session: AsyncSession, slug: str) -> List[Tenant]:
    result = await db_session.exec(
        select(Tenant).where(Tenant.slug == slug).execution_options(populate_existing=True)
    )
    return list(result.all())
