"""
Unit tests for VerificationCoordinator

verify_and_finalize consistency checks, and compensation ordering with
best-effort continuation.
"""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4

from src.app.services.idempotency_ledger import IdempotencyLedger
from src.app.services.verification_coordinator import VerificationCoordinator
from src.domain.entities import (
    Identity,
    IdentityKind,
    OwnershipLink,
    OwnershipLinkStatus,
    ProvisioningRequest,
    ProvisioningStatus,
    Tenant,
    TenantStatus,
)
from src.domain.errors import ExternalServiceError, VerificationError
from tests.utils.audit import mocked_audit_outcomes


@pytest.fixture
def written(mock_uow, identity_service):
    """State exactly as the registrar leaves it"""
    owner_id = identity_service.add_account("owner@acme.com", IdentityKind.tenant_owner)
    owner = Identity(id=owner_id, email="owner@acme.com", kind=IdentityKind.tenant_owner)
    tenant = Tenant(
        id=uuid4(),
        name="Acme",
        slug="acme",
        owner_identity_id=owner_id,
        status=TenantStatus.provisioning,
    )
    link = OwnershipLink(
        tenant_id=tenant.id,
        owner_identity_id=owner_id,
        status=OwnershipLinkStatus.pending,
        granted_by=uuid4(),
    )
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.ownership_links.get_current_for_tenant = AsyncMock(return_value=link)
    mock_uow.identities.get_by_id = AsyncMock(return_value=owner)
    mock_uow.identities.delete = AsyncMock(return_value=True)
    return tenant, link, owner


@pytest.mark.asyncio
async def test_verify_flips_link_and_tenant(mock_uow, identity_service, written):
    tenant, link, owner = written
    coordinator = VerificationCoordinator(mock_uow, identity_service)

    await coordinator.verify_and_finalize(
        tenant.id, owner.id, actor_id=uuid4(), correlation_id="key-1"
    )

    assert link.status == OwnershipLinkStatus.completed
    assert tenant.status == TenantStatus.active
    assert mocked_audit_outcomes(mock_uow) == ["verified"]
    assert mock_uow.commit.await_count == 1
    assert await coordinator.is_finalized(tenant.id, owner.id) is True


@pytest.mark.asyncio
async def test_verify_rejects_owner_mismatch(mock_uow, identity_service, written):
    tenant, link, owner = written
    tenant.owner_identity_id = uuid4()

    with pytest.raises(VerificationError) as exc_info:
        await VerificationCoordinator(mock_uow, identity_service).verify_and_finalize(
            tenant.id, owner.id, actor_id=uuid4(), correlation_id="key-1"
        )

    assert exc_info.value.code == "OWNER_MISMATCH"
    assert exc_info.value.retryable is True
    assert link.status == OwnershipLinkStatus.pending
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_verify_rejects_link_that_is_not_pending(mock_uow, identity_service, written):
    tenant, link, owner = written
    link.status = OwnershipLinkStatus.completed

    with pytest.raises(VerificationError) as exc_info:
        await VerificationCoordinator(mock_uow, identity_service).verify_and_finalize(
            tenant.id, owner.id, actor_id=uuid4(), correlation_id="key-1"
        )

    assert exc_info.value.code == "LINK_STATE"


@pytest.mark.asyncio
async def test_verify_rejects_missing_tenant(mock_uow, identity_service, written):
    tenant, link, owner = written
    mock_uow.tenants.get_by_id = AsyncMock(return_value=None)

    with pytest.raises(VerificationError) as exc_info:
        await VerificationCoordinator(mock_uow, identity_service).verify_and_finalize(
            tenant.id, owner.id, actor_id=uuid4(), correlation_id="key-1"
        )

    assert exc_info.value.code == "TENANT_MISSING"


@pytest.mark.asyncio
async def test_compensate_undoes_everything_in_reverse(mock_uow, identity_service, written):
    tenant, link, owner = written
    request = ProvisioningRequest(
        idempotency_key="key-1",
        actor_id=uuid4(),
        tenant_slug="acme",
        owner_email="owner@acme.com",
        status=ProvisioningStatus.processing,
        owner_identity_id=owner.id,
        tenant_id=tenant.id,
    )
    mock_uow.provisioning_requests.get_by_key = AsyncMock(return_value=request)
    coordinator = VerificationCoordinator(
        mock_uow, identity_service, IdempotencyLedger(mock_uow)
    )
    cause = VerificationError("OWNER_MISMATCH", "mismatch")

    returned = await coordinator.compensate(
        cause,
        correlation_id="key-1",
        actor_id=uuid4(),
        identity_id=owner.id,
        tenant_id=tenant.id,
        idempotency_key="key-1",
    )

    assert returned is cause
    assert link.status == OwnershipLinkStatus.failed
    assert tenant.deleted_at is not None
    assert tenant.owner_identity_id is None
    assert owner.id not in identity_service.accounts
    mock_uow.identities.delete.assert_awaited_once_with(owner.id)

    assert request.status == ProvisioningStatus.failed
    assert request.retryable is True
    assert request.owner_identity_id is None

    assert mocked_audit_outcomes(mock_uow) == [
        "verification_failed",
        "rolled_back",
        "rolled_back",
        "rolled_back",
        "failed",
    ]
    steps = [
        call.args[0].payload.get("step")
        for call in mock_uow.audit_entries.create.await_args_list
    ]
    assert steps[1:4] == ["ownership_link", "tenant", "identity"]


@pytest.mark.asyncio
async def test_compensation_continues_past_failed_step(mock_uow, identity_service, written):
    tenant, link, owner = written
    identity_service.fail_delete = ExternalServiceError("IDENTITY_SERVICE_UNAVAILABLE", "down")
    request = ProvisioningRequest(
        idempotency_key="key-1",
        actor_id=uuid4(),
        tenant_slug="acme",
        owner_email="owner@acme.com",
        status=ProvisioningStatus.processing,
        owner_identity_id=owner.id,
        tenant_id=tenant.id,
    )
    mock_uow.provisioning_requests.get_by_key = AsyncMock(return_value=request)
    coordinator = VerificationCoordinator(
        mock_uow, identity_service, IdempotencyLedger(mock_uow)
    )

    await coordinator.compensate(
        VerificationError("OWNER_MISMATCH", "mismatch"),
        correlation_id="key-1",
        actor_id=uuid4(),
        identity_id=owner.id,
        tenant_id=tenant.id,
        idempotency_key="key-1",
    )

    assert mocked_audit_outcomes(mock_uow) == [
        "verification_failed",
        "rolled_back",
        "rolled_back",
        "compensation_failed",
        "failed",
    ]
    # The mirror stays while the account still exists upstream
    mock_uow.identities.delete.assert_not_awaited()
    assert request.status == ProvisioningStatus.failed
    # A retry resumes with the surviving identity
    assert request.owner_identity_id == owner.id
    assert request.tenant_id is None


@pytest.mark.asyncio
async def test_compensate_detaches_preexisting_tenant(mock_uow, identity_service, written):
    tenant, link, owner = written

    await VerificationCoordinator(mock_uow, identity_service).compensate(
        VerificationError("OWNER_MISMATCH", "mismatch"),
        correlation_id="rotation-1",
        actor_id=uuid4(),
        identity_id=owner.id,
        tenant_id=tenant.id,
        delete_tenant=False,
    )

    assert tenant.deleted_at is None
    assert tenant.owner_identity_id is None


@pytest.mark.asyncio
async def test_setup_link_failure_is_not_fatal(mock_uow, identity_service):
    identity_service.fail_send = ExternalServiceError("IDENTITY_SERVICE_UNAVAILABLE", "down")

    sent = await VerificationCoordinator(mock_uow, identity_service).send_setup_link(
        uuid4(), "key-1"
    )

    assert sent is False


@pytest.mark.asyncio
async def test_identity_kept_while_tenant_still_references_it(
    mock_uow, identity_service, written
):
    tenant, link, owner = written
    request = ProvisioningRequest(
        idempotency_key="key-1",
        actor_id=uuid4(),
        tenant_slug="acme",
        owner_email="owner@acme.com",
        status=ProvisioningStatus.processing,
        owner_identity_id=owner.id,
        tenant_id=tenant.id,
    )
    mock_uow.provisioning_requests.get_by_key = AsyncMock(return_value=request)
    mock_uow.tenants.update = AsyncMock(side_effect=RuntimeError("database is locked"))
    coordinator = VerificationCoordinator(
        mock_uow, identity_service, IdempotencyLedger(mock_uow)
    )

    await coordinator.compensate(
        VerificationError("LINK_MISMATCH", "mismatch"),
        correlation_id="key-1",
        actor_id=uuid4(),
        identity_id=owner.id,
        tenant_id=tenant.id,
        idempotency_key="key-1",
    )

    assert mocked_audit_outcomes(mock_uow) == [
        "verification_failed",
        "rolled_back",
        "compensation_failed",
        "compensation_failed",
        "failed",
    ]
    assert owner.id in identity_service.accounts
    assert ("delete", owner.id) not in identity_service.calls
    assert request.owner_identity_id == owner.id
    assert request.tenant_id == tenant.id
