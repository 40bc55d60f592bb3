from uuid import uuid4

import pytest

from src.app.services.audit_log import REDACTED, AuditLog, redact
from src.domain.entities import AuditOutcome


def test_redact_hides_credentials_and_masks_emails():
    identity_id = uuid4()
    payload = {
        "password": "hunter2hunter2",
        "new_value": "whatever",
        "owner_email": "Owner@Acme.com",
        "nested": {"token": "abc", "slug": "acme"},
        "identity_id": identity_id,
    }

    assert redact(payload) == {
        "password": REDACTED,
        "new_value": REDACTED,
        "owner_email": "O***@Acme.com",
        "nested": {"token": REDACTED, "slug": "acme"},
        "identity_id": str(identity_id),
    }


@pytest.mark.asyncio
async def test_record_joins_caller_transaction(mock_uow):
    entry = await AuditLog(mock_uow).record(
        "key-1", "tenant_created", AuditOutcome.tenant_created, payload={"password": "x"}
    )

    assert entry.payload == {"password": REDACTED}
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_append_commits_its_own_transaction(mock_uow):
    await AuditLog(mock_uow).append("key-1", "compensation", AuditOutcome.rolled_back)

    assert mock_uow.audit_entries.create.await_count == 1
    assert mock_uow.commit.await_count == 1
