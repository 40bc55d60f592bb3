"""
Unit tests for HttpIdentityService against httpx.MockTransport
"""

import json

import httpx
import pytest
from uuid import uuid4

from src.adapter.services.identity_service import HttpIdentityService
from src.domain.entities import IdentityKind
from src.domain.errors import ExternalServiceError, ValidationError


def service(handler) -> HttpIdentityService:
    client = httpx.AsyncClient(
        base_url="http://identity.test",
        transport=httpx.MockTransport(handler),
        headers={"Authorization": "Bearer key"},
    )
    return HttpIdentityService("http://identity.test", client=client)


@pytest.mark.asyncio
async def test_create_identity_returns_service_id():
    identity_id = uuid4()
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(201, json={"id": str(identity_id), "email": "owner@acme.com"})

    record = await service(handler).create_identity("owner@acme.com", IdentityKind.tenant_owner)

    assert record.id == identity_id
    assert seen == {
        "method": "POST",
        "path": "/identities",
        "body": {"email": "owner@acme.com", "kind": "tenant_owner"},
        "auth": "Bearer key",
    }


@pytest.mark.asyncio
async def test_create_identity_conflict_is_validation_error():
    def handler(request):
        return httpx.Response(409, json={"error": "exists"})

    with pytest.raises(ValidationError) as exc_info:
        await service(handler).create_identity("owner@acme.com", IdentityKind.tenant_owner)

    assert exc_info.value.code == "EMAIL_IN_USE"


@pytest.mark.asyncio
async def test_server_error_is_retryable():
    def handler(request):
        return httpx.Response(502)

    with pytest.raises(ExternalServiceError) as exc_info:
        await service(handler).create_identity("owner@acme.com", IdentityKind.tenant_owner)

    assert exc_info.value.code == "IDENTITY_SERVICE_UNAVAILABLE"
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_client_error_is_terminal():
    def handler(request):
        return httpx.Response(422)

    with pytest.raises(ExternalServiceError) as exc_info:
        await service(handler).send_verification_link(uuid4())

    assert exc_info.value.code == "IDENTITY_SERVICE_REJECTED"
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_timeout_is_external_service_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ExternalServiceError) as exc_info:
        await service(handler).create_identity("owner@acme.com", IdentityKind.tenant_owner)

    assert exc_info.value.code == "IDENTITY_SERVICE_TIMEOUT"


@pytest.mark.asyncio
async def test_unreachable_service():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ExternalServiceError) as exc_info:
        await service(handler).delete_identity(uuid4())

    assert exc_info.value.code == "IDENTITY_SERVICE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_delete_missing_identity_is_ok():
    def handler(request):
        assert request.method == "DELETE"
        return httpx.Response(404)

    await service(handler).delete_identity(uuid4())


@pytest.mark.asyncio
async def test_update_identity_sends_only_changed_field():
    identity_id = uuid4()
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    await service(handler).update_identity(identity_id, password="new-password-123")

    assert seen == {
        "path": f"/identities/{identity_id}",
        "body": {"password": "new-password-123"},
    }
