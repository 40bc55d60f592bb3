"""
HTTP client for the external identity service.

All calls go through one httpx.AsyncClient with a bounded timeout; transport
failures and 5xx responses become ExternalServiceError so the orchestrator
can classify them without knowing about HTTP.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

import httpx

from src.app.services.identity_service import IIdentityService, IdentityRecord
from src.domain.entities import IdentityKind
from src.domain.errors import ExternalServiceError, ValidationError

logger = logging.getLogger(__name__)


class HttpIdentityService(IIdentityService):
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._http = client or httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout_seconds
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self, method: str, path: str, body: Optional[Dict[str, Any]] = None
    ) -> Optional[httpx.Response]:
        """Perform one call. 404 returns None."""
        try:
            resp = await self._http.request(method, path, json=body)
        except httpx.TimeoutException as e:
            logger.error(f"Identity service timeout on {method} {path}")
            raise ExternalServiceError(
                "IDENTITY_SERVICE_TIMEOUT", "Identity service did not respond in time"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Identity service unreachable on {method} {path}: {type(e).__name__}")
            raise ExternalServiceError(
                "IDENTITY_SERVICE_UNAVAILABLE", "Identity service is unreachable"
            ) from e

        if resp.status_code == 404:
            return None
        if resp.status_code == 409:
            raise ValidationError(
                "EMAIL_IN_USE",
                "Email is already registered (identity service)",
                details={"table": "identity_service"},
            )
        if resp.status_code >= 500:
            logger.error(f"Identity service {resp.status_code} on {method} {path}")
            raise ExternalServiceError(
                "IDENTITY_SERVICE_UNAVAILABLE", "Identity service returned an error"
            )
        if resp.status_code >= 400:
            logger.warning(f"Identity service rejected {method} {path}: {resp.status_code}")
            raise ExternalServiceError(
                "IDENTITY_SERVICE_REJECTED",
                "Identity service rejected the request",
                retryable=False,
            )
        return resp

    async def create_identity(self, email: str, kind: IdentityKind) -> IdentityRecord:
        # No password is sent: the account starts unverified
        resp = await self._request("POST", "/identities", {"email": email, "kind": kind.value})
        if resp is None:
            raise ExternalServiceError(
                "IDENTITY_SERVICE_REJECTED", "Identity endpoint not found", retryable=False
            )
        data = resp.json()
        return IdentityRecord(id=data["id"], email=data.get("email", email))

    async def delete_identity(self, identity_id: UUID) -> None:
        # Idempotent: a missing account counts as deleted
        await self._request("DELETE", f"/identities/{identity_id}")

    async def send_verification_link(self, identity_id: UUID) -> None:
        resp = await self._request("POST", f"/identities/{identity_id}/verification-link")
        if resp is None:
            raise ExternalServiceError(
                "IDENTITY_NOT_FOUND", "Identity does not exist", retryable=False
            )

    async def update_identity(
        self,
        identity_id: UUID,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        body: Dict[str, Any] = {}
        if email is not None:
            body["email"] = email
        if password is not None:
            body["password"] = password
        resp = await self._request("PATCH", f"/identities/{identity_id}", body)
        if resp is None:
            raise ExternalServiceError(
                "IDENTITY_NOT_FOUND", "Identity does not exist", retryable=False
            )
