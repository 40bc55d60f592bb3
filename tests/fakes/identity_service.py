from typing import Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from src.app.services.identity_service import IIdentityService, IdentityRecord
from src.domain.entities import IdentityKind
from src.domain.errors import ExternalServiceError, ValidationError


class InMemoryIdentityService(IIdentityService):
    """Identity service double with failure injection"""

    def __init__(self):
        self.accounts: Dict[UUID, dict] = {}
        self.calls: List[Tuple[str, object]] = []
        self.fail_create: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None
        self.fail_send: Optional[Exception] = None
        self.fail_update: Optional[Exception] = None

    def add_account(self, email: str, kind: IdentityKind, identity_id: Optional[UUID] = None) -> UUID:
        identity_id = identity_id or uuid4()
        self.accounts[identity_id] = {"email": email, "kind": kind, "password": None}
        return identity_id

    async def create_identity(self, email: str, kind: IdentityKind) -> IdentityRecord:
        self.calls.append(("create", email))
        if self.fail_create:
            raise self.fail_create
        if any(a["email"] == email for a in self.accounts.values()):
            raise ValidationError("EMAIL_IN_USE", "Email is already registered (identity service)")
        identity_id = self.add_account(email, kind)
        return IdentityRecord(id=identity_id, email=email)

    async def delete_identity(self, identity_id: UUID) -> None:
        self.calls.append(("delete", identity_id))
        if self.fail_delete:
            raise self.fail_delete
        self.accounts.pop(identity_id, None)

    async def send_verification_link(self, identity_id: UUID) -> None:
        self.calls.append(("send", identity_id))
        if self.fail_send:
            raise self.fail_send
        if identity_id not in self.accounts:
            raise ExternalServiceError("IDENTITY_NOT_FOUND", "Identity does not exist", retryable=False)

    async def update_identity(
        self,
        identity_id: UUID,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        self.calls.append(("update", identity_id))
        if self.fail_update:
            raise self.fail_update
        account = self.accounts.get(identity_id)
        if account is None:
            raise ExternalServiceError("IDENTITY_NOT_FOUND", "Identity does not exist", retryable=False)
        if email is not None:
            account["email"] = email
        if password is not None:
            account["password"] = password
