from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import IdentityKind


class IdentityRecord(BaseModel):
    """What the identity service hands back for a created account"""

    id: UUID
    email: str


class IIdentityService(ABC):
    """
    External identity service port.

    Implementations raise ExternalServiceError when the service is
    unreachable, times out or fails, and ValidationError when it rejects the
    email as already registered.
    """

    @abstractmethod
    async def create_identity(self, email: str, kind: IdentityKind) -> IdentityRecord:
        """Create an unverified account; the service assigns the id"""
        pass

    @abstractmethod
    async def delete_identity(self, identity_id: UUID) -> None:
        """Delete an account. Deleting a missing account is not an error."""
        pass

    @abstractmethod
    async def send_verification_link(self, identity_id: UUID) -> None:
        """Email the owner a verification / password-setup link"""
        pass

    @abstractmethod
    async def update_identity(
        self,
        identity_id: UUID,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """Change one credential field of exactly this account"""
        pass
