from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from src.domain.entities import ProvisioningRequest, ProvisioningStatus


class IProvisioningRequestRepository(ABC):
    """ProvisioningRequest repository interface - application layer"""

    @abstractmethod
    async def get_by_key(self, idempotency_key: str) -> Optional[ProvisioningRequest]:
        """Get request by idempotency key (always re-read from the database)"""
        pass

    @abstractmethod
    async def insert_if_absent(self, request: ProvisioningRequest) -> bool:
        """
        Insert a new request.

        Returns False when the idempotency key already exists. Must be the
        first statement of its transaction: a collision rolls it back.
        """
        pass

    @abstractmethod
    async def transition(
        self,
        idempotency_key: str,
        from_statuses: Iterable[ProvisioningStatus],
        to_status: ProvisioningStatus,
        updated_before: Optional[datetime] = None,
    ) -> bool:
        """
        Compare-and-set the status.

        Returns True only if this call moved the row; concurrent callers
        racing on the same key see False.
        """
        pass

    @abstractmethod
    async def update(self, request: ProvisioningRequest) -> ProvisioningRequest:
        """Update existing request"""
        pass
