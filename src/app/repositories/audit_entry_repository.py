from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import AuditEntry


class IAuditEntryRepository(ABC):
    """AuditEntry repository interface - application layer"""

    @abstractmethod
    async def create(self, entry: AuditEntry) -> AuditEntry:
        """Append a new audit entry (immutable)"""
        pass

    @abstractmethod
    async def list_by_correlation_id(self, correlation_id: str) -> List[AuditEntry]:
        """All entries for one attempt, oldest first"""
        pass

    @abstractmethod
    async def count_since(
        self,
        action: str,
        since: datetime,
        tenant_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
    ) -> int:
        """Count entries for an action newer than `since`"""
        pass
