from abc import ABC, abstractmethod
from typing import FrozenSet
from uuid import UUID

from pydantic import BaseModel


class RosterSnapshot(BaseModel):
    """Point-in-time view of every administrator identity id"""

    administrator_ids: FrozenSet[UUID] = frozenset()

    def __contains__(self, identity_id: object) -> bool:
        return identity_id in self.administrator_ids


class AdministratorRoster(ABC):
    """Read-only accessor for the platform administrator roster"""

    @abstractmethod
    async def snapshot(self) -> RosterSnapshot:
        """Current roster; may be a few seconds stale"""
        pass
