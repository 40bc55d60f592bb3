from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import Employee


class IEmployeeRepository(ABC):
    """Employee repository interface - read-only from this service"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Employee]:
        """Get a staff record by (normalized) email"""
        pass
