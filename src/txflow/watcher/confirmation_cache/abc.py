from abc import ABC, abstractmethod
from typing import List, Optional

from txflow.models import PendingConfirmation


class ConfirmationCache(ABC):
    @abstractmethod
    async def save(self, confirmation: PendingConfirmation): ...

    @abstractmethod
    async def get(self, signature: str) -> Optional[PendingConfirmation]: ...

    @abstractmethod
    async def load_all(self) -> List[PendingConfirmation]:
        """Oldest first."""
        ...

    @abstractmethod
    async def clear(self): ...

    async def has(self, signature: str) -> bool:
        return (await self.get(signature)) is not None
