from collections import OrderedDict
from typing import List, Optional

from txflow.models import PendingConfirmation

from .abc import ConfirmationCache


class MemoryConfirmationCache(ConfirmationCache):
    def __init__(self, max_size: int = 100) -> None:
        self.max_size = max_size
        self._confirmations: "OrderedDict[str, PendingConfirmation]" = OrderedDict()

    async def save(self, confirmation: PendingConfirmation):
        self._confirmations[confirmation.signature] = confirmation.model_copy()
        self._confirmations.move_to_end(confirmation.signature)
        while len(self._confirmations) > self.max_size:
            self._confirmations.popitem(last=False)

    async def get(self, signature: str) -> Optional[PendingConfirmation]:
        return self._confirmations.get(signature)

    async def load_all(self) -> List[PendingConfirmation]:
        return list(self._confirmations.values())

    async def clear(self):
        self._confirmations.clear()
