from abc import ABC, abstractmethod
from typing import Optional

from txflow.models import CommitmentLevel, SignatureStatus


class Ledger(ABC):
    @abstractmethod
    async def submit(self, payload: str) -> str:
        """
        Submit a serialized signed transaction, return its signature.
        """
        ...

    @abstractmethod
    async def get_signature_status(self, signature: str) -> Optional[SignatureStatus]:
        """
        Return None while the ledger has not seen the signature.
        """
        ...

    @abstractmethod
    async def get_balance(
        self, address: str, commitment: CommitmentLevel = CommitmentLevel.Confirmed
    ) -> int: ...

    @abstractmethod
    async def close(self): ...
