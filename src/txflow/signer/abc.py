from abc import ABC, abstractmethod

from txflow.models import SignedTransaction, UnsignedTransaction


class Signer(ABC):
    @property
    @abstractmethod
    def address(self) -> str: ...

    @abstractmethod
    async def sign(self, tx: UnsignedTransaction) -> SignedTransaction:
        """
        Sign the canonical message of tx.
        Raise SignerRejected when the signing is declined.
        """
        ...
