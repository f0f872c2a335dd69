from typing import List, Optional

from txflow.errors import SignerRejected
from txflow.models import SignaturePair, SignedTransaction, UnsignedTransaction

from .abc import Signer


class MockSigner(Signer):
    def __init__(
        self,
        address: str = "MockSigner111111111111111111111111111111111",
        reject: bool = False,
        error: Optional[Exception] = None,
    ) -> None:
        self._address = address
        self.reject = reject
        self.error = error
        self.signed: List[UnsignedTransaction] = []

    @property
    def address(self) -> str:
        return self._address

    async def sign(self, tx: UnsignedTransaction) -> SignedTransaction:
        if self.error is not None:
            raise self.error
        if self.reject:
            raise SignerRejected("User rejected the request")
        self.signed.append(tx)
        return SignedTransaction(
            transaction=tx,
            signatures=[
                SignaturePair(
                    pubkey=self._address, signature=f"mock-sig-{len(self.signed)}"
                )
            ],
        )
