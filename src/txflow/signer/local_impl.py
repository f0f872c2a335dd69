import logging

from anyio import to_thread
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from web3 import Web3

from txflow.errors import SerializationFailure, SignerRejected
from txflow.models import SignaturePair, SignedTransaction, UnsignedTransaction

from .abc import Signer

_logger = logging.getLogger(__name__)


class LocalSigner(Signer):
    def __init__(self, privkey: str) -> None:
        self.account: LocalAccount = Account.from_key(privkey)
        self._address = Web3.to_checksum_address(self.account.address)

    @property
    def address(self) -> str:
        return self._address

    def _sign(self, tx: UnsignedTransaction) -> SignedTransaction:
        if tx.fee_payer != self._address:
            raise SignerRejected(
                f"Fee payer {tx.fee_payer} is not the signer {self._address}"
            )
        try:
            message = tx.message_bytes()
        except (TypeError, ValueError) as e:
            raise SerializationFailure(str(e)) from e

        signed = self.account.sign_message(encode_defunct(primitive=message))
        return SignedTransaction(
            transaction=tx,
            signatures=[
                SignaturePair(
                    pubkey=self._address, signature="0x" + bytes(signed.signature).hex()
                )
            ],
        )

    async def sign(self, tx: UnsignedTransaction) -> SignedTransaction:
        signed = await to_thread.run_sync(self._sign, tx)
        _logger.debug(f"transaction signed by {self._address}")
        return signed
