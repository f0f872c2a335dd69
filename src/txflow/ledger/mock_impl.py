from contextlib import contextmanager
from typing import Dict, List, Optional

from anyio import get_cancelled_exc_class

from txflow.models import CommitmentLevel, SignatureStatus

from .abc import Ledger
from .exceptions import LedgerError


class MockLedger(Ledger):
    def __init__(self) -> None:
        self.balances: Dict[str, int] = {}
        self.statuses: Dict[str, SignatureStatus] = {}
        self.submitted: Dict[str, str] = {}

        self.submit_error: Optional[LedgerError] = None
        # every status call fails while this is positive
        self.status_failures: int = 0
        # status assigned to each signature right after submission
        self.auto_status: Optional[SignatureStatus] = None

        self.calls: List[str] = []
        self._slot = 0

    @contextmanager
    def wrap_error(self, method: str):
        try:
            yield
        except KeyboardInterrupt:
            raise
        except get_cancelled_exc_class():
            raise
        except LedgerError:
            raise
        except Exception as e:
            raise LedgerError(method, str(e))

    def set_status(
        self,
        signature: str,
        confirmation_status: Optional[CommitmentLevel] = CommitmentLevel.Confirmed,
        err: Optional[object] = None,
    ):
        self._slot += 1
        self.statuses[signature] = SignatureStatus(
            slot=self._slot, err=err, confirmation_status=confirmation_status
        )

    async def submit(self, payload: str) -> str:
        self.calls.append("sendTransaction")
        with self.wrap_error("sendTransaction"):
            if self.submit_error is not None:
                raise self.submit_error
            signature = f"mock-signature-{len(self.submitted) + 1}"
            self.submitted[signature] = payload
            if self.auto_status is not None:
                self.statuses[signature] = self.auto_status
            return signature

    async def get_signature_status(self, signature: str) -> Optional[SignatureStatus]:
        self.calls.append("getSignatureStatuses")
        with self.wrap_error("getSignatureStatuses"):
            if self.status_failures > 0:
                self.status_failures -= 1
                raise LedgerError("getSignatureStatuses", "node is behind")
            return self.statuses.get(signature)

    async def get_balance(
        self, address: str, commitment: CommitmentLevel = CommitmentLevel.Confirmed
    ) -> int:
        self.calls.append("getBalance")
        with self.wrap_error("getBalance"):
            return self.balances.get(address, 0)

    async def close(self):
        pass
