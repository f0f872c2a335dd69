import itertools
import logging
from typing import Any, List, Optional

import httpx

from txflow.models import CommitmentLevel, SignatureStatus

from .abc import Ledger
from .exceptions import LedgerError

_logger = logging.getLogger(__name__)


def _process_resp(resp: httpx.Response, method: str) -> Any:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise LedgerError(method, str(e), resp.status_code) from e

    content = resp.json()
    if "error" in content:
        error = content["error"]
        logs: List[str] = []
        data = error.get("data")
        if isinstance(data, dict):
            logs = data.get("logs") or []
        raise LedgerError(
            method, error.get("message", resp.text), error.get("code"), logs
        )
    return content["result"]


class WebLedger(Ledger):
    def __init__(
        self,
        provider: str,
        timeout: float = 30,
        commitment: CommitmentLevel = CommitmentLevel.Confirmed,
    ) -> None:
        self.client = httpx.AsyncClient(base_url=provider, timeout=timeout)
        self.commitment = commitment
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: List[Any]) -> Any:
        input = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            resp = await self.client.post("/", json=input)
        except httpx.HTTPError as e:
            raise LedgerError(method, str(e)) from e
        return _process_resp(resp, method)

    async def submit(self, payload: str) -> str:
        signature = await self._call(
            "sendTransaction",
            [
                payload,
                {"encoding": "base64", "preflightCommitment": self.commitment.value},
            ],
        )
        _logger.debug(f"transaction sent, signature {signature}")
        return signature

    async def get_signature_status(self, signature: str) -> Optional[SignatureStatus]:
        result = await self._call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": True}],
        )
        values = result["value"]
        if len(values) == 0 or values[0] is None:
            return None
        value = values[0]
        return SignatureStatus(
            slot=value["slot"],
            confirmations=value.get("confirmations"),
            err=value.get("err"),
            confirmation_status=value.get("confirmationStatus"),
        )

    async def get_balance(
        self, address: str, commitment: CommitmentLevel = CommitmentLevel.Confirmed
    ) -> int:
        result = await self._call(
            "getBalance", [address, {"commitment": commitment.value}]
        )
        return int(result["value"])

    async def close(self):
        await self.client.aclose()
