import json

import httpx
import pytest

from txflow.ledger import LedgerError, WebLedger
from txflow.models import CommitmentLevel


def handler(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    method = body["method"]
    params = body["params"]
    if method == "sendTransaction":
        if params[0] == "bad":
            return httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": body["id"],
                    "error": {
                        "code": -32002,
                        "message": "Transaction simulation failed",
                        "data": {"logs": ["Program log: custom program error: 0x1797"]},
                    },
                },
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "sig1"})
    if method == "getSignatureStatuses":
        sig = params[0][0]
        value = None
        if sig == "sig1":
            value = {"slot": 10, "confirmations": None, "err": None, "confirmationStatus": "finalized"}
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": body["id"], "result": {"context": {"slot": 11}, "value": [value]}},
        )
    if method == "getBalance":
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": body["id"], "result": {"context": {"slot": 11}, "value": 42}},
        )
    return httpx.Response(500, text="unknown method")


@pytest.fixture
async def ledger():
    ledger = WebLedger("http://ledger.test")
    await ledger.client.aclose()
    ledger.client = httpx.AsyncClient(
        base_url="http://ledger.test", transport=httpx.MockTransport(handler)
    )
    try:
        yield ledger
    finally:
        await ledger.close()


async def test_submit(ledger: WebLedger):
    assert await ledger.submit("payload") == "sig1"

    with pytest.raises(LedgerError) as e:
        await ledger.submit("bad")
    assert e.value.code == -32002
    assert e.value.method == "sendTransaction"
    assert "0x1797" in e.value.logs[0]


async def test_signature_status(ledger: WebLedger):
    status = await ledger.get_signature_status("sig1")
    assert status is not None
    assert status.slot == 10
    assert status.err is None
    assert status.confirmation_status == CommitmentLevel.Finalized

    assert await ledger.get_signature_status("sig2") is None


async def test_balance(ledger: WebLedger):
    assert await ledger.get_balance("address") == 42


async def test_http_error(ledger: WebLedger):
    with pytest.raises(LedgerError) as e:
        await ledger._call("unknown", [])
    assert e.value.code == 500
