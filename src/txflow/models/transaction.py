import base64
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from txflow.utils import sort_dict

from .common import BytesFromBase64


class AccountMeta(BaseModel):
    pubkey: str
    is_signer: bool = False
    is_writable: bool = False


class Instruction(BaseModel):
    program_id: str
    accounts: List[AccountMeta]
    data: BytesFromBase64 = b""


class UnsignedTransaction(BaseModel):
    fee_payer: str
    instructions: List[Instruction]
    recent_blockhash: Optional[str] = None

    def message_bytes(self) -> bytes:
        # canonical encoding, every signer signs exactly these bytes
        message = sort_dict(self.model_dump(mode="json"))
        return json.dumps(
            message, ensure_ascii=False, separators=(",", ":")
        ).encode("utf-8")

    def summary(self) -> Dict[str, Any]:
        return {
            "fee_payer": self.fee_payer,
            "instructions": [
                {
                    "program_id": ix.program_id,
                    "accounts": [a.pubkey for a in ix.accounts],
                    "data_len": len(ix.data),
                }
                for ix in self.instructions
            ],
        }


class SignaturePair(BaseModel):
    pubkey: str
    signature: str


class SignedTransaction(BaseModel):
    transaction: UnsignedTransaction
    signatures: List[SignaturePair]

    def serialize(self) -> str:
        payload = {
            "message": base64.b64encode(self.transaction.message_bytes()).decode(
                "ascii"
            ),
            "signatures": [s.model_dump() for s in self.signatures],
        }
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return base64.b64encode(raw).decode("ascii")
