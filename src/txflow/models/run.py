from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .confirmation import CommitmentLevel
from .fees import Fees
from .stage import Stage


class TxContext(BaseModel):
    """Everything a run needs to know about who is acting and how.

    ``authority`` is the connected signer's address. When ``is_multisig`` is
    set the operation is performed on behalf of ``multisig_id`` and is wrapped
    into a proposal titled ``proposal_title``.
    """

    authority: str
    is_multisig: bool = False
    multisig_id: Optional[str] = None
    proposal_title: Optional[str] = None
    proposal_description: str = ""

    spendable_balance: Optional[int] = None
    fees: Optional[Fees] = None
    finality: CommitmentLevel = CommitmentLevel.Confirmed
    extras: Optional[Dict[str, Any]] = None


class TranscriptEntry(BaseModel):
    stage: Stage
    inputs: Optional[Any] = None
    result: Optional[Any] = None
    timestamp: datetime = Field(default_factory=datetime.now)
