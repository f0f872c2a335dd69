from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .operation import OperationType


class CommitmentLevel(Enum):
    Processed = "processed"
    Confirmed = "confirmed"
    Finalized = "finalized"

    @property
    def rank(self) -> int:
        return _commitment_ranks[self]

    def satisfies(self, required: "CommitmentLevel") -> bool:
        return self.rank >= required.rank


_commitment_ranks = {
    CommitmentLevel.Processed: 0,
    CommitmentLevel.Confirmed: 1,
    CommitmentLevel.Finalized: 2,
}


ConfirmationStatus = Literal["fetching", "fetched", "error"]


class SignatureStatus(BaseModel):
    slot: int
    confirmations: Optional[int] = None
    err: Optional[Any] = None
    confirmation_status: Optional[CommitmentLevel] = None


class PendingConfirmation(BaseModel):
    signature: str
    operation_type: OperationType
    finality: CommitmentLevel = CommitmentLevel.Confirmed
    status: ConfirmationStatus = "fetching"
    extras: Optional[Any] = None
    error: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def resolved(self) -> bool:
        return self.status != "fetching"

    def resolve(self, status: ConfirmationStatus, error: str = ""):
        # fetching -> fetched | error, never back
        if self.resolved:
            raise ValueError(
                f"Confirmation of {self.signature} is already resolved as {self.status}"
            )
        if status == "fetching":
            raise ValueError("Cannot resolve a confirmation back to fetching")
        self.status = status
        self.error = error
        self.completed_at = datetime.now()


ConfirmationEventType = Literal["TxConfirmSuccess", "TxConfirmTimeout"]


class ConfirmationEvent(BaseModel):
    type: ConfirmationEventType
    confirmation: PendingConfirmation
