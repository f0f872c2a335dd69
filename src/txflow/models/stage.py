from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Stage(Enum):
    Idle = "idle"
    TransactionStart = "transaction_start"
    TransactionStartFailure = "transaction_start_failure"
    InitTransaction = "init_transaction"
    InitTransactionFailure = "init_transaction_failure"
    SignTransaction = "sign_transaction"
    SignTransactionFailure = "sign_transaction_failure"
    SendTransaction = "send_transaction"
    SendTransactionFailure = "send_transaction_failure"
    ConfirmTransaction = "confirm_transaction"
    ConfirmTransactionFailure = "confirm_transaction_failure"
    TransactionFinished = "transaction_finished"
    WalletNotFound = "wallet_not_found"

    @property
    def is_failure(self) -> bool:
        return self in FAILURE_STAGES

    @property
    def is_terminal(self) -> bool:
        return self in FAILURE_STAGES or self == Stage.TransactionFinished


FAILURE_STAGES = frozenset(
    [
        Stage.TransactionStartFailure,
        Stage.InitTransactionFailure,
        Stage.SignTransactionFailure,
        Stage.SendTransactionFailure,
        Stage.ConfirmTransactionFailure,
        Stage.WalletNotFound,
    ]
)


_stage_descriptions = {
    Stage.WalletNotFound: "Wallet not found",
    Stage.TransactionStart: "Collecting transaction data",
    Stage.TransactionStartFailure: "Cannot start transaction",
    Stage.InitTransaction: "Init transaction",
    Stage.InitTransactionFailure: "Could not init transaction",
    Stage.SignTransaction: "Waiting for wallet approval",
    Stage.SignTransactionFailure: "Transaction rejected",
    Stage.SendTransaction: "Sending transaction",
    Stage.SendTransactionFailure: "Failure submitting transaction",
    Stage.ConfirmTransaction: "Confirming transaction",
    Stage.ConfirmTransactionFailure: "Confirm transaction failed",
    Stage.TransactionFinished: "Transaction finished",
}


def describe_stage(stage: Stage) -> str:
    return _stage_descriptions.get(stage, "Idle")


class CustomError(BaseModel):
    title: Optional[str] = None
    message: str
    data: Optional[str] = None


class TransactionStatusInfo(BaseModel):
    last_operation: Stage = Stage.Idle
    current_operation: Stage = Stage.Idle
    custom_error: Optional[CustomError] = None
