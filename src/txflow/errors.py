from typing import Optional

from txflow.models import CustomError, OperationType, Stage


class TxFlowError(Exception):
    error_type = "TxFlowError"

    def __init__(self, msg: str):
        self.msg = msg

    def __str__(self) -> str:
        return f"{self.error_type}: {self.msg}"


class InsufficientBalance(TxFlowError):
    error_type = "InsufficientBalance"

    def __init__(self, balance: int, required: int):
        self.balance = balance
        self.required = required
        super().__init__(
            f"Not enough balance ({balance}) to pay for network fees ({required})"
        )


class FeatureDisabled(TxFlowError):
    error_type = "FeatureDisabled"

    def __init__(self, operation_type: OperationType):
        self.operation_type = operation_type
        super().__init__(f"Operation {operation_type.name} is disabled")


class BuildFailure(TxFlowError):
    error_type = "BuildFailure"


class SignerUnavailable(TxFlowError):
    error_type = "SignerUnavailable"

    def __init__(self, msg: str = "Cannot start transaction! Wallet not found!"):
        super().__init__(msg)


class SignerRejected(TxFlowError):
    error_type = "SignerRejected"


class SerializationFailure(TxFlowError):
    error_type = "SerializationFailure"


class SubmissionFailure(TxFlowError):
    error_type = "SubmissionFailure"

    def __init__(
        self,
        msg: str,
        payload: str,
        protocol_error: Optional["CustomProtocolError"] = None,
    ):
        super().__init__(msg)
        # the payload may still land, keep it for manual resubmission
        self.payload = payload
        self.protocol_error = protocol_error


class ConfirmationTimeout(TxFlowError):
    error_type = "ConfirmationTimeout"


class ConfirmationError(TxFlowError):
    error_type = "ConfirmationError"


class CustomProtocolError(TxFlowError):
    error_type = "CustomProtocolError"

    def __init__(
        self, message: str, data: Optional[str] = None, title: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.data = data
        self.title = title

    def to_custom_error(self) -> CustomError:
        return CustomError(title=self.title, message=self.message, data=self.data)


class PipelineBusy(TxFlowError):
    error_type = "PipelineBusy"

    def __init__(self, msg: str = "Another transaction is in progress"):
        super().__init__(msg)


class InvalidTransition(Exception):
    def __init__(self, src: Stage, dst: Stage) -> None:
        self.src = src
        self.dst = dst

    def __str__(self) -> str:
        return f"Illegal stage transition {self.src.name} -> {self.dst.name}"
