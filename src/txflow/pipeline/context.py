from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from txflow.errors import TxFlowError
from txflow.models import (OperationType, PendingConfirmation, Stage,
                           TransactionStatusInfo, TxContext, get_operation_name)

from .transcript import Transcript


class TxRun(object):
    """State of one pipeline run, created at run start and discarded with it."""

    def __init__(
        self,
        operation_type: OperationType,
        params: Dict[str, Any],
        context: TxContext,
    ) -> None:
        self.id = uuid4().hex
        self.operation_type = operation_type
        self.params = params
        self.context = context
        self.created_at = datetime.now()

        self.status = TransactionStatusInfo()
        self.transcript = Transcript(
            inputs={
                "operation": get_operation_name(operation_type),
                "params": params,
                "authority": context.authority,
                "multisig_id": context.multisig_id,
            }
        )

        self.signature: Optional[str] = None
        self.payload: Optional[str] = None
        self.confirmation: Optional[PendingConfirmation] = None
        self.error: Optional[TxFlowError] = None

        self._cancelled = False
        self._ended = False

    @property
    def stage(self) -> Stage:
        return self.status.current_operation

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        self._cancelled = True

    @property
    def ended(self) -> bool:
        return self._ended

    def end(self):
        self._ended = True

    @property
    def succeeded(self) -> bool:
        return self.stage == Stage.TransactionFinished
