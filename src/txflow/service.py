import logging
from typing import Any, Dict, Optional, Sequence

from anyio import TASK_STATUS_IGNORED, CancelScope, create_task_group
from anyio.abc import TaskGroup, TaskStatus

from txflow.errors import PipelineBusy, TxFlowError
from txflow.fees import FeeQuoter, solve_max_allocatable
from txflow.ledger import Ledger
from txflow.models import (AllocationResult, CommitmentLevel, OperationType,
                           PendingConfirmation, PercentFee, TxContext)
from txflow.pipeline import TransactionPipeline, TxRun
from txflow.watcher import ConfirmationReaction, ConfirmationWatcher

_logger = logging.getLogger(__name__)


class TxService(object):
    def __init__(
        self,
        pipeline: TransactionPipeline,
        fee_quoter: FeeQuoter,
        ledger: Ledger,
        watcher: ConfirmationWatcher,
    ) -> None:
        self.pipeline = pipeline
        self.fee_quoter = fee_quoter
        self.ledger = ledger
        self.watcher = watcher

        self._tg: Optional[TaskGroup] = None
        self._cancel_scope: Optional[CancelScope] = None

    async def prepare_context(
        self, operation_type: OperationType, context: TxContext
    ) -> TxContext:
        update: Dict[str, Any] = {}
        if context.fees is None:
            update["fees"] = await self.fee_quoter.get_fees(operation_type)
        if context.spendable_balance is None and context.authority:
            # fees are always paid by the connected wallet, also for proposals
            update["spendable_balance"] = await self.ledger.get_balance(
                context.authority
            )
        if len(update) == 0:
            return context
        return context.model_copy(update=update)

    async def run(
        self,
        operation_type: OperationType,
        params: Dict[str, Any],
        context: TxContext,
    ) -> TxRun:
        if self.pipeline.busy:
            raise PipelineBusy()
        context = await self.prepare_context(operation_type, context)
        return await self.pipeline.run(operation_type, params, context)

    async def submit(
        self,
        operation_type: OperationType,
        params: Dict[str, Any],
        context: TxContext,
    ) -> TxRun:
        """Start a run in background and return it right away."""
        if self._tg is None:
            raise TxFlowError("The transaction service is not running")
        if self.pipeline.busy:
            raise PipelineBusy()
        context = await self.prepare_context(operation_type, context)
        run = self.pipeline.create_run(operation_type, params, context)
        self._tg.start_soon(self.pipeline.execute, run)
        return run

    def cancel(self) -> bool:
        return self.pipeline.cancel()

    def current_run(self) -> Optional[TxRun]:
        if self.pipeline.active_run is not None:
            return self.pipeline.active_run
        return self.pipeline.last_run

    def solve_max_allocatable(
        self, pool_balance: int, percent_fee: PercentFee, recipients: int = 1
    ) -> AllocationResult:
        return solve_max_allocatable(pool_balance, percent_fee, recipients)

    async def watch_confirmation(
        self,
        signature: str,
        operation_type: OperationType,
        finality: CommitmentLevel = CommitmentLevel.Confirmed,
        extras: Optional[Any] = None,
        reactions: Optional[Sequence[ConfirmationReaction]] = None,
    ) -> PendingConfirmation:
        return await self.watcher.watch(
            signature,
            operation_type,
            finality=finality,
            extras=extras,
            reactions=reactions,
        )

    async def clear_confirmation_history(self):
        await self.watcher.clear_history()

    async def start(self, *, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        assert self._cancel_scope is None, "The transaction service has already started."

        try:
            self._cancel_scope = CancelScope()
            with self._cancel_scope:
                async with create_task_group() as tg:
                    self._tg = tg
                    await tg.start(self.watcher.start)
                    _logger.info("Transaction service started")
                    task_status.started()
        finally:
            self._tg = None
            self._cancel_scope = None

    async def stop(self):
        self.pipeline.cancel()
        await self.watcher.stop()
        if self._cancel_scope is not None and not self._cancel_scope.cancel_called:
            self._cancel_scope.cancel()


_default_service: Optional[TxService] = None


def get_service() -> TxService:
    assert _default_service is not None, "TxService has not been set."

    return _default_service


def set_service(service: TxService):
    global _default_service

    _default_service = service
