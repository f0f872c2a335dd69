import logging
from typing import Any, Collection, Dict, List, Optional

from txflow.errors import (BuildFailure, ConfirmationError, FeatureDisabled,
                           InsufficientBalance, InvalidTransition,
                           PipelineBusy, SerializationFailure,
                           SignerRejected, SignerUnavailable,
                           SubmissionFailure, TxFlowError)
from txflow.fees import check_balance, describe_shortfall
from txflow.ledger import Ledger, LedgerError
from txflow.models import (CustomError, OperationType, Stage, TxContext,
                           UnsignedTransaction, describe_stage,
                           get_operation_name)
from txflow.router import DispatchRouter
from txflow.signer import Signer
from txflow.watcher import ConfirmationWatcher

from .context import TxRun
from .protocol_errors import match_protocol_error
from .stages import STAGE_RULES, is_valid_transition
from .status import StatusChannel

_logger = logging.getLogger(__name__)


class TransactionPipeline(object):
    """
    Drives one operation through preflight, build, sign, submit and hand-off
    to the confirmation watcher.

    Only one run can be active at a time. Every status change is published to
    ``status_channel``; once the run is cancelled nothing more is published.
    """

    def __init__(
        self,
        router: DispatchRouter,
        ledger: Ledger,
        watcher: ConfirmationWatcher,
        signer: Optional[Signer] = None,
        disabled_operations: Collection[OperationType] = (),
        status_channel: Optional[StatusChannel] = None,
    ) -> None:
        self.router = router
        self.ledger = ledger
        self.watcher = watcher
        self.signer = signer
        self.disabled_operations = frozenset(disabled_operations)
        if status_channel is None:
            status_channel = StatusChannel()
        self.status_channel = status_channel

        self._active: Optional[TxRun] = None
        self._last: Optional[TxRun] = None

    @property
    def busy(self) -> bool:
        return self._active is not None

    @property
    def active_run(self) -> Optional[TxRun]:
        return self._active

    @property
    def last_run(self) -> Optional[TxRun]:
        return self._last

    def create_run(
        self,
        operation_type: OperationType,
        params: Dict[str, Any],
        context: TxContext,
    ) -> TxRun:
        if self._active is not None:
            raise PipelineBusy()
        run = TxRun(operation_type, params, context)
        self._active = run
        self._last = run
        return run

    def cancel(self) -> bool:
        if self._active is None:
            return False
        _logger.info(f"Cancel transaction run {self._active.id}")
        self._active.cancel()
        return True

    async def run(
        self,
        operation_type: OperationType,
        params: Dict[str, Any],
        context: TxContext,
    ) -> TxRun:
        run = self.create_run(operation_type, params, context)
        return await self.execute(run)

    async def execute(self, run: TxRun) -> TxRun:
        assert run is self._active, "The run has not been created by this pipeline"
        try:
            _logger.info(
                f"Start {get_operation_name(run.operation_type)} run {run.id}"
            )
            self.status_channel.publish(run.status)
            await self._execute(run)
        finally:
            run.end()
            self._active = None

        if run.stage.is_failure:
            level = logging.ERROR
            if run.stage == Stage.TransactionStartFailure:
                level = logging.WARNING
            _logger.log(
                level,
                f"Run {run.id} ended at {run.stage.name}: {describe_stage(run.stage)}",
            )
            run.transcript.log(level, _logger)
        elif run.cancelled:
            _logger.info(f"Run {run.id} cancelled at {run.stage.name}")
        else:
            _logger.info(f"Run {run.id} finished, signature {run.signature}")
        return run

    def _advance(
        self,
        run: TxRun,
        dst: Stage,
        custom_error: Optional[CustomError] = None,
    ) -> bool:
        src = run.status.current_operation
        if not is_valid_transition(src, dst):
            raise InvalidTransition(src, dst)
        if STAGE_RULES[src].check_cancel and run.cancelled:
            return False

        run.status.last_operation = src
        run.status.current_operation = dst
        run.status.custom_error = custom_error
        _logger.debug(f"Run {run.id}: {src.name} -> {dst.name}")
        self.status_channel.publish(run.status)
        return True

    def _fail(
        self,
        run: TxRun,
        dst: Stage,
        error: TxFlowError,
        result: Optional[Dict[str, Any]] = None,
        custom_error: Optional[CustomError] = None,
    ):
        run.error = error
        if result is None:
            result = {}
        result["error"] = str(error)
        if self._advance(run, dst, custom_error):
            run.transcript.append(dst, result)
        else:
            self._note_cancelled(run, result)

    def _note_cancelled(self, run: TxRun, result: Optional[Dict[str, Any]] = None):
        if result is None:
            result = {}
        result["cancelled"] = True
        run.transcript.append(run.stage, result)

    async def _execute(self, run: TxRun):
        self._advance(run, Stage.TransactionStart)
        if not self._advance(run, Stage.InitTransaction):
            self._note_cancelled(run)
            return

        # preflight, nothing is built or sent when it fails
        if run.operation_type in self.disabled_operations:
            err = FeatureDisabled(run.operation_type)
            self._fail(
                run,
                Stage.TransactionStartFailure,
                err,
                custom_error=CustomError(title="Feature disabled", message=err.msg),
            )
            return

        context = run.context
        if not context.authority:
            self._fail(run, Stage.WalletNotFound, SignerUnavailable())
            return

        if context.fees is None or context.spendable_balance is None:
            self._fail(
                run,
                Stage.TransactionStartFailure,
                TxFlowError("Spendable balance or fees are unknown"),
            )
            return
        if not check_balance(context.spendable_balance, context.fees):
            err = InsufficientBalance(
                context.spendable_balance, context.fees.min_required
            )
            self._fail(
                run,
                Stage.TransactionStartFailure,
                err,
                result={
                    "balance": context.spendable_balance,
                    "network_fee": context.fees.network_fee,
                    "protocol_flat_fee": context.fees.protocol_flat_fee,
                },
                custom_error=CustomError(
                    title="Insufficient balance",
                    message=describe_shortfall(context.spendable_balance, context.fees),
                ),
            )
            return

        # build
        try:
            tx = await self.router.build(run.operation_type, run.params, context)
        except BuildFailure as e:
            self._fail(run, Stage.InitTransactionFailure, e)
            return
        except Exception as e:
            _logger.exception(e)
            self._fail(
                run,
                Stage.InitTransactionFailure,
                BuildFailure(f"{type(e).__name__}: {e}"),
            )
            return
        if tx is None:
            self._fail(
                run,
                Stage.InitTransactionFailure,
                BuildFailure("The instruction builder returned nothing"),
            )
            return

        if not self._advance(run, Stage.SignTransaction):
            self._note_cancelled(run)
            return
        run.transcript.append(Stage.SignTransaction, tx.summary())

        # sign
        if self.signer is None:
            self._fail(run, Stage.WalletNotFound, SignerUnavailable())
            return
        try:
            signed = await self.signer.sign(tx)
            payload = signed.serialize()
        except SignerUnavailable as e:
            self._fail(run, Stage.WalletNotFound, e)
            return
        except (SignerRejected, SerializationFailure) as e:
            self._fail(run, Stage.SignTransactionFailure, e)
            return
        except Exception as e:
            _logger.exception(e)
            self._fail(
                run,
                Stage.SignTransactionFailure,
                SignerRejected(f"{type(e).__name__}: {e}"),
            )
            return
        run.payload = payload

        if not self._advance(run, Stage.SendTransaction):
            self._note_cancelled(run)
            return
        run.transcript.append(
            Stage.SendTransaction,
            {"signer": self.signer.address, "signatures": len(signed.signatures)},
        )

        # submit
        try:
            signature = await self.ledger.submit(payload)
        except Exception as e:
            logs = e.logs if isinstance(e, LedgerError) else []
            error_text = "\n".join([str(e), *logs])
            protocol_error = match_protocol_error(
                error_text,
                run.operation_type,
                _operation_accounts(tx),
                context.multisig_id or context.authority,
            )
            custom_error = None
            if protocol_error is not None:
                custom_error = protocol_error.to_custom_error()
            self._fail(
                run,
                Stage.SendTransactionFailure,
                SubmissionFailure(str(e), payload, protocol_error),
                result={"payload": payload, "logs": logs},
                custom_error=custom_error,
            )
            return
        run.signature = signature

        # a submitted transaction is always handed to the watcher
        if not self._advance(run, Stage.ConfirmTransaction):
            result: Dict[str, Any] = {"signature": signature}
            try:
                await self._hand_off(run, signature)
            except ConfirmationError as e:
                run.error = e
                result["error"] = str(e)
            self._note_cancelled(run, result)
            return
        run.transcript.append(Stage.ConfirmTransaction, {"signature": signature})

        try:
            confirmation = await self._hand_off(run, signature)
        except ConfirmationError as e:
            self._fail(run, Stage.ConfirmTransactionFailure, e)
            return

        if not self._advance(run, Stage.TransactionFinished):
            self._note_cancelled(run, {"signature": signature})
            return
        run.transcript.append(
            Stage.TransactionFinished,
            {"signature": signature, "confirmation": confirmation.status},
        )

    async def _hand_off(self, run: TxRun, signature: str):
        extras: Dict[str, Any] = dict(run.context.extras or {})
        if run.context.is_multisig:
            extras["multisig_id"] = run.context.multisig_id
        try:
            confirmation = await self.watcher.watch(
                signature,
                run.operation_type,
                finality=run.context.finality,
                extras=extras or None,
            )
        except ConfirmationError:
            raise
        except Exception as e:
            _logger.exception(e)
            raise ConfirmationError(
                f"Cannot watch signature {signature}: {e}"
            ) from e
        run.confirmation = confirmation
        return confirmation


def _operation_accounts(tx: UnsignedTransaction) -> List[str]:
    # the operation's own instruction is the last one, also when wrapped
    if len(tx.instructions) == 0:
        return []
    return [a.pubkey for a in tx.instructions[-1].accounts]
