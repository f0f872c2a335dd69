from typing import List, Optional

import pytest
from anyio import WouldBlock, create_task_group

from txflow.builders import BuilderRegistry, MockInstructionBuilder
from txflow.errors import (BuildFailure, ConfirmationError, FeatureDisabled,
                           InsufficientBalance, InvalidTransition,
                           PipelineBusy, SignerRejected, SignerUnavailable,
                           SubmissionFailure)
from txflow.ledger import LedgerError, MockLedger
from txflow.models import (Fees, OperationType, Stage, TransactionStatusInfo,
                           TxContext, UnsignedTransaction, SignedTransaction)
from txflow.pipeline import TransactionPipeline, is_valid_path
from txflow.router import DispatchRouter
from txflow.signer import MockSigner
from txflow.watcher import ConfirmationWatcher, MemoryConfirmationCache


def drain(receiver) -> List[TransactionStatusInfo]:
    res = []
    while True:
        try:
            res.append(receiver.receive_nowait())
        except WouldBlock:
            break
    return res


async def run_and_collect(pipeline: TransactionPipeline, operation_type, params, context):
    with pipeline.status_channel.subscribe() as receiver:
        run = await pipeline.run(operation_type, params, context)
        statuses = drain(receiver)
    # the first status is the latest one at subscription time
    return run, [s.current_operation for s in statuses[1:]]


async def test_run_success(
    pipeline: TransactionPipeline,
    context: TxContext,
    ledger: MockLedger,
    watcher: ConfirmationWatcher,
):
    params = {"accounts": ["A1", "A2", "A3"]}
    run, stages = await run_and_collect(
        pipeline, OperationType.TreasuryWithdraw, params, context
    )

    assert stages == [
        Stage.Idle,
        Stage.TransactionStart,
        Stage.InitTransaction,
        Stage.SignTransaction,
        Stage.SendTransaction,
        Stage.ConfirmTransaction,
        Stage.TransactionFinished,
    ]
    assert is_valid_path(stages)
    assert run.succeeded
    assert run.ended
    assert run.error is None
    assert run.status.last_operation == Stage.ConfirmTransaction
    assert run.signature == "mock-signature-1"
    assert ledger.submitted[run.signature] == run.payload
    assert not pipeline.busy

    entries = run.transcript.entries
    assert [e.stage for e in entries] == [
        Stage.SignTransaction,
        Stage.SendTransaction,
        Stage.ConfirmTransaction,
        Stage.TransactionFinished,
    ]
    assert entries[0].inputs is not None
    assert entries[0].inputs["params"] == params
    assert all(e.inputs is None for e in entries[1:])

    confirmation = await watcher.wait(run.signature, timeout=5)
    assert confirmation.status == "fetched"
    assert confirmation.operation_type == OperationType.TreasuryWithdraw


async def test_preflight_failure(
    pipeline: TransactionPipeline,
    builder: MockInstructionBuilder,
    signer: MockSigner,
    ledger: MockLedger,
    watcher: ConfirmationWatcher,
    context: TxContext,
):
    context = context.model_copy(
        update={
            "spendable_balance": 5,
            "fees": Fees(network_fee=5, protocol_flat_fee=10),
        }
    )
    run, stages = await run_and_collect(
        pipeline, OperationType.TreasuryWithdraw, {}, context
    )

    assert stages[-1] == Stage.TransactionStartFailure
    assert is_valid_path(stages)
    assert isinstance(run.error, InsufficientBalance)
    assert run.status.custom_error is not None
    assert run.status.custom_error.title == "Insufficient balance"
    assert len(run.transcript) == 1
    assert run.transcript.entries[0].stage == Stage.TransactionStartFailure
    assert run.transcript.entries[0].inputs is not None

    assert builder.calls == []
    assert signer.signed == []
    assert ledger.calls == []
    assert watcher.tracked == []


async def test_preflight_pass_with_enough_balance(
    pipeline: TransactionPipeline, context: TxContext
):
    context = context.model_copy(
        update={
            "spendable_balance": 500,
            "fees": Fees(network_fee=5, protocol_flat_fee=10),
        }
    )
    run = await pipeline.run(OperationType.TreasuryWithdraw, {}, context)
    assert run.stage == Stage.TransactionFinished


async def test_feature_disabled(
    registry: BuilderRegistry,
    ledger: MockLedger,
    watcher: ConfirmationWatcher,
    signer: MockSigner,
    builder: MockInstructionBuilder,
    context: TxContext,
):
    pipeline = TransactionPipeline(
        DispatchRouter(registry),
        ledger,
        watcher,
        signer=signer,
        disabled_operations=[OperationType.StreamCreate],
    )
    run = await pipeline.run(OperationType.StreamCreate, {}, context)
    assert run.stage == Stage.TransactionStartFailure
    assert isinstance(run.error, FeatureDisabled)
    assert run.status.custom_error is not None
    assert "disabled" in run.status.custom_error.message
    assert builder.calls == []


async def test_signer_rejection(
    registry: BuilderRegistry,
    ledger: MockLedger,
    watcher: ConfirmationWatcher,
    cache: MemoryConfirmationCache,
    context: TxContext,
):
    signer = MockSigner(address=context.authority, reject=True)
    pipeline = TransactionPipeline(DispatchRouter(registry), ledger, watcher, signer=signer)

    run, stages = await run_and_collect(
        pipeline, OperationType.TreasuryWithdraw, {}, context
    )
    assert stages[-2:] == [Stage.SignTransaction, Stage.SignTransactionFailure]
    assert is_valid_path(stages)
    assert isinstance(run.error, SignerRejected)
    assert run.signature is None
    assert ledger.submitted == {}
    assert watcher.tracked == []
    assert await cache.load_all() == []


async def test_wallet_not_found(
    registry: BuilderRegistry,
    ledger: MockLedger,
    watcher: ConfirmationWatcher,
    context: TxContext,
):
    pipeline = TransactionPipeline(DispatchRouter(registry), ledger, watcher, signer=None)
    run = await pipeline.run(OperationType.TreasuryWithdraw, {}, context)
    assert run.stage == Stage.WalletNotFound
    assert run.status.last_operation == Stage.SignTransaction
    assert isinstance(run.error, SignerUnavailable)

    context = context.model_copy(update={"authority": ""})
    run = await pipeline.run(OperationType.TreasuryWithdraw, {}, context)
    assert run.stage == Stage.WalletNotFound
    assert run.status.last_operation == Stage.InitTransaction


async def test_build_failure(
    registry: BuilderRegistry,
    pipeline: TransactionPipeline,
    signer: MockSigner,
    context: TxContext,
):
    registry.register(OperationType.Transfer, MockInstructionBuilder(error=RuntimeError("boom")))
    run = await pipeline.run(OperationType.Transfer, {}, context)
    assert run.stage == Stage.InitTransactionFailure
    assert isinstance(run.error, BuildFailure)
    assert "boom" in run.error.msg

    registry.register(OperationType.Transfer, MockInstructionBuilder(empty=True))
    run = await pipeline.run(OperationType.Transfer, {}, context)
    assert run.stage == Stage.InitTransactionFailure

    run = await pipeline.run(OperationType.CreateMint, {}, context)
    assert run.stage == Stage.InitTransactionFailure
    assert signer.signed == []


async def test_submission_error_mapping(
    pipeline: TransactionPipeline,
    ledger: MockLedger,
    watcher: ConfirmationWatcher,
    context: TxContext,
):
    ledger.submit_error = LedgerError(
        "sendTransaction",
        "Transaction simulation failed: Error processing Instruction 0: "
        "custom program error: 0x1794",
        code=-32002,
        logs=["Program log: Instruction: TreasuryWithdraw"],
    )
    params = {"accounts": ["A1", "A2", "Treasury", "A4"]}
    run, stages = await run_and_collect(
        pipeline, OperationType.TreasuryWithdraw, params, context
    )

    assert stages[-1] == Stage.SendTransactionFailure
    assert is_valid_path(stages)
    assert isinstance(run.error, SubmissionFailure)
    assert run.payload is not None
    assert run.error.payload == run.payload
    assert run.error.protocol_error is not None
    assert run.transcript.entries[-1].result["payload"] == run.payload

    custom_error = run.status.custom_error
    assert custom_error is not None
    assert custom_error.title == "Insufficient balance"
    # accounts are [authority, *params accounts], the treasury is at index 3
    assert custom_error.data == "Treasury"
    assert watcher.tracked == []


async def test_multisig_run_signs_proposal(
    pipeline: TransactionPipeline,
    signer: MockSigner,
    multisig_context: TxContext,
    watcher: ConfirmationWatcher,
):
    run = await pipeline.run(
        OperationType.TreasuryWithdraw, {"accounts": ["A1"]}, multisig_context
    )
    assert run.stage == Stage.TransactionFinished
    assert len(signer.signed) == 1
    assert len(signer.signed[0].instructions) == 2

    confirmation = await watcher.wait(run.signature, timeout=5)  # type: ignore
    assert confirmation.extras["multisig_id"] == multisig_context.multisig_id


class CancelOnSubmitLedger(MockLedger):
    def __init__(self) -> None:
        super().__init__()
        self.pipeline: Optional[TransactionPipeline] = None

    async def submit(self, payload: str) -> str:
        signature = await super().submit(payload)
        assert self.pipeline is not None
        self.pipeline.cancel()
        return signature


async def test_cancel_after_submit_still_confirms(
    registry: BuilderRegistry, ledger: MockLedger, signer: MockSigner, context: TxContext
):
    cancel_ledger = CancelOnSubmitLedger()
    cancel_ledger.auto_status = ledger.auto_status
    cache = MemoryConfirmationCache()
    watcher = ConfirmationWatcher(cancel_ledger, cache, poll_interval=0.01, timeout=2)
    pipeline = TransactionPipeline(
        DispatchRouter(registry), cancel_ledger, watcher, signer=signer
    )
    cancel_ledger.pipeline = pipeline

    async with create_task_group() as tg:
        await tg.start(watcher.start)

        run, stages = await run_and_collect(
            pipeline, OperationType.TreasuryWithdraw, {}, context
        )
        assert run.cancelled
        assert run.signature is not None
        # nothing is published after the cancellation
        assert stages[-1] == Stage.SendTransaction
        assert run.stage == Stage.SendTransaction
        assert run.transcript.entries[-1].result["cancelled"]
        assert [e.stage for e in run.transcript] == [
            Stage.SignTransaction,
            Stage.SendTransaction,
            Stage.SendTransaction,
        ]
        assert run.transcript.entries[-1].result["signature"] == run.signature

        confirmation = await watcher.wait(run.signature, timeout=5)
        assert confirmation.status == "fetched"
        assert (await cache.get(run.signature)) is not None

        await watcher.stop()


class CancelOnSignSigner(MockSigner):
    def __init__(self, address: str) -> None:
        super().__init__(address=address)
        self.pipeline: Optional[TransactionPipeline] = None

    async def sign(self, tx: UnsignedTransaction) -> SignedTransaction:
        assert self.pipeline is not None
        self.pipeline.cancel()
        return await super().sign(tx)


async def test_cancel_before_submit(
    registry: BuilderRegistry,
    ledger: MockLedger,
    watcher: ConfirmationWatcher,
    context: TxContext,
):
    signer = CancelOnSignSigner(context.authority)
    pipeline = TransactionPipeline(DispatchRouter(registry), ledger, watcher, signer=signer)
    signer.pipeline = pipeline

    run = await pipeline.run(OperationType.TreasuryWithdraw, {}, context)
    assert run.cancelled
    assert run.stage == Stage.SignTransaction
    assert ledger.submitted == {}
    # the transcript never records a stage the run did not enter
    assert [e.stage for e in run.transcript] == [
        Stage.SignTransaction,
        Stage.SignTransaction,
    ]
    assert run.transcript.entries[-1].result["cancelled"]
    assert not pipeline.cancel()


async def test_handoff_failure(
    registry: BuilderRegistry, ledger: MockLedger, signer: MockSigner, context: TxContext
):
    # the watcher is never started
    watcher = ConfirmationWatcher(ledger, MemoryConfirmationCache())
    pipeline = TransactionPipeline(DispatchRouter(registry), ledger, watcher, signer=signer)

    run = await pipeline.run(OperationType.TreasuryWithdraw, {}, context)
    assert run.stage == Stage.ConfirmTransactionFailure
    assert isinstance(run.error, ConfirmationError)
    assert run.signature is not None


async def test_busy(pipeline: TransactionPipeline, context: TxContext):
    run = pipeline.create_run(OperationType.TreasuryWithdraw, {}, context)
    assert pipeline.busy
    with pytest.raises(PipelineBusy):
        await pipeline.run(OperationType.Transfer, {}, context)

    await pipeline.execute(run)
    assert not pipeline.busy
    assert pipeline.last_run is run


async def test_illegal_transition(pipeline: TransactionPipeline, context: TxContext):
    run = pipeline.create_run(OperationType.TreasuryWithdraw, {}, context)
    with pytest.raises(InvalidTransition):
        pipeline._advance(run, Stage.SendTransaction)
    await pipeline.execute(run)
