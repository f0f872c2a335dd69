import pytest
from anyio import create_task_group

from txflow.builders import (BuilderRegistry, MockInstructionBuilder,
                             MockProposalBuilder)
from txflow.ledger import MockLedger
from txflow.models import (CommitmentLevel, Fees, OperationType,
                           SignatureStatus, TxContext)
from txflow.pipeline import TransactionPipeline
from txflow.router import DispatchRouter
from txflow.signer import MockSigner
from txflow.watcher import ConfirmationWatcher, MemoryConfirmationCache


AUTHORITY = "Authority1111111111111111111111111111111111"
MULTISIG = "Multisig11111111111111111111111111111111111"


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture
def ledger():
    ledger = MockLedger()
    ledger.balances[AUTHORITY] = 1_000_000
    ledger.auto_status = SignatureStatus(
        slot=1, confirmation_status=CommitmentLevel.Confirmed
    )
    return ledger


@pytest.fixture
def signer():
    return MockSigner(address=AUTHORITY)


@pytest.fixture
def builder():
    return MockInstructionBuilder()


@pytest.fixture
def proposal_builder():
    return MockProposalBuilder()


@pytest.fixture
def registry(builder, proposal_builder):
    registry = BuilderRegistry(proposal_builder=proposal_builder)
    for operation_type in [
        OperationType.Transfer,
        OperationType.StreamCreate,
        OperationType.StreamClose,
        OperationType.TreasuryWithdraw,
        OperationType.UpgradeProgram,
        OperationType.ApproveTransaction,
    ]:
        registry.register(operation_type, builder)
    return registry


@pytest.fixture
def cache():
    return MemoryConfirmationCache(max_size=10)


@pytest.fixture
async def watcher(ledger, cache):
    watcher = ConfirmationWatcher(ledger, cache, poll_interval=0.01, timeout=2)
    async with create_task_group() as tg:
        await tg.start(watcher.start)
        yield watcher
        await watcher.stop()
        tg.cancel_scope.cancel()


@pytest.fixture
def pipeline(registry, ledger, watcher, signer):
    return TransactionPipeline(DispatchRouter(registry), ledger, watcher, signer=signer)


@pytest.fixture
def context():
    return TxContext(
        authority=AUTHORITY,
        spendable_balance=1_000_000,
        fees=Fees(network_fee=5000),
    )


@pytest.fixture
def multisig_context():
    return TxContext(
        authority=AUTHORITY,
        is_multisig=True,
        multisig_id=MULTISIG,
        proposal_title="Withdraw from treasury",
        spendable_balance=1_000_000,
        fees=Fees(network_fee=5000),
    )
