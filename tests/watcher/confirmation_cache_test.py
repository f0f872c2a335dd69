import pytest

from txflow import db
from txflow.config import DBConfig
from txflow.models import CommitmentLevel, OperationType, PendingConfirmation
from txflow.watcher import DbConfirmationCache, MemoryConfirmationCache


def make_confirmation(i: int) -> PendingConfirmation:
    confirmation = PendingConfirmation(
        signature=f"sig{i}",
        operation_type=OperationType.StreamCreate,
        finality=CommitmentLevel.Finalized,
        extras={"stream": f"stream{i}"},
    )
    confirmation.resolve("fetched")
    return confirmation


async def test_memory_cache_is_capped():
    cache = MemoryConfirmationCache(max_size=3)
    for i in range(5):
        await cache.save(make_confirmation(i))

    confirmations = await cache.load_all()
    assert [c.signature for c in confirmations] == ["sig2", "sig3", "sig4"]
    assert not (await cache.has("sig0"))
    assert await cache.has("sig4")

    await cache.clear()
    assert await cache.load_all() == []


@pytest.fixture
async def init_db(tmp_path):
    config = DBConfig.model_validate(
        {"driver": "sqlite", "filename": str(tmp_path / "txflow.db")}
    )
    await db.init(config)
    try:
        yield
    finally:
        await db.close()


async def test_db_cache(init_db):
    cache = DbConfirmationCache(max_size=3)

    pending = PendingConfirmation(signature="sig0", operation_type=OperationType.Transfer)
    await cache.save(pending)
    saved = await cache.get("sig0")
    assert saved is not None
    assert saved.status == "fetching"

    pending.resolve("error", "timeout")
    await cache.save(pending)
    saved = await cache.get("sig0")
    assert saved is not None
    assert saved.status == "error"
    assert saved.error == "timeout"
    assert saved.completed_at is not None

    for i in range(1, 5):
        await cache.save(make_confirmation(i))

    confirmations = await cache.load_all()
    assert [c.signature for c in confirmations] == ["sig2", "sig3", "sig4"]
    assert confirmations[0].extras == {"stream": "stream2"}
    assert confirmations[0].finality == CommitmentLevel.Finalized
    assert confirmations[0].operation_type == OperationType.StreamCreate
    assert await cache.get("sig0") is None

    await cache.clear()
    assert await cache.load_all() == []
