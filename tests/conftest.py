import pytest

from cartwright import EngineConfig
from cartwright.catalog import MemoryCatalog
from cartwright.promotions import MemoryOrders, MemoryPromotions
from cartwright.redemption import MemoryRedemptionStore, RedemptionLedger, create_database

from builders import NOW, TENANT


@pytest.fixture
def catalog() -> MemoryCatalog:
    return MemoryCatalog()


@pytest.fixture
def orders() -> MemoryOrders:
    return MemoryOrders()


@pytest.fixture
def promotions() -> MemoryPromotions:
    return MemoryPromotions()


@pytest.fixture
def store() -> MemoryRedemptionStore:
    return MemoryRedemptionStore(clock=lambda: NOW)


@pytest.fixture
def ledger(store: MemoryRedemptionStore) -> RedemptionLedger:
    return RedemptionLedger(TENANT, store)


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig().with_clock(lambda: NOW)


@pytest.fixture
async def session_factory():
    factory, engine = await create_database()
    try:
        yield factory
    finally:
        await engine.dispose()
