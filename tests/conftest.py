# tests/conftest.py
"""
pytest configuration and fixtures for migrator testing
"""

import pytest

from migrator.core.config import ContractsConfig, MigrationConfig
from migrator.core.logging import MigratorLogger
from migrator.execution.retry import RetryExecutor
from migrator.execution.transactions import TransactionExecutor
from migrator.migrate.driver import MigrationDriver
from migrator.storage.checkpoint_store import CheckpointStore
from migrator.storage.local import MemoryStore

from tests.fakes import (
    ACCOUNT,
    FakeErc20,
    FakeLedgerClient,
    FakeMasterChef,
    FakePair,
    FakeSousChef,
    FakeTicket,
    addr,
)


OLD_PRIMARY = addr("c1")
NEW_PRIMARY = addr("c2")
OLD_SECONDARY = addr("5c1")
NEW_SECONDARY = addr("5c2")
LP_TOKEN = addr("1b")
STAKE_TOKEN = addr("70")
TICKET = addr("71c")
CLAIM_PAIR = addr("ba1")

E18 = 10 ** 18


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    MigratorLogger.reset()
    MigratorLogger.configure(log_level="DEBUG", console_enabled=False, file_enabled=False)
    yield
    MigratorLogger.reset()


@pytest.fixture
def chain():
    """Fake ledger holding both chef generations, their tokens and the claim pair"""
    client = FakeLedgerClient(account=ACCOUNT, now=100)
    client.add(FakeMasterChef(client, OLD_PRIMARY))
    client.add(FakeMasterChef(client, NEW_PRIMARY))
    client.add(FakeSousChef(client, OLD_SECONDARY, pair=CLAIM_PAIR))
    client.add(FakeSousChef(client, NEW_SECONDARY, pair=CLAIM_PAIR))
    client.add(FakeErc20(client, LP_TOKEN))
    client.add(FakeErc20(client, STAKE_TOKEN))
    client.add(FakeTicket(client, TICKET))
    client.add(FakePair(client, CLAIM_PAIR, reserve0=100 * E18, reserve1=200 * E18))
    return client


@pytest.fixture
def old_primary(chain) -> FakeMasterChef:
    return chain.contract(OLD_PRIMARY)


@pytest.fixture
def new_primary(chain) -> FakeMasterChef:
    return chain.contract(NEW_PRIMARY)


@pytest.fixture
def old_secondary(chain) -> FakeSousChef:
    return chain.contract(OLD_SECONDARY)


@pytest.fixture
def new_secondary(chain) -> FakeSousChef:
    return chain.contract(NEW_SECONDARY)


@pytest.fixture
def lp_token(chain) -> FakeErc20:
    return chain.contract(LP_TOKEN)


@pytest.fixture
def stake_token(chain) -> FakeErc20:
    return chain.contract(STAKE_TOKEN)


@pytest.fixture
def ticket(chain) -> FakeTicket:
    return chain.contract(TICKET)


@pytest.fixture
def contracts() -> ContractsConfig:
    return ContractsConfig(
        old_primary=OLD_PRIMARY,
        new_primary=NEW_PRIMARY,
        old_secondary=OLD_SECONDARY,
        new_secondary=NEW_SECONDARY,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def checkpoints(store) -> CheckpointStore:
    return CheckpointStore(store)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def retry(sleeps) -> RetryExecutor:
    return RetryExecutor(max_attempts=3, delay_ms=1000, sleep=sleeps.append)


@pytest.fixture
def settings() -> MigrationConfig:
    return MigrationConfig()


@pytest.fixture
def driver(chain, contracts, checkpoints, retry, settings) -> MigrationDriver:
    return MigrationDriver(
        client=chain,
        contracts=contracts,
        checkpoints=checkpoints,
        retry=retry,
        executor=TransactionExecutor(chain),
        settings=settings,
    )
