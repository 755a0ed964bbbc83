# tests/test_rewards.py

from eth_utils import to_checksum_address

from migrator.migrate.rewards import reserve_bands
from migrator.types import PairReserves

from tests.conftest import CLAIM_PAIR, E18, OLD_SECONDARY
from tests.fakes import ACCOUNT


def test_reserve_bands_default_slippage():
    bands = reserve_bands(PairReserves(reserve0=100 * E18, reserve1=200 * E18), 9900, 10000)

    assert bands == [99 * E18, 100 * E18, 198 * E18, 200 * E18]


def test_reserve_bands_floor():
    assert reserve_bands(PairReserves(reserve0=101, reserve1=3), 9900, 10000) == [99, 101, 2, 3]


def test_settle_sends_one_claim(driver, chain, old_secondary):
    old_secondary.pending[(0, ACCOUNT)] = 10 * E18
    old_secondary.stake(0, ACCOUNT, 0, reward=0)
    old_secondary.stake(4, ACCOUNT, 0, reward=5 * E18)
    rewards = driver.secondary_migrator(ACCOUNT).rewards

    assert rewards.collect(0) == 10 * E18
    assert rewards.collect(4) == 5 * E18
    assert rewards.collect(5) == 0
    claim = rewards.settle()

    assert claim.ok
    assert claim.total == 15 * E18
    assert claim.tx_hash == chain.sent[-1].tx_hash
    assert chain.calls_to("safeClaim", OLD_SECONDARY) == [
        ([99 * E18, 100 * E18, 198 * E18, 200 * E18], [0, 4], [10 * E18, 5 * E18], 22, to_checksum_address(ACCOUNT))
    ]


def test_settle_with_empty_batch_sends_nothing(driver, chain):
    rewards = driver.secondary_migrator(ACCOUNT).rewards

    assert rewards.settle() is None
    assert chain.sent == []


def test_settle_is_once_per_batch(driver, chain, old_secondary):
    old_secondary.pending[(0, ACCOUNT)] = E18
    rewards = driver.secondary_migrator(ACCOUNT).rewards
    rewards.collect(0)

    rewards.settle()
    assert rewards.settle() is None
    assert len(chain.calls_to("safeClaim")) == 1


def test_failed_claim_is_reported_not_raised(driver, chain, old_secondary):
    old_secondary.pending[(0, ACCOUNT)] = E18
    chain.revert(OLD_SECONDARY, "safeClaim")
    rewards = driver.secondary_migrator(ACCOUNT).rewards
    rewards.collect(0)

    claim = rewards.settle()

    assert not claim.ok
    assert "reverted" in claim.error
    assert claim.position_ids == [0]


def test_unreadable_pair_fails_claim(driver, chain, old_secondary):
    old_secondary.pending[(0, ACCOUNT)] = E18
    chain.fail_reads(CLAIM_PAIR, "getReserves", times=3)
    rewards = driver.secondary_migrator(ACCOUNT).rewards
    rewards.collect(0)

    claim = rewards.settle()

    assert not claim.ok
    assert chain.calls_to("safeClaim") == []


def test_custom_claim_settings(driver, chain, old_secondary, settings):
    settings.claim_min_reserve_bps = 9500
    settings.claim_pool_id = 54
    old_secondary.pending[(0, ACCOUNT)] = E18
    rewards = driver.secondary_migrator(ACCOUNT).rewards
    rewards.collect(0)

    rewards.settle()

    bands, _, _, lp_pid, _ = chain.calls_to("safeClaim")[0]
    assert bands == [95 * E18, 100 * E18, 190 * E18, 200 * E18]
    assert lp_pid == 54
