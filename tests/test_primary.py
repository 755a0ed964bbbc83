# tests/test_primary.py

import pytest

from migrator.storage.checkpoint_store import CheckpointStore
from migrator.storage.local import JsonFileStore
from migrator.types import (
    CheckpointKey,
    MAX_UINT256,
    PositionOutcome,
    SkipReason,
    Subsystem,
    ZERO_ADDRESS,
)

from tests.conftest import E18, LP_TOKEN, NEW_PRIMARY, OLD_PRIMARY, TICKET
from tests.fakes import ACCOUNT


def checkpoint_key(pid):
    return CheckpointKey(account=ACCOUNT, position_id=pid, subsystem=Subsystem.PRIMARY)


@pytest.fixture
def add_pool(old_primary, new_primary):
    def _add_pool(pid, staked=0, alloc_point=100, pool_type=0, ticket=ZERO_ADDRESS):
        old_primary.set_pool(pid, LP_TOKEN, pool_type=pool_type, ticket=ticket)
        new_primary.set_pool(pid, LP_TOKEN, alloc_point=alloc_point, pool_type=pool_type, ticket=ticket)
        if staked:
            old_primary.stake(pid, ACCOUNT, staked)
    return _add_pool


@pytest.fixture
def migrator(driver):
    return driver.primary_migrator(ACCOUNT)


# === LP positions ===

def test_migrates_staked_lp(migrator, add_pool, chain, new_primary, lp_token, checkpoints):
    add_pool(0, staked=10 * E18)

    result = migrator.migrate_position(0)

    assert result.outcome is PositionOutcome.COMPLETED
    assert result.withdrawn == 10 * E18
    assert result.deposited == 10 * E18
    assert chain.calls_to("withdraw", OLD_PRIMARY) == [(0, 10 * E18)]
    assert chain.calls_to("approve", LP_TOKEN) == [(NEW_PRIMARY, MAX_UINT256)]
    assert chain.calls_to("deposit", NEW_PRIMARY) == [(0, 10 * E18)]
    assert new_primary.users[(0, ACCOUNT)] == 10 * E18
    assert lp_token.balanceOf(ACCOUNT) == 0
    assert checkpoints.get(checkpoint_key(0)) is None


def test_rerun_after_completion_is_no_funds(migrator, add_pool, chain):
    add_pool(0, staked=10 * E18)
    migrator.migrate_position(0)
    sent = len(chain.sent)

    result = migrator.migrate_position(0)

    assert result.outcome is PositionOutcome.SKIPPED
    assert result.reason is SkipReason.NO_FUNDS
    assert len(chain.sent) == sent


def test_empty_position_sends_nothing(migrator, add_pool, chain):
    add_pool(0)

    result = migrator.migrate_position(0)

    assert result.reason is SkipReason.NO_FUNDS
    assert chain.sent == []


def test_failed_deposit_resumes_without_second_withdraw(migrator, add_pool, chain, new_primary, checkpoints):
    add_pool(0, staked=10 * E18)
    chain.revert(NEW_PRIMARY, "deposit")

    failed = migrator.migrate_position(0)

    assert failed.outcome is PositionOutcome.FAILED
    assert "reverted" in failed.error
    assert checkpoints.get(checkpoint_key(0)).quantity == 10 * E18

    chain.reverts.clear()
    resumed = migrator.migrate_position(0)

    assert resumed.outcome is PositionOutcome.COMPLETED
    assert resumed.recovered
    assert resumed.deposited == 10 * E18
    assert len(chain.calls_to("withdraw", OLD_PRIMARY)) == 1
    assert new_primary.users[(0, ACCOUNT)] == 10 * E18
    assert checkpoints.get(checkpoint_key(0)) is None


def test_inactive_destination_keeps_checkpoint(migrator, add_pool, chain, lp_token, checkpoints):
    add_pool(0, staked=10 * E18, alloc_point=0)

    result = migrator.migrate_position(0)

    assert result.reason is SkipReason.INACTIVE_DESTINATION
    assert chain.calls_to("deposit", NEW_PRIMARY) == []
    assert chain.calls_to("approve", LP_TOKEN) == []
    assert lp_token.balanceOf(ACCOUNT) == 10 * E18
    assert checkpoints.get(checkpoint_key(0)).quantity == 10 * E18


def test_recovered_position_rechecks_destination(migrator, add_pool, chain, new_primary, checkpoints):
    add_pool(0, staked=10 * E18, alloc_point=0)
    assert migrator.migrate_position(0).reason is SkipReason.INACTIVE_DESTINATION

    new_primary.set_pool(0, LP_TOKEN, alloc_point=100)
    resumed = migrator.migrate_position(0)

    assert resumed.outcome is PositionOutcome.COMPLETED
    assert resumed.recovered
    assert resumed.deposited == 10 * E18
    assert len(chain.calls_to("withdraw", OLD_PRIMARY)) == 1
    assert checkpoints.get(checkpoint_key(0)) is None


def test_dust_is_not_deposited(migrator, add_pool, chain, checkpoints):
    add_pool(0, staked=1)

    result = migrator.migrate_position(0)

    assert result.reason is SkipReason.DUST
    assert chain.calls_to("deposit", NEW_PRIMARY) == []
    assert checkpoints.get(checkpoint_key(0)) is None


def test_deposit_clamped_to_wallet_balance(migrator, add_pool, chain, old_primary):
    add_pool(0, staked=10 * E18)
    old_primary.withdraw_fee_bps = 100
    old_primary.withdraw_events[0] = lambda pid, received: [
        old_primary.event("Withdraw", user=ACCOUNT, pid=pid, amount=10 * E18)
    ]

    result = migrator.migrate_position(0)

    assert result.withdrawn == 10 * E18
    assert result.deposited == 99 * E18 // 10
    assert chain.calls_to("deposit", NEW_PRIMARY) == [(0, 99 * E18 // 10)]


def test_missing_withdraw_event_uses_haircut(migrator, add_pool, chain, old_primary, lp_token, caplog):
    add_pool(0, staked=10 * E18)
    old_primary.withdraw_events[0] = lambda pid, received: []

    result = migrator.migrate_position(0)

    assert result.withdrawn == 995 * E18 // 100
    assert chain.calls_to("deposit", NEW_PRIMARY) == [(0, 995 * E18 // 100)]
    assert lp_token.balanceOf(ACCOUNT) == 5 * E18 // 100
    assert any("Could not find Withdraw event" in r.getMessage() for r in caplog.records)


def test_unsaved_checkpoint_is_reported(driver, add_pool, tmp_path, caplog):
    path = tmp_path / "migration.json"
    path.write_text("{not json")
    driver.checkpoints = CheckpointStore(JsonFileStore(path))
    add_pool(0, staked=10 * E18)

    result = driver.primary_migrator(ACCOUNT).migrate_position(0)

    assert result.outcome is PositionOutcome.COMPLETED
    messages = [r.getMessage() for r in caplog.records]
    assert "Checkpoint not saved, position cannot resume if the deposit fails" in messages
    assert "Withdrawal complete, checkpoint saved" not in messages


def test_sufficient_allowance_skips_approve(migrator, add_pool, chain, lp_token):
    add_pool(0, staked=10 * E18)
    lp_token.allowances[(ACCOUNT, NEW_PRIMARY)] = MAX_UINT256

    migrator.migrate_position(0)

    assert chain.calls_to("approve", LP_TOKEN) == []
    assert chain.calls_to("deposit", NEW_PRIMARY) == [(0, 10 * E18)]


def test_reverted_withdraw_leaves_no_checkpoint(migrator, add_pool, chain, checkpoints):
    add_pool(0, staked=10 * E18)
    chain.revert(OLD_PRIMARY, "withdraw")

    result = migrator.migrate_position(0)

    assert result.outcome is PositionOutcome.FAILED
    assert checkpoints.get(checkpoint_key(0)) is None
    assert chain.calls_to("deposit", NEW_PRIMARY) == []


def test_transient_read_failure_is_retried(migrator, add_pool, chain, sleeps):
    add_pool(0, staked=10 * E18)
    chain.fail_reads(OLD_PRIMARY, "userInfo", times=2)

    result = migrator.migrate_position(0)

    assert result.outcome is PositionOutcome.COMPLETED
    assert sleeps == [1.0, 1.0]


def test_persistent_read_failure_fails_position(migrator, add_pool, chain):
    add_pool(0, staked=10 * E18)
    chain.fail_reads(OLD_PRIMARY, "userInfo", times=3)

    result = migrator.migrate_position(0)

    assert result.outcome is PositionOutcome.FAILED
    assert "userInfo" in result.error
    assert chain.sent == []


# === Ticket (VIP) pools ===

@pytest.fixture
def ticket_pool(add_pool, old_primary, ticket):
    add_pool(1, pool_type=1, ticket=TICKET)
    old_primary.staked_ticket_ids[(ACCOUNT, TICKET)] = [11, 12]
    ticket.owners.update({11: OLD_PRIMARY, 12: OLD_PRIMARY, 13: ACCOUNT})
    return 1


def test_migrates_tickets(migrator, ticket_pool, chain, new_primary, ticket):
    result = migrator.migrate_position(ticket_pool)

    assert result.outcome is PositionOutcome.COMPLETED
    assert result.tickets_migrated == 3
    assert chain.calls_to("withdraw_tickets", OLD_PRIMARY) == [(1, 11), (1, 12)]
    assert chain.calls_to("setApprovalForAll", TICKET) == [(NEW_PRIMARY, True)]
    assert chain.calls_to("deposit_all_tickets", NEW_PRIMARY) == [(TICKET,)]
    assert sorted(new_primary.staked_ticket_ids[(ACCOUNT, TICKET)]) == [11, 12, 13]
    assert ticket.tokensOfOwner(ACCOUNT) == []
    assert chain.calls_to("withdraw", OLD_PRIMARY) == []


def test_existing_operator_approval_is_reused(migrator, ticket_pool, chain, ticket):
    ticket.operators.add((ACCOUNT, NEW_PRIMARY))

    migrator.migrate_position(ticket_pool)

    assert chain.calls_to("setApprovalForAll", TICKET) == []
    assert chain.calls_to("approve", TICKET) == []
    assert len(chain.calls_to("deposit_all_tickets", NEW_PRIMARY)) == 1


def test_individual_approvals_when_operator_approval_fails(migrator, ticket_pool, chain, ticket):
    ticket.reject_approval_for_all = True

    result = migrator.migrate_position(ticket_pool)

    assert result.outcome is PositionOutcome.COMPLETED
    assert chain.calls_to("approve", TICKET) == [(NEW_PRIMARY, 11), (NEW_PRIMARY, 12), (NEW_PRIMARY, 13)]
    assert ticket.tokensOfOwner(ACCOUNT) == []


def test_ticket_pool_with_lp_stake(migrator, ticket_pool, chain, old_primary, new_primary):
    old_primary.stake(ticket_pool, ACCOUNT, 3 * E18)

    result = migrator.migrate_position(ticket_pool)

    assert result.deposited == 3 * E18
    assert result.tickets_migrated == 3
    assert chain.calls_to("deposit", NEW_PRIMARY) == [(1, 3 * E18)]


def test_empty_ticket_pool_is_no_funds(migrator, add_pool, chain):
    add_pool(1, pool_type=1, ticket=TICKET)

    result = migrator.migrate_position(1)

    assert result.reason is SkipReason.NO_FUNDS
    assert chain.sent == []
