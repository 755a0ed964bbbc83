# migrator/migrate/secondary.py

from typing import List, Optional

from ..contracts.ledgers import SecondaryLedger
from ..decode.regular_ids import decode_regular_indexes
from ..types import (
    ClaimResult,
    EvmHash,
    PositionKind,
    PositionRecord,
    PositionResult,
    SkipReason,
    Subsystem,
)
from .base import DepositStatus, PositionMigrator
from .rewards import RewardAggregator


def reconcile_regular_ids(redemption_period: int, regular_ids: List[int]) -> Optional[List[int]]:
    """
    Apply the redemption-period rule to the eligible regular ids.

    Returns the ids to withdraw with, or None when the pool expects a
    redemption but no id is currently redeemable.
    """
    if redemption_period <= 0:
        return []
    if not regular_ids:
        return None
    return regular_ids


class SecondaryLedgerMigrator(PositionMigrator):
    """
    Moves single-token stakes between SousChef-style ledgers and queues each
    position's rewards for one claim at the end of the pass.
    """

    subsystem = Subsystem.SECONDARY

    old_ledger: SecondaryLedger
    new_ledger: SecondaryLedger

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rewards = RewardAggregator(
            self.account, self.client, self.old_ledger, self.retry, self.executor, self.settings
        )

    def target_position(self, pid: int) -> int:
        return self.settings.deposit_remap.get(pid, pid)

    def finish_pass(self) -> Optional[ClaimResult]:
        return self.rewards.settle()

    def _migrate(self, pid: int) -> PositionResult:
        checkpoint = self._recover(pid)
        recovered = checkpoint is not None
        target_pid = self.target_position(pid)

        staked = 0
        withdrawn = None
        if not recovered:
            user_pool = self.retry.run(lambda: self.old_ledger.user_pool(self.account, pid))
            pool = self.retry.run(lambda: self.old_ledger.pool_info(pid))
            staked = user_pool.deposit

            if pool.kind is PositionKind.TIME_LOCKED and not self._matured(pid):
                return PositionResult.skipped(self.subsystem, pid, SkipReason.NOT_MATURED)

            if staked > 0:
                regular_ids = []
                if pool.kind is PositionKind.REDEMPTION_SCHEDULED:
                    regular_ids = reconcile_regular_ids(pool.redemption_period,
                                                        self._eligible_regular_ids(pid))
                    if regular_ids is None:
                        self.log_info("Redemption period set but no redeemable regular ids, skipping withdrawal",
                                      position_id=pid, redemption_period=pool.redemption_period)
                        return PositionResult.skipped(self.subsystem, pid, SkipReason.NO_ELIGIBLE_REDEMPTIONS)

                record = PositionRecord(
                    position_id=pid,
                    kind=pool.kind,
                    staked_amount=staked,
                    resource_address=pool.token,
                )
                checkpoint = self._withdraw(record, lambda: self._submit_withdraw(pid, staked, regular_ids))
                withdrawn = checkpoint.quantity

        status = None
        deposited = None
        if checkpoint is not None and checkpoint.quantity > 0:
            status, deposited = self._deposit(pid, checkpoint, target_pid)

            if status is DepositStatus.INACTIVE:
                return PositionResult.skipped(self.subsystem, pid, SkipReason.INACTIVE_DESTINATION,
                                              recovered=recovered, withdrawn=withdrawn,
                                              target_position_id=target_pid)

        reward = self.rewards.collect(pid)
        self.checkpoints.clear(self.checkpoint_key(pid))

        details = dict(recovered=recovered, withdrawn=withdrawn, reward=reward)
        if status is DepositStatus.DUST:
            return PositionResult.skipped(self.subsystem, pid, SkipReason.DUST, **details)
        if not recovered and staked == 0:
            self.log_info("No balance in old SousChef", position_id=pid, amount=reward)
            return PositionResult.skipped(self.subsystem, pid, SkipReason.NO_FUNDS, **details)

        self.log_info("Position migrated", position_id=pid, target_position_id=target_pid, amount=deposited)
        return PositionResult.completed(self.subsystem, pid, deposited=deposited,
                                        target_position_id=target_pid, **details)

    def _submit_withdraw(self, pid: int, amount: int, regular_ids: List[int]) -> EvmHash:
        return self.old_ledger.withdraw(pid, amount, regular_ids, is_lp=False, is_weth=False)

    def _matured(self, pid: int) -> bool:
        unlock_time = self.retry.run(lambda: self.old_ledger.unlock_time(self.account, pid))
        now = self.retry.run(self.client.chain_time)
        if unlock_time > now:
            self.log_info("Time-locked position has not matured, skipping",
                          position_id=pid, unlock_time=unlock_time, chain_time=now)
            return False
        return True

    def _eligible_regular_ids(self, pid: int) -> List[int]:
        """Regular ids whose redemption window contains the current chain time"""
        try:
            packed = self.retry.run(lambda: self.old_ledger.user_pool_regular(self.account, pid))
            indexes = decode_regular_indexes(packed)
            if not indexes:
                return []
            now = self.retry.run(self.client.chain_time)
        except Exception as e:
            self.log_warning("Failed to read regular ids, withdrawing without them",
                             position_id=pid, error=str(e))
            return []

        eligible = []
        for regular_id in indexes:
            try:
                schedule = self.retry.run(lambda: self.old_ledger.user_regular(self.account, regular_id))
            except Exception as e:
                self.log_warning("Failed to read regular schedule, skipping id",
                                 position_id=pid, regular_id=regular_id, error=str(e))
                continue

            if schedule.is_redeemable(now):
                eligible.append(regular_id)

        self.log_debug("Eligible regular ids", position_id=pid, regular_ids=eligible)
        return eligible
