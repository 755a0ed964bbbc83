# migrator/migrate/base.py

from enum import Enum
from typing import Callable, Optional, Tuple

from ..clients.interfaces import LedgerClientInterface
from ..contracts.ledgers import Erc20Token
from ..core.config import MigrationConfig
from ..core.logging import LoggingMixin
from ..decode.amounts import resolve_withdrawn_amount
from ..execution.retry import RetryExecutor
from ..execution.transactions import TransactionExecutor
from ..storage.checkpoint_store import CheckpointStore
from ..types import (
    Checkpoint,
    CheckpointKey,
    ClaimResult,
    EvmAddress,
    EvmHash,
    MAX_UINT256,
    PositionRecord,
    PositionResult,
    SetupFailure,
    Subsystem,
)


class DepositStatus(str, Enum):
    DEPOSITED = "deposited"
    INACTIVE = "inactive"
    DUST = "dust"


class PositionMigrator(LoggingMixin):
    """
    Per-position migration state machine shared by both ledger families.

    Start -> (Recovered | Withdrawing) -> Withdrawn -> Depositing -> Completed

    A checkpoint is written as soon as a withdrawal is confirmed and removed
    only once the deposit concludes, so a crash in between resumes at the
    deposit on the next run instead of withdrawing again.
    """

    subsystem: Subsystem

    def __init__(self,
                 account: str,
                 client: LedgerClientInterface,
                 old_ledger,
                 new_ledger,
                 checkpoints: CheckpointStore,
                 retry: RetryExecutor,
                 executor: TransactionExecutor,
                 settings: Optional[MigrationConfig] = None):
        self.account = EvmAddress(account)
        self.client = client
        self.old_ledger = old_ledger
        self.new_ledger = new_ledger
        self.checkpoints = checkpoints
        self.retry = retry
        self.executor = executor
        self.settings = settings or MigrationConfig()

    # === Pass lifecycle ===

    def position_count(self) -> int:
        try:
            return self.retry.run(self.old_ledger.pool_length)
        except Exception as e:
            raise SetupFailure(self.subsystem.label, e) from e

    def migrate_position(self, pid: int) -> PositionResult:
        """Run one position; failures are contained and reported, never raised"""
        try:
            return self._migrate(pid)
        except Exception as e:
            self.log_error("Migration for this pool FAILED, the next run resumes from the last confirmed step",
                           subsystem=self.subsystem.label,
                           position_id=pid,
                           error=str(e) or type(e).__name__)
            return PositionResult.failed(self.subsystem, pid, e)

    def finish_pass(self) -> Optional[ClaimResult]:
        return None

    def _migrate(self, pid: int) -> PositionResult:
        raise NotImplementedError

    # === Shared states ===

    def checkpoint_key(self, pid: int) -> CheckpointKey:
        return CheckpointKey(account=self.account, position_id=pid, subsystem=self.subsystem)

    def _recover(self, pid: int) -> Optional[Checkpoint]:
        checkpoint = self.checkpoints.get(self.checkpoint_key(pid))
        if checkpoint is not None:
            self.log_info("Found pending migration, recovering",
                          position_id=pid,
                          amount=checkpoint.amount)
        return checkpoint

    def _withdraw(self, record: PositionRecord, submit: Callable[[], EvmHash]) -> Checkpoint:
        pid = record.position_id
        receipt = self.executor.send(submit, action="withdraw",
                                     position_id=pid, amount=record.staked_amount)

        resolution = resolve_withdrawn_amount(
            receipt, pid, record.staked_amount, self.settings.fallback_haircut_bps
        )
        if resolution.ambiguous:
            self.log_warning("Could not find Withdraw event, using haircut staked amount",
                             position_id=pid,
                             amount=resolution.amount,
                             source=resolution.source.value,
                             events=receipt.event_names())
        else:
            self.log_info("Resolved withdrawn amount from receipt",
                          position_id=pid,
                          amount=resolution.amount,
                          source=resolution.source.value,
                          event_name=resolution.event_name)

        checkpoint = Checkpoint.create(record.resource_address, resolution.amount)
        if self.checkpoints.set(self.checkpoint_key(pid), checkpoint):
            self.log_info("Withdrawal complete, checkpoint saved", position_id=pid, amount=checkpoint.amount)
        else:
            self.log_warning("Checkpoint not saved, position cannot resume if the deposit fails",
                             position_id=pid, amount=checkpoint.amount,
                             resource=checkpoint.destination_resource)
        return checkpoint

    def _deposit(self, pid: int, checkpoint: Checkpoint, target_pid: int) -> Tuple[DepositStatus, int]:
        """Deposit min(wallet balance, checkpointed amount) into the new ledger"""
        if not self.retry.run(lambda: self._destination_active(target_pid)):
            self.log_info("Target pool allocPoint is 0, skipping deposit",
                          position_id=pid, target_position_id=target_pid)
            return DepositStatus.INACTIVE, 0

        token = Erc20Token(self.client, checkpoint.destination_resource)
        wallet_balance = self.retry.run(lambda: token.balance_of(self.account))
        amount = min(wallet_balance, checkpoint.quantity)

        if amount <= self.settings.dust_threshold:
            self.log_info("Wallet balance is dust, skipping deposit",
                          position_id=pid, amount=amount)
            return DepositStatus.DUST, 0

        self.log_info("Depositing to new ledger",
                      position_id=pid,
                      target_position_id=target_pid,
                      wallet_balance=wallet_balance,
                      intended=checkpoint.quantity,
                      amount=amount)

        spender = self.new_ledger.address
        allowance = self.retry.run(lambda: token.allowance(self.account, spender))
        if allowance < amount:
            self.executor.send(lambda: token.approve(spender, MAX_UINT256),
                               action="approve", position_id=pid)
        else:
            self.log_debug("Current allowance is sufficient, skipping approve",
                           position_id=pid, allowance=allowance)

        self.executor.send(lambda: self._submit_deposit(target_pid, amount),
                           action="deposit", position_id=pid,
                           target_position_id=target_pid, amount=amount)
        return DepositStatus.DEPOSITED, amount

    def _destination_active(self, target_pid: int) -> bool:
        return self.new_ledger.pool_info(target_pid).active

    def _submit_deposit(self, target_pid: int, amount: int) -> EvmHash:
        return self.new_ledger.deposit(target_pid, amount)
