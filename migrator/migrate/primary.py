# migrator/migrate/primary.py

from typing import List

from ..contracts.ledgers import PrimaryLedger, TicketCollection
from ..types import (
    PositionKind,
    PositionRecord,
    PositionResult,
    PrimaryPoolInfo,
    SkipReason,
    Subsystem,
)
from .base import DepositStatus, PositionMigrator


class PrimaryLedgerMigrator(PositionMigrator):
    """Moves LP stakes and staking tickets between MasterChef-style ledgers"""

    subsystem = Subsystem.PRIMARY

    old_ledger: PrimaryLedger
    new_ledger: PrimaryLedger

    def _migrate(self, pid: int) -> PositionResult:
        checkpoint = self._recover(pid)
        recovered = checkpoint is not None
        pool = self.retry.run(lambda: self.old_ledger.pool_info(pid))
        has_tickets = pool.kind is PositionKind.PRIVILEGED_TICKET

        staked = 0
        withdrawn = None
        if not recovered:
            user = self.retry.run(lambda: self.old_ledger.user_info(pid, self.account))
            staked = user.amount

            if staked == 0 and not has_tickets:
                self.log_info("No LP balance in old MasterChef, skipping", position_id=pid)
                return PositionResult.skipped(self.subsystem, pid, SkipReason.NO_FUNDS)

            if staked > 0:
                record = PositionRecord(
                    position_id=pid,
                    kind=pool.kind,
                    staked_amount=staked,
                    resource_address=pool.lp_token,
                )
                checkpoint = self._withdraw(record, lambda: self.old_ledger.withdraw(pid, staked))
                withdrawn = checkpoint.quantity

        tickets_migrated = 0
        if has_tickets:
            tickets_migrated = self._migrate_tickets(pid, pool)

        if not recovered and staked == 0 and tickets_migrated == 0:
            self.log_info("No LP balance or tickets in old MasterChef, skipping", position_id=pid)
            return PositionResult.skipped(self.subsystem, pid, SkipReason.NO_FUNDS)

        deposited = None
        if checkpoint is not None and checkpoint.quantity > 0:
            status, deposited = self._deposit(pid, checkpoint, pid)

            if status is DepositStatus.INACTIVE:
                return PositionResult.skipped(self.subsystem, pid, SkipReason.INACTIVE_DESTINATION,
                                              recovered=recovered, withdrawn=withdrawn,
                                              tickets_migrated=tickets_migrated)

            if status is DepositStatus.DUST:
                self.checkpoints.clear(self.checkpoint_key(pid))
                return PositionResult.skipped(self.subsystem, pid, SkipReason.DUST,
                                              recovered=recovered, withdrawn=withdrawn,
                                              tickets_migrated=tickets_migrated)

        self.checkpoints.clear(self.checkpoint_key(pid))
        self.log_info("Position migrated", position_id=pid, amount=deposited, tickets=tickets_migrated)

        return PositionResult.completed(self.subsystem, pid,
                                        recovered=recovered,
                                        withdrawn=withdrawn,
                                        deposited=deposited,
                                        target_position_id=pid,
                                        tickets_migrated=tickets_migrated)

    # === Ticket sub-protocol ===

    def _migrate_tickets(self, pid: int, pool: PrimaryPoolInfo) -> int:
        """Withdraw staked tickets one by one, then redeposit every held ticket in one call"""
        if pool.ticket is None:
            self.log_warning("VIP pool has no ticket collection, skipping tickets", position_id=pid)
            return 0

        staked_ids = self.retry.run(lambda: self.old_ledger.staked_tickets(self.account, pool.ticket))
        if staked_ids:
            self.log_info(f"Found {len(staked_ids)} staked tickets in old MasterChef", position_id=pid)
        for token_id in staked_ids:
            self.executor.send(lambda: self.old_ledger.withdraw_ticket(pid, token_id),
                               action="withdraw_ticket", position_id=pid, token_id=token_id)

        collection = TicketCollection(self.client, pool.ticket)
        held_ids = self.retry.run(lambda: collection.tokens_of_owner(self.account))
        if not held_ids:
            self.log_info("No tickets in wallet to deposit", position_id=pid)
            return 0

        self._ensure_ticket_approval(pid, collection, held_ids)

        self.executor.send(lambda: self.new_ledger.deposit_all_tickets(pool.ticket),
                           action="deposit_all_tickets", position_id=pid, tickets=len(held_ids))
        return len(held_ids)

    def _ensure_ticket_approval(self, pid: int, collection: TicketCollection, token_ids: List[int]) -> None:
        operator = self.new_ledger.address

        if self.retry.run(lambda: collection.is_approved_for_all(self.account, operator)):
            self.log_debug("Tickets already approved for new MasterChef", position_id=pid)
            return

        unapproved = [
            token_id for token_id in token_ids
            if self.retry.run(lambda: collection.get_approved(token_id)).lower() != operator.lower()
        ]
        if not unapproved:
            self.log_debug("Every ticket individually approved", position_id=pid)
            return

        try:
            self.executor.send(lambda: collection.set_approval_for_all(operator, True),
                               action="setApprovalForAll", position_id=pid)
            return
        except Exception as e:
            self.log_warning("setApprovalForAll failed, approving tickets individually",
                             position_id=pid, error=str(e))

        for token_id in unapproved:
            try:
                self.executor.send(lambda: collection.approve(operator, token_id),
                                   action="approve_ticket", position_id=pid, token_id=token_id)
            except Exception as e:
                self.log_warning("Failed to approve ticket", position_id=pid, token_id=token_id, error=str(e))
