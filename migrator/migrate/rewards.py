# migrator/migrate/rewards.py

from typing import List, Optional

from ..clients.interfaces import LedgerClientInterface
from ..contracts.ledgers import LiquidityPair, SecondaryLedger
from ..core.config import MigrationConfig
from ..core.logging import LoggingMixin
from ..execution.retry import RetryExecutor
from ..execution.transactions import TransactionExecutor
from ..types import BPS_DENOMINATOR, ClaimBatch, ClaimResult, EvmAddress, PairReserves


def reserve_bands(reserves: PairReserves, min_bps: int, max_bps: int) -> List[int]:
    """Slippage bounds for safeClaim: [r0 low, r0 high, r1 low, r1 high]"""
    return [
        reserves.reserve0 * min_bps // BPS_DENOMINATOR,
        reserves.reserve0 * max_bps // BPS_DENOMINATOR,
        reserves.reserve1 * min_bps // BPS_DENOMINATOR,
        reserves.reserve1 * max_bps // BPS_DENOMINATOR,
    ]


class RewardAggregator(LoggingMixin):
    """
    Collects secondary ledger rewards during a pass and settles them with a
    single safeClaim against the old ledger.
    """

    def __init__(self,
                 account: str,
                 client: LedgerClientInterface,
                 ledger: SecondaryLedger,
                 retry: RetryExecutor,
                 executor: TransactionExecutor,
                 settings: Optional[MigrationConfig] = None):
        self.account = EvmAddress(account)
        self.client = client
        self.ledger = ledger
        self.retry = retry
        self.executor = executor
        self.settings = settings or MigrationConfig()
        self.batch = ClaimBatch()

    def collect(self, pid: int) -> int:
        """Queue pending plus stored reward for pid; returns the queued amount"""
        pending = self.retry.run(lambda: self.ledger.pending_reward(pid, self.account))
        stored = self.retry.run(lambda: self.ledger.user_pool(self.account, pid)).reward
        total = pending + stored

        if not self.batch.add(pid, total):
            return 0

        self.log_info("Queued rewards for claiming",
                      position_id=pid, amount=total, pending=pending, stored=stored)
        return total

    def settle(self) -> Optional[ClaimResult]:
        batch, self.batch = self.batch, ClaimBatch()

        if not batch:
            self.log_info("No rewards to claim")
            return None

        result = ClaimResult(position_ids=batch.position_ids, amounts=batch.amounts, total=batch.total)
        self.log_info(f"Claiming rewards for {len(batch)} pools", amount=result.total)

        try:
            pair = LiquidityPair(self.client, self.retry.run(self.ledger.claim_pair))
            reserves = self.retry.run(pair.reserves)
            bands = reserve_bands(reserves,
                                  self.settings.claim_min_reserve_bps,
                                  self.settings.claim_max_reserve_bps)

            receipt = self.executor.send(
                lambda: self.ledger.safe_claim(bands, result.position_ids, result.amounts,
                                             self.settings.claim_pool_id, self.account),
                action="safeClaim",
                amount=result.total,
            )
            result.tx_hash = receipt.tx_hash
        except Exception as e:
            self.log_error("Failed to claim all rewards", error=str(e), amount=result.total)
            result.error = str(e) or type(e).__name__

        return result
