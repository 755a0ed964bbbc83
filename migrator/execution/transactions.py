# migrator/execution/transactions.py

from typing import Callable, Optional

from ..clients.interfaces import LedgerClientInterface
from ..core.logging import LoggingMixin
from ..types import EvmHash, TxReceipt, TransactionReverted


class TransactionExecutor(LoggingMixin):
    """
    Single choke point for every balance-affecting call.

    Submits through the given factory, waits for inclusion and fails with
    TransactionReverted when the ledger reports failure. No retries.
    """

    def __init__(self, client: LedgerClientInterface):
        self.client = client

    def send(self, transaction_factory: Callable[[], EvmHash],
             action: Optional[str] = None, **context) -> TxReceipt:
        self.log_info("Submitting transaction", action=action, **context)

        tx_hash = transaction_factory()
        receipt = self.client.wait_for_receipt(tx_hash)

        if not receipt.succeeded:
            self.log_error("Transaction reverted", action=action, tx_hash=tx_hash, **context)
            raise TransactionReverted(tx_hash, action)

        self.log_info("Transaction confirmed",
                      action=action,
                      tx_hash=receipt.tx_hash,
                      block_number=receipt.block_number,
                      **context)
        return receipt
