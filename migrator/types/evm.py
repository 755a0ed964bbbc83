# migrator/types/evm.py

from typing import Optional, Dict, Any, List

from msgspec import Struct, field

from .new import EvmAddress, EvmHash


class ReceiptEvent(Struct):
    address: EvmAddress
    log_index: int
    name: Optional[str] = None  # None when no registered ABI decodes the log
    args: Dict[str, Any] = field(default_factory=dict)


class TxReceipt(Struct):
    tx_hash: EvmHash
    status: int  # 1 (Success) or 0 (Reverted)
    block_number: int
    events: List[ReceiptEvent] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    def event_names(self) -> List[Optional[str]]:
        return [event.name for event in self.events]
