# migrator/decode/receipt_decoder.py

from typing import Any, Dict, Mapping

from eth_utils import is_bytes
from hexbytes import HexBytes
from web3 import Web3
from web3._utils.events import get_event_data

from ..contracts.abi_loader import ABILoader
from ..contracts.registry import ContractRegistry
from ..core.logging import LoggingMixin
from ..types import EvmAddress, EvmHash, ReceiptEvent, TxReceipt


class ReceiptDecoder(LoggingMixin):
    """Turns a raw web3 receipt into a TxReceipt with named events"""

    def __init__(self, registry: ContractRegistry, abi_loader: ABILoader):
        self.registry = registry
        self.abi_loader = abi_loader
        self.w3 = Web3()  # No provider needed for ABI decoding

    def decode_receipt(self, receipt: Mapping[str, Any]) -> TxReceipt:
        tx_hash = self._to_hex(receipt["transactionHash"])
        events = [self.decode_log(log) for log in receipt.get("logs", [])]

        return TxReceipt(
            tx_hash=EvmHash(tx_hash),
            status=int(receipt["status"]),
            block_number=int(receipt["blockNumber"]),
            events=events,
        )

    def decode_log(self, log: Mapping[str, Any]) -> ReceiptEvent:
        address = EvmAddress(str(log["address"]).lower())
        log_index = int(log["logIndex"])

        abi_name = self.registry.get_abi_name(address)
        if not abi_name:
            return ReceiptEvent(address=address, log_index=log_index)

        for event_abi in self.abi_loader.event_abis(abi_name):
            try:
                event_data = get_event_data(self.w3.codec, event_abi, log)
            except Exception:
                continue

            return ReceiptEvent(
                address=address,
                log_index=log_index,
                name=event_data["event"],
                args=self._normalize_args(event_data["args"]),
            )

        self.log_debug("No event ABI matched log", contract_address=address, log_index=log_index)
        return ReceiptEvent(address=address, log_index=log_index)

    def _normalize_args(self, args: Mapping[str, Any]) -> Dict[str, Any]:
        normalized = {}
        for key, value in args.items():
            if isinstance(value, list):
                normalized[key] = [self._convert_attribute(item) for item in value]
            else:
                normalized[key] = self._convert_attribute(value)
        return normalized

    @staticmethod
    def _convert_attribute(value: Any) -> Any:
        # ints pass through unchanged
        if is_bytes(value):
            return Web3.to_hex(value)
        return value

    @staticmethod
    def _to_hex(value: Any) -> str:
        if isinstance(value, (bytes, HexBytes)):
            return Web3.to_hex(value)
        return str(value)
