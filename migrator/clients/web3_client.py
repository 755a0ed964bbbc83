# migrator/clients/web3_client.py

from typing import Any, Optional

from eth_account import Account
from web3 import Web3

from ..contracts.abi_loader import ABILoader
from ..contracts.registry import ContractRegistry
from ..core.logging import LoggingMixin
from ..decode.receipt_decoder import ReceiptDecoder
from ..types import EvmAddress, EvmHash, TxReceipt, TransientReadError
from .interfaces import LedgerClientInterface


class Web3LedgerClient(LedgerClientInterface, LoggingMixin):
    """
    A signing client for the chef ledgers over an EVM JSON-RPC endpoint.
    """

    def __init__(self,
                 endpoint_url: str,
                 private_key: str,
                 abi_loader: ABILoader,
                 registry: ContractRegistry,
                 timeout: int = 120,
                 poll_latency: float = 1.0,
                 w3: Optional[Web3] = None):
        self.endpoint_url = endpoint_url
        self.w3 = w3 or Web3(Web3.HTTPProvider(endpoint_url, request_kwargs={"timeout": timeout}))
        self.abi_loader = abi_loader
        self.registry = registry
        self.timeout = timeout
        self.poll_latency = poll_latency
        self.decoder = ReceiptDecoder(registry, abi_loader)

        self._signer = Account.from_key(private_key)
        self._contracts = {}

        if not self.w3.is_connected():
            raise ConnectionError("Failed to connect to RPC endpoint")

        self.log_info("Ledger client connected",
                      account=self._signer.address,
                      chain_id=self.w3.eth.chain_id)

    @property
    def account(self) -> EvmAddress:
        return EvmAddress(self._signer.address)

    def _contract(self, address: str, abi_name: str):
        key = (address.lower(), abi_name)
        if key not in self._contracts:
            self.registry.register(address, abi_name)
            self._contracts[key] = self.w3.eth.contract(
                address=Web3.to_checksum_address(address),
                abi=self.abi_loader.load_abi(abi_name),
            )
        return self._contracts[key]

    def call(self, address: str, abi_name: str, function_name: str, *args) -> Any:
        contract = self._contract(address, abi_name)
        try:
            result = getattr(contract.functions, function_name)(*args).call()
        except Exception as e:
            raise TransientReadError(f"{abi_name}.{function_name}", e) from e

        output_names = self.abi_loader.output_names(abi_name, function_name)
        if len(output_names) > 1:
            return dict(zip(output_names, result))
        return result

    def transact(self, address: str, abi_name: str, function_name: str, *args) -> EvmHash:
        contract = self._contract(address, abi_name)
        transaction = getattr(contract.functions, function_name)(*args).build_transaction({
            "from": self._signer.address,
            "nonce": self.w3.eth.get_transaction_count(self._signer.address, "pending"),
        })
        signed = self._signer.sign_transaction(transaction)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return EvmHash(Web3.to_hex(tx_hash))

    def wait_for_receipt(self, tx_hash: EvmHash) -> TxReceipt:
        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.timeout, poll_latency=self.poll_latency
        )
        return self.decoder.decode_receipt(receipt)

    def chain_time(self) -> int:
        try:
            return int(self.w3.eth.get_block("latest")["timestamp"])
        except Exception as e:
            raise TransientReadError("eth.get_block(latest)", e) from e
