"""
Interfaces for ledger access.

The migration core only talks to the chain through this interface, so the
web3 client and the in-memory test ledger are interchangeable.
"""
from abc import ABC, abstractmethod
from typing import Any

from ..types import EvmAddress, EvmHash, TxReceipt


class LedgerClientInterface(ABC):
    """Interface for signing ledger client implementations."""

    @property
    @abstractmethod
    def account(self) -> EvmAddress:
        """
        Address of the account whose positions are migrated.
        """
        pass

    @abstractmethod
    def call(self, address: str, abi_name: str, function_name: str, *args) -> Any:
        """
        Execute a read-only contract call.

        Args:
            address: Contract address
            abi_name: Name of the ABI describing the contract
            function_name: Contract function to call
            *args: Function arguments

        Returns:
            The decoded result; functions with several outputs return a dict
            keyed by ABI output name

        Raises:
            TransientReadError: the call could not be completed
        """
        pass

    @abstractmethod
    def transact(self, address: str, abi_name: str, function_name: str, *args) -> EvmHash:
        """
        Sign and submit a state-changing contract call.

        Returns:
            Transaction hash of the submitted call
        """
        pass

    @abstractmethod
    def wait_for_receipt(self, tx_hash: EvmHash) -> TxReceipt:
        """
        Block until the transaction is included and return its decoded receipt.
        """
        pass

    @abstractmethod
    def chain_time(self) -> int:
        """
        Timestamp of the latest block.
        """
        pass
