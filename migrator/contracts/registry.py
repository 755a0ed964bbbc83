# migrator/contracts/registry.py

from typing import Optional, Dict

from ..core.config import ContractsConfig
from ..core.logging import LoggingMixin
from .abi_loader import MASTERCHEF_ABI, SOUSCHEF_ABI


class ContractRegistry(LoggingMixin):
    """Maps contract addresses to the ABI used to decode their logs"""

    def __init__(self, contracts: Optional[ContractsConfig] = None):
        self._abi_by_address: Dict[str, str] = {}
        if contracts is not None:
            self._load_contracts_from_config(contracts)

    def _load_contracts_from_config(self, contracts: ContractsConfig) -> None:
        self.register(contracts.old_primary, MASTERCHEF_ABI)
        self.register(contracts.new_primary, MASTERCHEF_ABI)
        self.register(contracts.old_secondary, SOUSCHEF_ABI)
        self.register(contracts.new_secondary, SOUSCHEF_ABI)

    def register(self, address: str, abi_name: str) -> None:
        """Register an address; tokens and tickets are discovered during a run"""
        address = address.lower()
        if self._abi_by_address.get(address) != abi_name:
            self._abi_by_address[address] = abi_name
            self.log_debug("Registered contract", contract_address=address, abi_name=abi_name)

    def get_abi_name(self, address: str) -> Optional[str]:
        return self._abi_by_address.get(address.lower())
