# migrator/contracts/abi_loader.py

import json
from pathlib import Path
from typing import Optional, List, Dict, Any

from ..core.logging import LoggingMixin


MASTERCHEF_ABI = "masterchef"
SOUSCHEF_ABI = "souschef"
ERC20_ABI = "erc20"
TICKET_ABI = "ticket"
PAIR_ABI = "pair"


class ABILoader(LoggingMixin):
    """Loads contract ABIs shipped with the package, with caching"""

    def __init__(self, abi_base_path: Optional[Path] = None):
        if abi_base_path is None:
            abi_base_path = Path(__file__).parent / "abis"

        self.abi_base_path = abi_base_path
        self._abi_cache: Dict[str, List[Dict[str, Any]]] = {}

        self.log_debug("ABI loader initialized", abi_base_path=str(self.abi_base_path))

    def load_abi(self, name: str) -> List[Dict[str, Any]]:
        """Load ABI by name, raising if it is missing or malformed"""
        if name in self._abi_cache:
            return self._abi_cache[name]

        abi_path = self.abi_base_path / f"{name}.json"
        if not abi_path.exists():
            self.log_error("ABI file not found", abi_path=str(abi_path), abi_name=name)
            raise FileNotFoundError(f"ABI file not found: {abi_path}")

        with open(abi_path, 'r') as f:
            abi_data = json.load(f)

        # Handle different ABI file formats
        if isinstance(abi_data, dict) and 'abi' in abi_data:
            abi_data = abi_data['abi']

        if not isinstance(abi_data, list):
            self.log_error("ABI is not a list",
                           abi_path=str(abi_path),
                           abi_type=type(abi_data).__name__)
            raise ValueError(f"Unexpected ABI file format: {abi_path}")

        self._abi_cache[name] = abi_data

        self.log_debug("ABI loaded successfully",
                       abi_path=str(abi_path),
                       abi_functions=len([item for item in abi_data if item.get('type') == 'function']),
                       abi_events=len([item for item in abi_data if item.get('type') == 'event']))

        return abi_data

    def event_abis(self, name: str) -> List[Dict[str, Any]]:
        return [item for item in self.load_abi(name) if item.get('type') == 'event']

    def output_names(self, name: str, function_name: str) -> List[str]:
        """Output names of a function, empty strings for unnamed outputs"""
        for item in self.load_abi(name):
            if item.get('type') == 'function' and item.get('name') == function_name:
                return [output.get('name', '') for output in item.get('outputs', [])]
        raise ValueError(f"Function {function_name} not found in {name} ABI")
