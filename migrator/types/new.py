# migrator/types/new.py

from typing import NewType


EvmAddress = NewType('EvmAddress', str)
EvmHash = NewType('EvmHash', str)
IntStr = NewType('IntStr', str)  # arbitrary precision integer, decimal string encoded
