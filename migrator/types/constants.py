# migrator/types/constants.py

ZERO_ADDRESS = "0x" + "0" * 40
MAX_UINT256 = 2**256 - 1
BPS_DENOMINATOR = 10_000
