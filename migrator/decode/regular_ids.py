# migrator/decode/regular_ids.py
"""
Decoding of the secondary ledger's packed redemption entries.

``getUserPoolRegular`` returns one composite integer per redemption entry,
packed on-chain as::

    index + redemptionStart * 1e10 + redemptionEnd * 1e20 + amount * 1e40

Only the index is recovered here; the window and amount are read back
through ``userRegluars``. The modulus is part of the ledger's storage
format; a different value on a future ledger version is a contract break.
"""

from typing import Iterable, List

REGULAR_ID_MODULUS = 10**10


def decode_regular_index(value: int) -> int:
    if value < 0:
        raise ValueError(f"Composite redemption entry must be non-negative: {value}")
    return value % REGULAR_ID_MODULUS


def decode_regular_indexes(values: Iterable[int]) -> List[int]:
    """Indexes of all packed entries, dropping the unused index 0"""
    return [index for index in (decode_regular_index(int(value)) for value in values) if index != 0]
