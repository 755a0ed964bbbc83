# migrator/decode/amounts.py
"""
Withdrawn amount resolution.

The old ledgers do not emit a stable event shape across pools and versions,
so the amount actually withdrawn is recovered from the receipt through an
ordered fallback chain that always terminates:

1. a ``Withdraw`` event whose ``pid`` equals the expected position id
2. any ``Withdraw`` event
3. any event whose name contains "withdraw" (case-insensitive)
4. the pre-withdrawal staked amount minus a haircut for unknown ledger fees
"""

from enum import Enum
from typing import Callable, Iterable, Optional

from msgspec import Struct

from ..types import BPS_DENOMINATOR, ReceiptEvent, TxReceipt


WITHDRAW_EVENT = "Withdraw"
DEFAULT_HAIRCUT_BPS = 9950


class ResolutionSource(str, Enum):
    MATCHING_EVENT = "matching_event"
    WITHDRAW_EVENT = "withdraw_event"
    WITHDRAW_LIKE_EVENT = "withdraw_like_event"
    HEURISTIC = "heuristic"


class AmountResolution(Struct, frozen=True):
    amount: int
    source: ResolutionSource
    event_name: Optional[str] = None

    @property
    def ambiguous(self) -> bool:
        return self.source is ResolutionSource.HEURISTIC


def _event_amount(event: ReceiptEvent) -> Optional[int]:
    amount = event.args.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, int):
        return None
    return amount


def _ids_match(value, expected_position_id: int) -> bool:
    try:
        return int(value) == expected_position_id
    except (TypeError, ValueError):
        return False


def _first(events: Iterable[ReceiptEvent], predicate: Callable[[ReceiptEvent], bool]) -> Optional[ReceiptEvent]:
    for event in events:
        if predicate(event) and _event_amount(event) is not None:
            return event
    return None


def apply_haircut(amount: int, haircut_bps: int = DEFAULT_HAIRCUT_BPS) -> int:
    return amount * haircut_bps // BPS_DENOMINATOR


def resolve_withdrawn_amount(receipt: TxReceipt,
                             expected_position_id: int,
                             staked_amount: int,
                             haircut_bps: int = DEFAULT_HAIRCUT_BPS) -> AmountResolution:
    events = receipt.events

    cases = (
        (ResolutionSource.MATCHING_EVENT,
         lambda e: e.name == WITHDRAW_EVENT and _ids_match(e.args.get("pid"), expected_position_id)),
        (ResolutionSource.WITHDRAW_EVENT,
         lambda e: e.name == WITHDRAW_EVENT),
        (ResolutionSource.WITHDRAW_LIKE_EVENT,
         lambda e: e.name is not None and "withdraw" in e.name.lower()),
    )

    for source, predicate in cases:
        event = _first(events, predicate)
        if event is not None:
            return AmountResolution(amount=_event_amount(event), source=source, event_name=event.name)

    return AmountResolution(amount=apply_haircut(staked_amount, haircut_bps),
                            source=ResolutionSource.HEURISTIC)
