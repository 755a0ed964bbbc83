# migrator/types/ledger.py

from enum import Enum
from typing import Optional

from msgspec import Struct

from .new import EvmAddress


class Subsystem(str, Enum):
    PRIMARY = "masterchef"
    SECONDARY = "souschef"

    @property
    def label(self) -> str:
        return "primary" if self is Subsystem.PRIMARY else "secondary"

    @classmethod
    def from_label(cls, label: str) -> 'Subsystem':
        for member in cls:
            if label in (member.label, member.value):
                return member
        raise ValueError(f"Unknown ledger: {label}")


class PositionKind(str, Enum):
    STANDARD = "standard"
    PRIVILEGED_TICKET = "privileged_ticket"
    REDEMPTION_SCHEDULED = "redemption_scheduled"
    TIME_LOCKED = "time_locked"


PRIMARY_TICKET_POOL_TYPES = {1}
SECONDARY_REDEMPTION_POOL_TYPES = {1}
SECONDARY_TIME_LOCKED_POOL_TYPES = {4, 7}


def primary_position_kind(pool_type: int) -> PositionKind:
    if pool_type in PRIMARY_TICKET_POOL_TYPES:
        return PositionKind.PRIVILEGED_TICKET
    return PositionKind.STANDARD


def secondary_position_kind(pool_type: int) -> PositionKind:
    if pool_type in SECONDARY_TIME_LOCKED_POOL_TYPES:
        return PositionKind.TIME_LOCKED
    if pool_type in SECONDARY_REDEMPTION_POOL_TYPES:
        return PositionKind.REDEMPTION_SCHEDULED
    return PositionKind.STANDARD


'''
Old and new ledger reads
'''
class PrimaryPoolInfo(Struct):
    lp_token: EvmAddress
    alloc_point: int
    pool_type: int
    ticket: Optional[EvmAddress] = None

    @property
    def kind(self) -> PositionKind:
        return primary_position_kind(self.pool_type)

    @property
    def active(self) -> bool:
        return self.alloc_point > 0


class PrimaryUserInfo(Struct):
    amount: int


class SecondaryPoolInfo(Struct):
    token: EvmAddress
    alloc_point: int
    pool_type: int
    redemption_period: int = 0

    @property
    def kind(self) -> PositionKind:
        return secondary_position_kind(self.pool_type)

    @property
    def active(self) -> bool:
        return self.alloc_point > 0


class SecondaryUserPool(Struct):
    deposit: int
    reward: int = 0


class RegularSchedule(Struct):
    redemption_start: int
    redemption_end: int
    amount: int

    def is_redeemable(self, now: int) -> bool:
        return self.redemption_start <= now <= self.redemption_end and self.amount > 0


class PairReserves(Struct):
    reserve0: int
    reserve1: int


class PositionRecord(Struct, kw_only=True):
    """Position state derived from ledger reads during one pass"""
    position_id: int
    kind: PositionKind
    staked_amount: int
    resource_address: EvmAddress
