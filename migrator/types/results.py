# migrator/types/results.py

from enum import Enum
from typing import List, Optional, Tuple

from msgspec import Struct, field

from .ledger import Subsystem
from .new import EvmHash


class PositionOutcome(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    NO_FUNDS = "no_funds"
    INACTIVE_DESTINATION = "inactive_destination"
    DUST = "dust"
    NOT_MATURED = "not_matured"
    NO_ELIGIBLE_REDEMPTIONS = "no_eligible_redemptions"


class PositionResult(Struct, kw_only=True):
    subsystem: Subsystem
    position_id: int
    outcome: PositionOutcome
    reason: Optional[SkipReason] = None
    error: Optional[str] = None
    recovered: bool = False
    withdrawn: Optional[int] = None
    deposited: Optional[int] = None
    target_position_id: Optional[int] = None
    tickets_migrated: int = 0
    reward: int = 0

    @classmethod
    def completed(cls, subsystem: Subsystem, position_id: int, **details) -> 'PositionResult':
        return cls(subsystem=subsystem, position_id=position_id,
                   outcome=PositionOutcome.COMPLETED, **details)

    @classmethod
    def skipped(cls, subsystem: Subsystem, position_id: int, reason: SkipReason, **details) -> 'PositionResult':
        return cls(subsystem=subsystem, position_id=position_id,
                   outcome=PositionOutcome.SKIPPED, reason=reason, **details)

    @classmethod
    def failed(cls, subsystem: Subsystem, position_id: int, error: BaseException, **details) -> 'PositionResult':
        message = str(error) or type(error).__name__
        return cls(subsystem=subsystem, position_id=position_id,
                   outcome=PositionOutcome.FAILED, error=message, **details)

    @property
    def ok(self) -> bool:
        return self.outcome is not PositionOutcome.FAILED


class ClaimBatch(Struct):
    """Rewards queued during one secondary ledger pass"""
    entries: List[Tuple[int, int]] = field(default_factory=list)

    def add(self, position_id: int, amount: int) -> bool:
        if amount <= 0:
            return False
        self.entries.append((position_id, amount))
        return True

    @property
    def position_ids(self) -> List[int]:
        return [position_id for position_id, _ in self.entries]

    @property
    def amounts(self) -> List[int]:
        return [amount for _, amount in self.entries]

    @property
    def total(self) -> int:
        return sum(self.amounts)

    def __len__(self) -> int:
        return len(self.entries)


class ClaimResult(Struct, kw_only=True):
    position_ids: List[int]
    amounts: List[int]
    total: int
    tx_hash: Optional[EvmHash] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SubsystemReport(Struct, kw_only=True):
    subsystem: Subsystem
    account: str
    positions: List[PositionResult] = field(default_factory=list)
    claim: Optional[ClaimResult] = None
    setup_error: Optional[str] = None

    def count(self, outcome: PositionOutcome) -> int:
        return sum(1 for result in self.positions if result.outcome is outcome)

    @property
    def failed(self) -> List[PositionResult]:
        return [result for result in self.positions if result.outcome is PositionOutcome.FAILED]


class MigrationReport(Struct, kw_only=True):
    account: str
    subsystems: List[SubsystemReport] = field(default_factory=list)

    @property
    def setup_failed(self) -> bool:
        return any(report.setup_error for report in self.subsystems)
