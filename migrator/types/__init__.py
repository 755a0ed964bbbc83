# migrator/types/__init__.py

from .constants import ZERO_ADDRESS, MAX_UINT256, BPS_DENOMINATOR

from .new import (
    EvmAddress,
    EvmHash,
    IntStr,
)

# EVM Types
from .evm import (
    ReceiptEvent,
    TxReceipt,
)

# Ledger Types
from .ledger import (
    Subsystem,
    PositionKind,
    PrimaryPoolInfo,
    PrimaryUserInfo,
    SecondaryPoolInfo,
    SecondaryUserPool,
    RegularSchedule,
    PairReserves,
    PositionRecord,
)

from .checkpoint import CheckpointKey, Checkpoint

from .results import (
    PositionOutcome,
    SkipReason,
    PositionResult,
    ClaimBatch,
    ClaimResult,
    SubsystemReport,
    MigrationReport,
)

from .errors import (
    MigrationError,
    ConfigError,
    TransientReadError,
    TransactionReverted,
    SetupFailure,
)
