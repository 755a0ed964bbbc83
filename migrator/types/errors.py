# migrator/types/errors.py

from typing import Optional


class MigrationError(Exception):
    pass


class ConfigError(MigrationError):
    pass


class TransientReadError(MigrationError):
    """A read-only ledger query failed"""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Read {operation} failed{detail}")


class TransactionReverted(MigrationError):
    """A mutating call was included but the ledger rejected its effect"""

    def __init__(self, tx_hash: str, action: Optional[str] = None):
        self.tx_hash = tx_hash
        self.action = action
        label = f" ({action})" if action else ""
        super().__init__(f"Transaction failed (reverted){label}. TX: {tx_hash}")


class SetupFailure(MigrationError):
    """The position count could not be read; the subsystem pass cannot start"""

    def __init__(self, subsystem: str, cause: Optional[BaseException] = None):
        self.subsystem = subsystem
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not fetch {subsystem} pool length{detail}")
