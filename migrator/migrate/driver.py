# migrator/migrate/driver.py

from typing import Optional

from eth_utils import to_checksum_address

from ..clients.interfaces import LedgerClientInterface
from ..contracts.ledgers import PrimaryLedger, SecondaryLedger
from ..core.config import ContractsConfig, MigrationConfig
from ..core.logging import LoggingMixin
from ..execution.retry import RetryExecutor
from ..execution.transactions import TransactionExecutor
from ..storage.checkpoint_store import CheckpointStore
from ..types import (
    ConfigError,
    MigrationReport,
    PositionOutcome,
    PositionResult,
    SetupFailure,
    SubsystemReport,
)
from .base import PositionMigrator
from .primary import PrimaryLedgerMigrator
from .secondary import SecondaryLedgerMigrator


class MigrationDriver(LoggingMixin):
    """
    Runs migration passes for an account.

    Each pass enumerates the old ledger's positions in ascending id order and
    hands them one at a time to a migrator built for that pass.
    """

    def __init__(self,
                 client: LedgerClientInterface,
                 contracts: ContractsConfig,
                 checkpoints: CheckpointStore,
                 retry: RetryExecutor,
                 executor: Optional[TransactionExecutor] = None,
                 settings: Optional[MigrationConfig] = None):
        self.client = client
        self.contracts = contracts
        self.checkpoints = checkpoints
        self.retry = retry
        self.executor = executor or TransactionExecutor(client)
        self.settings = settings or MigrationConfig()

        self.log_info("Migration driver initialized",
                      account=client.account,
                      resumable=checkpoints.durable)

    def resolve_account(self, account: Optional[str] = None) -> str:
        """Checksummed account to migrate; only the signing account can be migrated"""
        signer = to_checksum_address(self.client.account)
        if account is None:
            return signer

        try:
            account = to_checksum_address(account)
        except ValueError as e:
            raise ConfigError(f"Invalid account address {account!r}: {e}")

        if account != signer:
            raise ConfigError(f"Account {account} is not the signing account {signer}")
        return account

    def primary_migrator(self, account: Optional[str] = None) -> PrimaryLedgerMigrator:
        return PrimaryLedgerMigrator(
            self.resolve_account(account), self.client,
            PrimaryLedger(self.client, self.contracts.old_primary),
            PrimaryLedger(self.client, self.contracts.new_primary),
            self.checkpoints, self.retry, self.executor, self.settings,
        )

    def secondary_migrator(self, account: Optional[str] = None) -> SecondaryLedgerMigrator:
        return SecondaryLedgerMigrator(
            self.resolve_account(account), self.client,
            SecondaryLedger(self.client, self.contracts.old_secondary),
            SecondaryLedger(self.client, self.contracts.new_secondary),
            self.checkpoints, self.retry, self.executor, self.settings,
        )

    def migrate_primary_ledger(self, account: Optional[str] = None) -> SubsystemReport:
        return self._run_pass(self.primary_migrator(account))

    def migrate_secondary_ledger(self, account: Optional[str] = None) -> SubsystemReport:
        return self._run_pass(self.secondary_migrator(account))

    def migrate_all(self, account: Optional[str] = None) -> MigrationReport:
        account = self.resolve_account(account)
        self.log_info("Running all migrations", account=account)

        report = MigrationReport(account=account)
        report.subsystems.append(self.migrate_primary_ledger(account))
        report.subsystems.append(self.migrate_secondary_ledger(account))

        self.log_info("All migrations complete", account=account)
        return report

    def _run_pass(self, migrator: PositionMigrator) -> SubsystemReport:
        subsystem = migrator.subsystem
        report = SubsystemReport(subsystem=subsystem, account=migrator.account)

        self.log_info(f"Starting {subsystem.label} ledger migration",
                      subsystem=subsystem.label, account=migrator.account)

        try:
            count = migrator.position_count()
        except SetupFailure as e:
            self.log_error("Could not fetch pool length, aborting pass",
                           subsystem=subsystem.label, error=str(e))
            report.setup_error = str(e)
            return report

        self.log_info(f"Found {count} pools", subsystem=subsystem.label)

        for pid in range(count):
            result = migrator.migrate_position(pid)
            report.positions.append(result)
            self._log_result(result)

        report.claim = migrator.finish_pass()

        self.log_info(f"{subsystem.label.capitalize()} ledger migration finished",
                      subsystem=subsystem.label,
                      completed=report.count(PositionOutcome.COMPLETED),
                      skipped=report.count(PositionOutcome.SKIPPED),
                      failed=report.count(PositionOutcome.FAILED))
        return report

    def _log_result(self, result: PositionResult) -> None:
        context = dict(subsystem=result.subsystem.label, position_id=result.position_id)

        if result.outcome is PositionOutcome.FAILED:
            self.log_warning("Position failed, will resume on next run", error=result.error, **context)
        elif result.outcome is PositionOutcome.SKIPPED:
            self.log_debug("Position skipped", reason=result.reason.value, **context)
        else:
            self.log_debug("Position completed", amount=result.deposited, **context)
