# migrator/cli/context.py

"""
CLI context

Lazily builds the configuration, checkpoint store and migration driver the
commands need, so read-only commands never connect to the RPC endpoint.
"""

import logging
from pathlib import Path
from typing import Optional

from eth_account import Account

from ..clients.interfaces import LedgerClientInterface
from ..core.config import MigratorConfig, load_private_key
from ..core.logging import MigratorLogger, log_with_context
from ..migrate.driver import MigrationDriver
from ..storage.checkpoint_store import CheckpointStore
from ..storage.interfaces import KeyValueStoreInterface
from ..storage.local import JsonFileStore


class CLIContext:

    def __init__(self,
                 config_path: Optional[Path] = None,
                 config: Optional[MigratorConfig] = None,
                 client: Optional[LedgerClientInterface] = None,
                 store: Optional[KeyValueStoreInterface] = None,
                 log_level: Optional[str] = None):
        self.logger = MigratorLogger.get_logger('cli.context')
        self.config_path = config_path
        self._config = config
        self._client = client
        self._store = store
        self._checkpoint_store: Optional[CheckpointStore] = None
        self.log_level = log_level

    @property
    def config(self) -> MigratorConfig:
        if self._config is None:
            self._config = MigratorConfig.from_file(self.config_path)
            MigratorLogger.set_level(self.log_level or self._config.log_level)
        return self._config

    @property
    def store(self) -> Optional[KeyValueStoreInterface]:
        if self._store is None and self.config.checkpoint_path:
            self._store = JsonFileStore(self.config.checkpoint_path)
        return self._store

    @property
    def checkpoint_store(self) -> CheckpointStore:
        if self._checkpoint_store is None:
            self._checkpoint_store = CheckpointStore(self.store)
        return self._checkpoint_store

    @property
    def account(self) -> str:
        """Signing account, derived from the private key when no client is connected"""
        if self._client is not None:
            return self._client.account
        return Account.from_key(load_private_key()).address

    def create_driver(self) -> MigrationDriver:
        from .. import create_migrator

        log_with_context(self.logger, logging.INFO, "Creating migration driver")
        driver = create_migrator(self.config, client=self._client, store=self.store,
                                 log_level=self.log_level)
        self._client = driver.client
        return driver
