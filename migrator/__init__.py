# migrator/__init__.py

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from .core.config import MigratorConfig, load_private_key
from .core.logging import MigratorLogger, log_with_context
from .clients.interfaces import LedgerClientInterface
from .clients.web3_client import Web3LedgerClient
from .contracts.abi_loader import ABILoader
from .contracts.registry import ContractRegistry
from .execution.retry import RetryExecutor
from .execution.transactions import TransactionExecutor
from .migrate.driver import MigrationDriver
from .storage.checkpoint_store import CheckpointStore
from .storage.interfaces import KeyValueStoreInterface
from .storage.local import JsonFileStore
from .types import ConfigError


def create_migrator(config: Optional[MigratorConfig] = None,
                    client: Optional[LedgerClientInterface] = None,
                    store: Optional[KeyValueStoreInterface] = None,
                    private_key: Optional[str] = None,
                    env_vars: Optional[Mapping[str, str]] = None,
                    log_level: Optional[str] = None) -> MigrationDriver:
    env = env_vars if env_vars is not None else os.environ
    _configure_logging_early(env)

    logger = MigratorLogger.get_logger('core.init')

    if config is None:
        config = MigratorConfig.from_file(env_vars=env_vars)

    # explicit level, then MIGRATOR_LOG_LEVEL, then the config file
    MigratorLogger.set_level(log_level or env.get("MIGRATOR_LOG_LEVEL") or config.log_level)

    log_with_context(logger, logging.INFO, "Creating migrator",
                     old_primary=config.contracts.old_primary,
                     old_secondary=config.contracts.old_secondary)

    if client is None:
        client = _create_client(config, private_key or load_private_key(env_vars))

    if store is None and config.checkpoint_path:
        store = JsonFileStore(config.checkpoint_path)

    driver = MigrationDriver(
        client=client,
        contracts=config.contracts,
        checkpoints=CheckpointStore(store),
        retry=RetryExecutor(config.retry.max_attempts, config.retry.delay_ms),
        executor=TransactionExecutor(client),
        settings=config.migration,
    )

    log_with_context(logger, logging.INFO, "Migrator created successfully", account=client.account)
    return driver


def _configure_logging_early(env: Mapping[str, str]) -> None:
    log_dir_env = env.get("MIGRATOR_LOG_DIR")
    log_dir = Path(log_dir_env) if log_dir_env else Path.cwd() / "logs"

    MigratorLogger.configure(
        log_dir=log_dir,
        log_level=env.get("MIGRATOR_LOG_LEVEL", "INFO"),
        console_enabled=env.get("MIGRATOR_LOG_CONSOLE", "true").lower() == "true",
        file_enabled=env.get("MIGRATOR_LOG_FILE", "false").lower() == "true",
        structured_format=env.get("MIGRATOR_LOG_STRUCTURED", "true").lower() == "true",
    )


def _create_client(config: MigratorConfig, private_key: str) -> Web3LedgerClient:
    if not config.rpc.endpoint_url:
        raise ConfigError("No RPC endpoint configured, set MIGRATOR_RPC_URL")

    abi_loader = ABILoader()
    return Web3LedgerClient(
        endpoint_url=config.rpc.endpoint_url,
        private_key=private_key,
        abi_loader=abi_loader,
        registry=ContractRegistry(config.contracts),
        timeout=config.rpc.timeout,
        poll_latency=config.rpc.poll_latency,
    )


__all__ = [
    'create_migrator',
    'MigratorConfig',
    'MigrationDriver',
    'CheckpointStore',
]
