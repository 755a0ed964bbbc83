# migrator/core/config.py

import json
import os
from pathlib import Path
from typing import Dict, Optional, Any, Mapping

import msgspec
import yaml
from dotenv import load_dotenv
from msgspec import Struct, field

from ..types import EvmAddress, ConfigError
from .logging import MigratorLogger, log_with_context, INFO, WARNING


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "default.yaml"
ENV_PREFIX = "MIGRATOR_"


class RpcConfig(Struct):
    endpoint_url: str = ""
    timeout: int = 120
    poll_latency: float = 1.0


class ContractsConfig(Struct):
    old_primary: EvmAddress
    new_primary: EvmAddress
    old_secondary: EvmAddress
    new_secondary: EvmAddress


class RetryConfig(Struct):
    max_attempts: int = 3
    delay_ms: int = 1000


class CheckpointConfig(Struct):
    path: Optional[str] = "checkpoints/migration.json"


class MigrationConfig(Struct):
    fallback_haircut_bps: int = 9950
    claim_min_reserve_bps: int = 9900
    claim_max_reserve_bps: int = 10000
    claim_pool_id: int = 22
    dust_threshold: int = 1
    deposit_remap: Dict[int, int] = field(default_factory=lambda: {22: 54})


class MigratorConfig(Struct):
    contracts: ContractsConfig
    rpc: RpcConfig = field(default_factory=RpcConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    checkpoints: CheckpointConfig = field(default_factory=CheckpointConfig)
    migration: MigrationConfig = field(default_factory=MigrationConfig)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'MigratorConfig':
        try:
            config = msgspec.convert(data, type=cls, strict=False)
        except msgspec.ValidationError as e:
            raise ConfigError(f"Invalid migrator configuration: {e}") from e
        config.validate()
        return config

    @classmethod
    def from_file(cls, config_path: Optional[Path] = None,
                  env_vars: Optional[Mapping[str, str]] = None) -> 'MigratorConfig':
        """Load a YAML or JSON config file and apply MIGRATOR_* environment overrides"""
        logger = MigratorLogger.get_logger('core.config')

        if env_vars is None:
            load_dotenv()
            env_vars = os.environ

        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        log_with_context(logger, INFO, "Loading configuration", config_path=str(config_path))

        try:
            with open(config_path) as f:
                if config_path.suffix.lower() in ('.yaml', '.yml'):
                    config_data = yaml.safe_load(f) or {}
                elif config_path.suffix.lower() == '.json':
                    config_data = json.load(f)
                else:
                    raise ConfigError(f"Unsupported config file type: {config_path.suffix}")
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {config_path}") from e
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to parse config file {config_path}: {e}") from e

        config_data = cls._apply_env_overrides(config_data, env_vars)
        config = cls.from_dict(config_data)

        if not config.rpc.endpoint_url:
            log_with_context(logger, WARNING, "No RPC endpoint configured",
                             hint=f"set {ENV_PREFIX}RPC_URL")

        return config

    @staticmethod
    def _apply_env_overrides(config_data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
        data = dict(config_data)

        rpc_url = env.get(f"{ENV_PREFIX}RPC_URL")
        if rpc_url:
            data["rpc"] = {**data.get("rpc", {}), "endpoint_url": rpc_url}

        checkpoint_file = env.get(f"{ENV_PREFIX}CHECKPOINT_FILE")
        if checkpoint_file:
            data["checkpoints"] = {**data.get("checkpoints", {}), "path": checkpoint_file}

        log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
        if log_level:
            data["log_level"] = log_level

        return data

    def validate(self) -> None:
        migration = self.migration
        if not 0 < migration.fallback_haircut_bps <= 10000:
            raise ConfigError(f"fallback_haircut_bps out of range: {migration.fallback_haircut_bps}")
        if not 0 < migration.claim_min_reserve_bps <= migration.claim_max_reserve_bps:
            raise ConfigError("claim_min_reserve_bps must be positive and not exceed claim_max_reserve_bps")
        if migration.dust_threshold < 0:
            raise ConfigError("dust_threshold must be non-negative")
        if self.retry.max_attempts < 1:
            raise ConfigError("retry.max_attempts must be at least 1")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Invalid log level: {self.log_level}")

    @property
    def checkpoint_path(self) -> Optional[Path]:
        return Path(self.checkpoints.path) if self.checkpoints.path else None


def load_private_key(env_vars: Optional[Mapping[str, str]] = None) -> str:
    if env_vars is None:
        load_dotenv()
        env_vars = os.environ
    private_key = env_vars.get(f"{ENV_PREFIX}PRIVATE_KEY")
    if not private_key:
        raise ConfigError(f"{ENV_PREFIX}PRIVATE_KEY is not set")
    return private_key
