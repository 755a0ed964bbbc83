# tests/test_logging.py

import logging
import sys
from pathlib import Path

import pytest

from migrator import create_migrator
from migrator.core.config import MigratorConfig
from migrator.core.logging import MigratorFormatter, MigratorLogger, log_with_context


def make_record(message, **context):
    record = logging.LogRecord("migrator.test", logging.INFO, "", 0, message, (), None)
    for key, value in context.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def file_logging(tmp_path):
    MigratorLogger.reset()
    MigratorLogger.configure(log_dir=tmp_path, log_level="INFO", console_enabled=False, file_enabled=True)
    yield tmp_path
    MigratorLogger.reset()
    MigratorLogger.configure(log_level="DEBUG", console_enabled=False, file_enabled=False)


@pytest.fixture
def restore_level():
    yield
    MigratorLogger.set_level("DEBUG")


def test_formatter_renders_every_context_key():
    record = make_record("Time-locked position has not matured, skipping",
                         position_id=2, unlock_time=105, chain_time=100, completed=3)

    output = MigratorFormatter(include_context=True).format(record)

    assert output.endswith(
        "Time-locked position has not matured, skipping | position_id=2 unlock_time=105 chain_time=100 completed=3"
    )


def test_formatter_without_context():
    output = MigratorFormatter(include_context=True).format(make_record("Found 3 pools"))

    assert output.endswith("Found 3 pools")
    assert "|" not in output


def test_plain_formatter_omits_context():
    output = MigratorFormatter().format(make_record("Depositing", amount=5))

    assert "amount" not in output


def test_formatter_appends_exception():
    try:
        raise RuntimeError("rpc down")
    except RuntimeError:
        record = logging.LogRecord("migrator.test", logging.ERROR, "", 0, "Read failed", (), sys.exc_info())

    output = MigratorFormatter(include_context=True).format(record)

    assert "Traceback" in output
    assert "RuntimeError: rpc down" in output


def test_context_reaches_log_file(file_logging):
    logger = MigratorLogger.get_logger("test")
    log_with_context(logger, logging.INFO, "Depositing to new ledger",
                     position_id=0, wallet_balance=5, intended=7)
    for handler in logging.getLogger("migrator").handlers:
        handler.flush()

    content = (file_logging / "migrator.log").read_text()
    assert "position_id=0 wallet_balance=5 intended=7" in content


def test_set_level_keeps_error_log_at_error(file_logging):
    MigratorLogger.set_level("DEBUG")

    levels = {Path(handler.baseFilename).name: handler.level
              for handler in logging.getLogger("migrator").handlers}
    assert levels == {"migrator.log": logging.DEBUG, "migrator_errors.log": logging.ERROR}
    assert logging.getLogger("migrator").level == logging.DEBUG


def test_create_migrator_applies_configured_level(chain, contracts, store, restore_level):
    config = MigratorConfig(contracts=contracts, log_level="WARNING")

    create_migrator(config, client=chain, store=store, env_vars={})

    assert logging.getLogger("migrator").level == logging.WARNING


def test_explicit_level_wins(chain, contracts, store, restore_level):
    config = MigratorConfig(contracts=contracts, log_level="WARNING")

    create_migrator(config, client=chain, store=store,
                    env_vars={"MIGRATOR_LOG_LEVEL": "ERROR"}, log_level="DEBUG")

    assert logging.getLogger("migrator").level == logging.DEBUG


def test_environment_level_overrides_config(chain, contracts, store, restore_level):
    config = MigratorConfig(contracts=contracts, log_level="WARNING")

    create_migrator(config, client=chain, store=store, env_vars={"MIGRATOR_LOG_LEVEL": "ERROR"})

    assert logging.getLogger("migrator").level == logging.ERROR
