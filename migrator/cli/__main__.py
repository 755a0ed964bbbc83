# migrator/cli/__main__.py

"""
Migrator CLI Tool

Usage: python -m migrator.cli [command] [options]
"""

from pathlib import Path

import click

from migrator.cli.context import CLIContext
from migrator.cli.commands.checkpoints import checkpoints
from migrator.cli.commands.run import run
from migrator.core.logging import MigratorLogger


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Configuration file (YAML or JSON)')
@click.pass_context
def cli(ctx, verbose, config_path):
    """Chef Ledger Migrator

    Moves staked positions, staking tickets and rewards from the old
    MasterChef and SousChef ledgers to their successors.
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose

    log_level = "DEBUG" if verbose else "INFO"
    MigratorLogger.configure(
        log_dir=Path.cwd() / "logs",
        log_level=log_level,
        console_enabled=True,
        file_enabled=False,
        structured_format=True
    )

    if 'cli_context' not in ctx.obj:
        ctx.obj['cli_context'] = CLIContext(config_path=config_path, log_level="DEBUG" if verbose else None)


cli.add_command(run)
cli.add_command(checkpoints)


if __name__ == '__main__':
    cli()
