# migrator/cli/commands/checkpoints.py

"""
Checkpoint inspection commands
"""

import click
from eth_utils import to_checksum_address

from ...types import CheckpointKey, Subsystem


@click.group()
def checkpoints():
    """Inspect and clear in-flight migration checkpoints"""
    pass


@checkpoints.command('list')
@click.option('--ledger', type=click.Choice(['primary', 'secondary']), help='Filter by ledger family')
@click.option('--account', help='Filter by account')
@click.pass_context
def list_checkpoints(ctx, ledger, account):
    """List positions withdrawn but not yet deposited"""
    cli_context = ctx.obj['cli_context']
    store = cli_context.checkpoint_store

    subsystem = Subsystem.from_label(ledger) if ledger else None
    pending = store.pending(subsystem=subsystem, account=account)

    if not pending:
        click.echo("No pending checkpoints")
        return

    click.echo(f"{len(pending)} pending checkpoint(s):")
    for key, checkpoint in pending:
        click.echo(f"   {key.subsystem.label:<9} pid {key.position_id:<4} {key.account}  "
                   f"{checkpoint.amount} of {checkpoint.destination_resource}")


@checkpoints.command('clear')
@click.option('--ledger', type=click.Choice(['primary', 'secondary']), required=True,
              help='Ledger family of the position')
@click.option('--pid', type=int, required=True, help='Position id')
@click.option('--account', help='Account (defaults to the signing account)')
@click.pass_context
def clear_checkpoint(ctx, ledger, pid, account):
    """Drop one checkpoint after the position was settled by hand

    The next run will treat the position as never withdrawn.
    """
    cli_context = ctx.obj['cli_context']
    store = cli_context.checkpoint_store

    try:
        account = to_checksum_address(account or cli_context.account)
    except Exception as e:
        raise click.ClickException(f"Could not determine account: {e}")

    key = CheckpointKey(account=account, position_id=pid, subsystem=Subsystem.from_label(ledger))
    if store.get(key) is None:
        raise click.ClickException(f"No checkpoint found: {key.storage_key}")

    store.clear(key)
    click.echo(f"✅ Cleared {key.storage_key}")
