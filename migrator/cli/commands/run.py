# migrator/cli/commands/run.py

"""
Migration run command
"""

import click

from ...types import ConfigError, PositionOutcome, SubsystemReport


LEDGER_CHOICES = ['all', 'primary', 'secondary']


@click.command('run')
@click.option('--ledger', type=click.Choice(LEDGER_CHOICES), default='all',
              show_default=True, help='Which ledger family to migrate')
@click.option('--account', help='Account to migrate, must be the signing account (default)')
@click.pass_context
def run(ctx, ledger, account):
    """Migrate positions from the old ledgers to the new ones

    Safe to re-run: positions interrupted after their withdrawal resume at
    the deposit step.

    Examples:
        # Everything, primary ledger first
        run

        # Only the SousChef-style ledger
        run --ledger secondary
    """
    cli_context = ctx.obj['cli_context']

    try:
        driver = cli_context.create_driver()
    except Exception as e:
        raise click.ClickException(f"Failed to create migrator: {e}")

    try:
        account = driver.resolve_account(account)
    except ConfigError as e:
        raise click.ClickException(str(e))

    if ledger == 'primary':
        reports = [driver.migrate_primary_ledger(account)]
    elif ledger == 'secondary':
        reports = [driver.migrate_secondary_ledger(account)]
    else:
        reports = driver.migrate_all(account).subsystems

    for report in reports:
        _print_report(report)

    if any(report.setup_error for report in reports):
        ctx.exit(1)


def _print_report(report: SubsystemReport) -> None:
    click.echo(f"\n{report.subsystem.label.capitalize()} ledger ({report.account})")

    if report.setup_error:
        click.echo(f"   ❌ Aborted: {report.setup_error}")
        return

    for result in report.positions:
        if result.outcome is PositionOutcome.COMPLETED:
            detail = f"deposited {result.deposited or 0}"
            if result.target_position_id is not None and result.target_position_id != result.position_id:
                detail += f" into pid {result.target_position_id}"
            if result.tickets_migrated:
                detail += f", {result.tickets_migrated} tickets"
            click.echo(f"   ✓ pid {result.position_id}: {detail}")
        elif result.outcome is PositionOutcome.SKIPPED:
            click.echo(f"   - pid {result.position_id}: skipped ({result.reason.value})")
        else:
            click.echo(f"   ❌ pid {result.position_id}: {result.error}")

    click.echo(f"   Completed: {report.count(PositionOutcome.COMPLETED)}  "
               f"Skipped: {report.count(PositionOutcome.SKIPPED)}  "
               f"Failed: {report.count(PositionOutcome.FAILED)}")

    if report.claim is not None:
        if report.claim.ok:
            click.echo(f"   ✓ Claimed rewards for pids {report.claim.position_ids} (tx {report.claim.tx_hash})")
        else:
            click.echo(f"   ❌ Reward claim failed: {report.claim.error}")
