"""Backup and restore commands."""

from pathlib import Path

import click
import hangarledger
from hangarledger.cli.error_handling import handle_domain_error
from hangarledger.domain.backup import BackupService
from hangarledger.domain.errors import DomainError


@click.group()
def backup_group():
    """Back up or restore all ledger data."""
    pass


@backup_group.command("create")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_context
def create_backup(ctx, output: str):
    """Write a backup archive of all data and receipts to OUTPUT."""
    service = BackupService(ctx.obj["db"], ctx.obj["blob_store"], hangarledger.__version__)
    archive = service.generate_backup()
    Path(output).write_bytes(archive)
    click.echo(f"Backup written to {output} ({len(archive)} bytes)")


@backup_group.command("restore")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def restore_backup(ctx, archive: str):
    """Restore records from ARCHIVE, skipping ones that already exist."""
    service = BackupService(ctx.obj["db"], ctx.obj["blob_store"], hangarledger.__version__)

    try:
        result = service.restore_backup(Path(archive).read_bytes())
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo("\nRestore complete:")
    created = result.created.as_dict()
    skipped = result.skipped.as_dict()
    for kind in created:
        click.echo(
            f"  {kind.replace('_', ' ').capitalize()}: "
            f"{created[kind]} created, {skipped[kind]} skipped"
        )
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
