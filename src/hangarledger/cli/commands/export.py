"""Export commands."""

from pathlib import Path

import click
from hangarledger.domain.export import export_expenses_to_csv


@click.group()
def export_group():
    """Export ledger data."""
    pass


@export_group.command("expenses")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_context
def export_expenses(ctx, output: str):
    """Write all expenses to OUTPUT as CSV, one row per line item."""
    csv_text = export_expenses_to_csv(ctx.obj["db"])
    Path(output).write_text(csv_text, encoding="utf-8")
    click.echo(f"Exported expenses to {output}")


def register_commands(cli):
    """Register export commands with main CLI."""
    cli.add_command(export_group, name="export")
