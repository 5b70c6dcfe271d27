"""Import commands: preview and run."""

import json
from pathlib import Path

import click
from hangarledger.cli.error_handling import handle_domain_error
from hangarledger.domain.errors import DomainError
from hangarledger.domain.import_executor import ImportExecutor
from hangarledger.domain.import_models import ImportSource
from hangarledger.domain.pipeline import (
    ImportSession,
    execute_session,
    map_session,
    preview_session,
    skip_duplicates,
    start_bundle_session,
    start_session,
)
from hangarledger.domain.preview import load_existing_entities

SOURCE_CHOICES = [source.value for source in ImportSource]


def _open_session(path: str, source: str) -> ImportSession:
    """Parse FILE; Airplane Manager ZIP bundles carry their receipts."""
    file_path = Path(path)
    if source == ImportSource.AIRPLANE_MANAGER.value and file_path.suffix.lower() == ".zip":
        return start_bundle_session(file_path.read_bytes())
    return start_session(source, file_path.read_text(encoding="utf-8-sig"))


def _echo_parse_issues(session: ImportSession) -> None:
    for issue in session.parse_result.errors:
        click.echo(f"  {issue}", err=True)


def _echo_preview(session: ImportSession) -> None:
    preview = session.preview
    click.echo(f"\nImport preview ({preview.source.value}):")
    click.echo(f"  Trips: {len(preview.trips)}")
    click.echo(f"  Expenses: {preview.total_expenses}")
    click.echo(f"  Line items: {preview.total_line_items}")
    if preview.standalone_expenses:
        click.echo(f"  Without trip: {len(preview.standalone_expenses)}")
    if preview.receipt_count:
        click.echo(f"  Receipts: {preview.receipt_count}")

    sections = (
        ("Aircraft", [(a.tail_number, a.exists) for a in preview.aircraft]),
        ("Vendors", [(v.name, v.exists) for v in preview.vendors]),
        ("Categories", [(c.name, c.exists) for c in preview.categories]),
        ("Payment methods", [(p.name, p.exists) for p in preview.payment_methods]),
    )
    for title, entries in sections:
        if not entries:
            continue
        click.echo(f"\n{title}:")
        for name, exists in entries:
            click.echo(f"  {name} ({'existing' if exists else 'new'})")

    if session.duplicate_trips:
        click.echo("\nTrips that already exist:")
        for duplicate in session.duplicate_trips:
            click.echo(
                f"  {duplicate.import_trip_name} (matches '{duplicate.existing_trip_name}' "
                f"from {duplicate.start_date})"
            )

    if preview.warnings:
        click.echo("\nWarnings:")
        for warning in preview.warnings:
            click.echo(f"  {warning}")


@click.group()
def import_group():
    """Import expenses from Airplane Manager or the CSV template."""
    pass


@import_group.command("preview")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--source",
    required=True,
    type=click.Choice(SOURCE_CHOICES),
    help="Format of FILE",
)
@click.pass_context
def preview_import(ctx, file: str, source: str):
    """Show what importing FILE would create."""
    db = ctx.obj["db"]

    try:
        session = _open_session(file, source)
        if session.parse_result.has_blocking_errors:
            click.echo(
                f"Found {len(session.parse_result.errors)} blocking errors:", err=True
            )
            _echo_parse_issues(session)
            ctx.exit(1)
        session = preview_session(session, load_existing_entities(db))
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    _echo_preview(session)


@import_group.command("run")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--source",
    required=True,
    type=click.Choice(SOURCE_CHOICES),
    help="Format of FILE",
)
@click.option(
    "--mappings",
    "mappings_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with create/map/skip overrides per vendor, category, "
    "payment method and aircraft",
)
@click.option(
    "--skip-duplicate-trips",
    is_flag=True,
    default=False,
    help="Do not import trips whose name matches an existing trip",
)
@click.pass_context
def run_import(ctx, file: str, source: str, mappings_file: str | None, skip_duplicate_trips: bool):
    """Import FILE into the ledger."""
    db = ctx.obj["db"]
    executor = ImportExecutor(db, ctx.obj["blob_store"])

    try:
        session = _open_session(file, source)
        if session.parse_result.has_blocking_errors:
            _echo_parse_issues(session)
        session = preview_session(session, load_existing_entities(db))
        if mappings_file is not None:
            overrides = json.loads(Path(mappings_file).read_text(encoding="utf-8"))
            session = map_session(session, overrides)
        if skip_duplicate_trips:
            session = skip_duplicates(
                session, [d.import_trip_name for d in session.duplicate_trips]
            )
        session = execute_session(session, executor)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)

    result = session.result
    click.echo("\nImport complete:")
    for kind, count in result.created.as_dict().items():
        if count:
            click.echo(f"  Created {kind.replace('_', ' ')}: {count}")
    click.echo(f"  Skipped trips: {result.skipped}")
    click.echo(f"  Failed: {result.failed}")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)

    if not result.success:
        ctx.exit(1)


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
