"""Main CLI entry point."""

import logging

import click
from hangarledger.database.factories import create_sqlite_database
from hangarledger.storage.local import create_local_blob_store

# Import and register all commands at module level
from hangarledger.cli.commands import (
    backup,
    export,
    import_cmd,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides HANGARLEDGER_DB_PATH environment variable)",
    envvar="HANGARLEDGER_DB_PATH",
)
@click.option(
    "--storage-dir",
    type=click.Path(file_okay=False),
    help="Directory for receipt files (overrides HANGARLEDGER_STORAGE_DIR environment variable)",
    envvar="HANGARLEDGER_STORAGE_DIR",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, storage_dir: str | None, verbose: bool):
    """Hangar Ledger - Aircraft expense tracking.

    Import expenses from Airplane Manager exports or the CSV template, back up
    and restore all data, and export expenses to CSV.
    """
    ctx.ensure_object(dict)
    setup_logging(verbose)

    # Initialize storage only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["blob_store"] = create_local_blob_store(storage_dir)
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
backup.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
