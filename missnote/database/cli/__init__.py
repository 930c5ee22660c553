#!/usr/bin/env python3
"""
MissNote Database CLI
---------------------

Modular command-line interface for the mistake log.

This module provides the main CLI group and shared context setup
for all commands.

Command Structure:
    - Setup & Migration (init, migration)
    - Mistakes (add, show, edit, delete, search, review, photo)
    - Subjects (subjects)
    - Backup & Restore (backup, restore)

Usage:
    # Get general help
    missnote --help

    # Get help for a specific command group
    missnote subjects --help

    # Get help for a specific command
    missnote search --help
"""
import click
import logging
from pathlib import Path

from missnote.core.paths import (
    ALEMBIC_DIR,
    BACKUP_DIR,
    DB_PATH,
    LOG_DIR,
    PHOTOS_DIR,
    TMP_DIR,
)
from missnote.database import MissNoteDB


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to database file",
)
@click.option(
    "--alembic-dir",
    type=click.Path(),
    default=str(ALEMBIC_DIR),
    help="Path to Alembic directory",
)
@click.option(
    "--photos-dir",
    type=click.Path(),
    default=str(PHOTOS_DIR),
    help="Path to photo directory",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.option(
    "--backup-dir",
    type=click.Path(),
    default=str(BACKUP_DIR),
    help="Directory backup archives are saved to",
)
@click.option(
    "--tmp-dir",
    type=click.Path(),
    default=str(TMP_DIR),
    help="Directory backup archives are staged in",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, alembic_dir, photos_dir, log_dir, backup_dir, tmp_dir, verbose):
    """MissNote mistake log database CLI"""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["alembic_dir"] = Path(alembic_dir)
    ctx.obj["photos_dir"] = Path(photos_dir)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["backup_dir"] = Path(backup_dir)
    ctx.obj["tmp_dir"] = Path(tmp_dir)
    ctx.obj["verbose"] = verbose


def get_db(ctx) -> MissNoteDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        db = MissNoteDB(
            db_path=ctx.obj["db_path"],
            alembic_dir=ctx.obj["alembic_dir"],
            photos_dir=ctx.obj["photos_dir"],
            log_dir=ctx.obj["log_dir"],
            staging_dir=ctx.obj["tmp_dir"],
        )
        ctx.obj["db"] = db
        ctx.obj["logger"] = db.logger
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init, migration  # noqa: E402
from .mistakes import add, show, edit, delete, search, review, photo  # noqa: E402
from .subjects import subjects  # noqa: E402
from .backup import backup, restore  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(add)
cli.add_command(show)
cli.add_command(edit)
cli.add_command(delete)
cli.add_command(search)
cli.add_command(review)
cli.add_command(backup)
cli.add_command(restore)

# Register command groups
cli.add_command(migration)
cli.add_command(photo)
cli.add_command(subjects)


if __name__ == "__main__":
    cli(obj={})
