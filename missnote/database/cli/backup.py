"""
Backup & Restore Commands
--------------------------

Backup archive export and restore.

Commands:
    - backup: Save a ZIP of all data and photos to the backup directory
    - restore: Replace all data with the content of a backup archive

Usage:
    # Save a backup to the default backup directory
    missnote backup

    # Save it somewhere else
    missnote backup --output-dir ~/Dropbox/missnote

    # Restore from a specific archive
    missnote restore ~/Dropbox/missnote/miss-log-backup-20250901-2130.zip
"""
import click
from pathlib import Path

from missnote.core.logging_manager import handle_cli_error
from missnote.core.exceptions import BackupError, DatabaseError, ValidationError
from missnote.database.export_manager import SaveToDirectory
from missnote.database.restore_manager import RestoreOutcome
from . import get_db


@click.command()
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory to save the archive to (default: --backup-dir)",
)
@click.pass_context
def backup(ctx, output_dir):
    """Create a backup archive of all data and photos."""
    target_dir = Path(output_dir) if output_dir else ctx.obj["backup_dir"]
    try:
        click.echo("💾 Creating backup archive...")
        db = get_db(ctx)
        saved = db.export_backup(SaveToDirectory(target_dir))
        click.echo(f"✅ Backup created: {saved}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx,
            e,
            "backup",
            additional_context={"output_dir": str(target_dir)},
        )


@click.command()
@click.argument("backup_path", type=click.Path(exists=True, dir_okay=False))
@click.confirmation_option(
    prompt="⚠️  This will replace ALL mistakes, photos and subjects! Continue?"
)
@click.pass_context
def restore(ctx, backup_path):
    """Restore from a backup archive."""
    try:
        click.echo(f"♻️  Restoring from: {backup_path}")
        db = get_db(ctx)
        outcome = db.restore_backup(lambda: Path(backup_path))

        if outcome is RestoreOutcome.OK:
            click.echo("✅ Backup restored successfully!")
        else:
            click.echo("⚠️  Restore canceled")

    except (BackupError, DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx,
            e,
            "restore",
            additional_context={"backup_path": backup_path},
        )
