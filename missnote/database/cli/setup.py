"""
Setup & Migration Commands
--------------------------

Database initialization and Alembic migration commands.

Commands:
    - init: Create or migrate the database and seed default subjects
    - migration status: Show current and head revisions
    - migration upgrade: Upgrade to a revision

Usage:
    missnote init
    missnote migration status
    missnote migration upgrade --revision head
"""
import click

from missnote.core.logging_manager import handle_cli_error
from missnote.core.exceptions import DatabaseError
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Create the database, or bring an existing one up to date."""
    try:
        click.echo("🚀 Initializing MissNote database...")
        db = get_db(ctx)
        status = db.get_migration_history()
        with db.session_scope():
            subject_count = len(db.subjects.list_names())

        click.echo(f"🗄️  Database: {db.db_path}")
        click.echo(f"📌 Revision: {status['current_revision']}")
        click.echo(f"📚 Subjects: {subject_count}")
        click.echo("✅ Database ready!")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "init")


@click.group()
@click.pass_context
def migration(ctx: click.Context) -> None:
    """Database migration management (Alembic operations)."""
    pass


@migration.command("status")
@click.pass_context
def migration_status(ctx):
    """Show current migration status."""
    try:
        db = get_db(ctx)
        status = db.get_migration_history()

        click.echo("\n📊 Migration Status")
        click.echo("=" * 40)
        click.echo(f"Current revision: {status['current_revision'] or 'none'}")
        click.echo(f"Head revision:    {status['head_revision'] or 'none'}")
        click.echo(f"Status:           {status['status']}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "migration_status")


@migration.command("upgrade")
@click.option("--revision", default="head", help="Target revision (default: head)")
@click.pass_context
def migration_upgrade(ctx, revision):
    """Upgrade database to specified revision."""
    try:
        click.echo(f"⬆️  Upgrading database to: {revision}")
        db = get_db(ctx)
        db.upgrade_database(revision)
        click.echo("✅ Database upgraded successfully!")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "migration_upgrade", additional_context={"revision": revision})
