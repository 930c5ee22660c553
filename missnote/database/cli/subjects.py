"""
Subject Commands
----------------

Manage the subject list mistakes are filed under.

Commands:
    - subjects list: Show active subjects (optionally deleted ones too)
    - subjects add: Add a subject at the end of the list
    - subjects rename: Rename a subject and every mistake using it
    - subjects delete: Hide a subject no mistake uses

Usage:
    missnote subjects list --all
    missnote subjects rename 物理 物理基礎
"""
import click

from missnote.core.logging_manager import handle_cli_error
from missnote.core.exceptions import DatabaseError, InUseError, ValidationError
from . import get_db


@click.group()
@click.pass_context
def subjects(ctx: click.Context) -> None:
    """Subject list management."""
    pass


@subjects.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include deleted subjects")
@click.pass_context
def subjects_list(ctx, show_all):
    """List subjects in display order."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            rows = [
                (subject.name, subject.is_active, db.subjects.usage_count(subject.name))
                for subject in db.subjects.get_all(include_inactive=show_all)
            ]

        click.echo(f"\n📚 Subjects ({len(rows)})")
        for name, is_active, usage in rows:
            suffix = "" if is_active else " (deleted)"
            click.echo(f"  • {name}{suffix}: {usage} mistake(s)")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "list_subjects")


@subjects.command("add")
@click.argument("name")
@click.pass_context
def subjects_add(ctx, name):
    """Add a subject."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            subject = db.subjects.add(name)
            added = subject.name
        click.echo(f"✅ Subject added: {added}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "add_subject", additional_context={"name": name})


@subjects.command("rename")
@click.argument("old_name")
@click.argument("new_name")
@click.pass_context
def subjects_rename(ctx, old_name, new_name):
    """Rename a subject and the mistakes filed under it."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            updated = db.subjects.rename(old_name, new_name)
        click.echo(f"✅ Subject renamed: {old_name} → {new_name} ({updated} mistake(s) updated)")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(
            ctx,
            e,
            "rename_subject",
            additional_context={"old_name": old_name, "new_name": new_name},
        )


@subjects.command("delete")
@click.argument("name")
@click.pass_context
def subjects_delete(ctx, name):
    """Delete a subject that no mistake uses."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            db.subjects.soft_delete(name)
        click.echo(f"🗑️  Subject deleted: {name}")

    except InUseError as e:
        handle_cli_error(
            ctx,
            e,
            "delete_subject",
            additional_context={"name": name, "usage_count": e.usage_count},
        )
    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "delete_subject", additional_context={"name": name})
