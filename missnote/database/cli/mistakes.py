"""
Mistake Commands
----------------

Record, browse and edit mistakes and their photos.

Commands:
    - add: Record a new mistake (optionally with photos)
    - show: Display one mistake with its photos
    - edit: Change fields of a mistake
    - delete: Delete a mistake and its photo rows
    - search: List mistakes matching filters
    - review: List mistakes due for review
    - photo add: Attach image files to a mistake
    - photo delete: Delete a photo and its file

Usage:
    missnote add --title "Sign error" --body "Dropped the minus" --subject 数学
    missnote search --q sign --sort importance
    missnote photo add 3 ~/Pictures/page.jpg
"""
import click

from missnote.core.logging_manager import handle_cli_error
from missnote.core.exceptions import DatabaseError, NotFoundError, ValidationError
from missnote.database.models import Importance, SortMode
from missnote.database.query_engine import SearchResult
from . import get_db


def _importance_label(value: int) -> str:
    try:
        return Importance(value).display_name
    except ValueError:
        return str(value)


def _echo_result(result: SearchResult) -> None:
    mistake = result.mistake
    marker = "📷 " if result.first_photo_uri else ""
    click.echo(
        f"  [{mistake.id}] {marker}{mistake.title} "
        f"({mistake.subject}, {_importance_label(mistake.importance)}, "
        f"{mistake.occurred_at[:10]})"
    )


@click.command()
@click.option("--title", required=True, help="Short description")
@click.option("--body", required=True, help="Full notes")
@click.option("--subject", default=None, help="Subject name")
@click.option(
    "--importance",
    type=click.IntRange(1, 3),
    default=None,
    help="1 (low) to 3 (high)",
)
@click.option("--occurred-at", default=None, help="ISO date or datetime (default: now)")
@click.option(
    "--photo",
    "photos",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Image file to attach (repeatable)",
)
@click.pass_context
def add(ctx, title, body, subject, importance, occurred_at, photos):
    """Record a new mistake."""
    try:
        db = get_db(ctx)
        mistake_id, stored = db.add_mistake(
            {
                "title": title,
                "body": body,
                "subject": subject,
                "importance": importance,
                "occurred_at": occurred_at,
            },
            photos,
        )
        click.echo(f"✅ Mistake created: {mistake_id}")
        if stored:
            click.echo(f"📷 Attached {len(stored)} photo(s)")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "add_mistake", additional_context={"title": title})


@click.command()
@click.argument("mistake_id", type=int)
@click.pass_context
def show(ctx, mistake_id):
    """Display a mistake with its photos."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            mistake = db.mistakes.get_by_id(mistake_id)
            if mistake is None:
                raise NotFoundError(f"No Mistake found with id: {mistake_id}")

            click.echo(f"\n📝 {mistake.title}")
            click.echo("=" * 60)
            click.echo(f"Subject:    {mistake.subject}")
            click.echo(f"Importance: {_importance_label(mistake.importance)}")
            click.echo(f"Occurred:   {mistake.occurred_at}")
            click.echo(f"Created:    {mistake.created_at}")
            click.echo(f"Updated:    {mistake.updated_at}")
            click.echo(f"\n{mistake.body}")

            if mistake.photos:
                click.echo(f"\n📷 Photos ({len(mistake.photos)}):")
                for photo in mistake.photos:
                    click.echo(f"  [{photo.id}] {photo.uri}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "show_mistake", additional_context={"mistake_id": mistake_id})


@click.command()
@click.argument("mistake_id", type=int)
@click.option("--title", default=None, help="New title")
@click.option("--body", default=None, help="New notes")
@click.option("--subject", default=None, help="New subject")
@click.option("--importance", type=click.IntRange(1, 3), default=None, help="New importance")
@click.option("--occurred-at", default=None, help="New ISO date or datetime")
@click.pass_context
def edit(ctx, mistake_id, title, body, subject, importance, occurred_at):
    """Change fields of a mistake."""
    changes = {
        key: value
        for key, value in {
            "title": title,
            "body": body,
            "subject": subject,
            "importance": importance,
            "occurred_at": occurred_at,
        }.items()
        if value is not None
    }
    if not changes:
        click.echo("⚠️  Nothing to change")
        return

    try:
        db = get_db(ctx)
        with db.session_scope():
            db.mistakes.update(mistake_id, changes)
        click.echo(f"✅ Mistake {mistake_id} updated: {', '.join(changes)}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "edit_mistake", additional_context={"mistake_id": mistake_id})


@click.command()
@click.argument("mistake_id", type=int)
@click.confirmation_option(prompt="⚠️  Delete this mistake and its photo records?")
@click.pass_context
def delete(ctx, mistake_id):
    """Delete a mistake together with its photo rows."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            deleted = db.mistakes.delete(mistake_id)

        if deleted:
            click.echo(f"🗑️  Mistake {mistake_id} deleted")
        else:
            click.echo(f"⚠️  No mistake with id {mistake_id}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "delete_mistake", additional_context={"mistake_id": mistake_id})


@click.command()
@click.option("--q", "q", default=None, help="Text contained in title or body")
@click.option("--subject", default=None, help="Exact subject (ALL for any)")
@click.option(
    "--importance",
    type=click.IntRange(0, 3),
    default=None,
    help="Exact importance (0 for any)",
)
@click.option("--from", "from_", default=None, help="Occurred at or after (ISO)")
@click.option("--to", default=None, help="Occurred before (ISO)")
@click.option(
    "--sort",
    type=click.Choice(SortMode.choices()),
    default=SortMode.DATE.value,
    help="Result ordering",
)
@click.pass_context
def search(ctx, q, subject, importance, from_, to, sort):
    """List mistakes matching the given filters."""
    try:
        db = get_db(ctx)
        results = db.search(
            {
                "q": q,
                "subject": subject,
                "importance": importance,
                "from": from_,
                "to": to,
                "sort": sort,
            }
        )

        click.echo(f"\n🔍 {len(results)} mistake(s) ({SortMode(sort).display_name})")
        for result in results:
            _echo_result(result)

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "search")


@click.command()
@click.pass_context
def review(ctx):
    """List mistakes due for review."""
    try:
        db = get_db(ctx)
        windows = db.review()

        labels = {
            "yesterday": "Yesterday",
            "week_ago": "About a week ago",
            "month_ago": "About a month ago",
        }
        for name, results in windows.items():
            click.echo(f"\n📅 {labels.get(name, name)} ({len(results)})")
            for result in results:
                _echo_result(result)

    except DatabaseError as e:
        handle_cli_error(ctx, e, "review")


@click.group()
@click.pass_context
def photo(ctx: click.Context) -> None:
    """Photo management for mistakes."""
    pass


@photo.command("add")
@click.argument("mistake_id", type=int)
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False),
)
@click.pass_context
def photo_add(ctx, mistake_id, files):
    """Attach image files to a mistake."""
    try:
        db = get_db(ctx)
        stored = db.attach_photos(mistake_id, files)
        click.echo(f"📷 Attached {len(stored)} photo(s) to mistake {mistake_id}")

    except (DatabaseError, ValidationError) as e:
        handle_cli_error(ctx, e, "add_photos", additional_context={"mistake_id": mistake_id})


@photo.command("delete")
@click.argument("photo_id", type=int)
@click.pass_context
def photo_delete(ctx, photo_id):
    """Delete a photo and its file."""
    try:
        db = get_db(ctx)
        outcome = db.delete_photo(photo_id)

        if not outcome.deleted:
            click.echo(f"⚠️  No photo with id {photo_id}")
        elif outcome.file_removed:
            click.echo(f"🗑️  Photo {photo_id} deleted")
        else:
            click.echo(f"🗑️  Photo {photo_id} deleted")
            click.echo(f"⚠️  File could not be removed: {outcome.file_error}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "delete_photo", additional_context={"photo_id": photo_id})
