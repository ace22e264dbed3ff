"""CLI commands for events and scholarships.

Each content type gets the same five commands (list, show, create, update,
delete). Options map one-to-one onto form fields, so the CLI goes through the
same validation as the admin forms.
"""

from __future__ import annotations

import json as json_module
import mimetypes
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from pressroom.content.store import StoreResult, Upload
from pressroom.core.errors import PressroomError

console = Console()

# Form fields stored as lists, and the separator the form uses for them
LIST_FIELDS = {"tags": ",", "eligibility": "\n"}


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _fail(error: PressroomError) -> None:
    console.print(f"[red]Error:[/red] {error.message}")
    raise SystemExit(1)


def _read_upload(path: Path | None) -> Upload | None:
    if path is None:
        return None
    content_type, _ = mimetypes.guess_type(path.name)
    return Upload(filename=path.name, data=path.read_bytes(), content_type=content_type)


def _form_from_options(options: dict[str, Any]) -> dict[str, Any]:
    """Drop unset options; repeatable options become lists."""
    form: dict[str, Any] = {}
    for key, value in options.items():
        if value is None or value == ():
            continue
        form[key] = list(value) if isinstance(value, tuple) else value
    return form


def _form_from_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Turn stored front matter back into form values."""
    form: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, list):
            form[key] = LIST_FIELDS.get(key, ",").join(str(v) for v in value)
        elif isinstance(value, bool):
            form[key] = value
        else:
            form[key] = str(value)
    return form


def _report(result: StoreResult) -> None:
    verb = {"create": "Created", "update": "Updated", "rename": "Renamed", "delete": "Deleted"}[result.action]
    target = result.slug
    if result.previous_slug:
        target = f"{result.previous_slug} -> {result.slug}"

    if result.committed:
        console.print(f"[green]{verb}[/green] [cyan]{target}[/cyan] ({result.document_path})")
    elif result.commits:
        reasons = sorted({c.skipped_reason for c in result.commits if c.skipped_reason})
        console.print(f"[yellow]Nothing committed[/yellow] for [cyan]{target}[/cyan] ({'; '.join(reasons)})")
    else:
        console.print(f"[yellow]Nothing to do[/yellow] for [cyan]{target}[/cyan]")

    for commit in result.commits:
        mark = "[green]+[/green]" if commit.committed else "[dim]-[/dim]"
        console.print(f"  {mark} {commit.action} {commit.path}")
    for warning in result.warnings:
        console.print(f"  [yellow]Warning:[/yellow] {warning}")


# ---------------------------------------------------------------------------
# Shared command implementations
# ---------------------------------------------------------------------------


def _list(ctx, content_type: str, long: bool, as_json: bool) -> None:
    manager = ctx.manager(content_type)
    try:
        slugs = manager.list_slugs()
        entries = [manager.get(slug) for slug in slugs] if (long or as_json) else []
    except PressroomError as e:
        _fail(e)

    if as_json:
        output = [dict(entry.fields, slug=entry.slug) for entry in entries]
        console.print(json_module.dumps(output, indent=2, default=str))
        return

    if not slugs:
        console.print(f"[yellow]No {content_type} found[/yellow]")
        return

    title_field = manager.content_type.title_field
    table = Table(title=f"{manager.content_type.label} ({len(slugs)} found)")
    table.add_column("Slug", style="cyan")
    if long:
        table.add_column("Title")
        table.add_column("Draft", style="yellow")
        for entry in entries:
            title = str(entry.fields.get(title_field, ""))
            table.add_row(
                entry.slug,
                title[:50] + "..." if len(title) > 50 else title,
                "yes" if entry.fields.get("draft") else "",
            )
    else:
        for slug in slugs:
            table.add_row(slug)
    console.print(table)


def _show(ctx, content_type: str, slug: str, as_json: bool) -> None:
    manager = ctx.manager(content_type)
    try:
        entry = manager.get(slug)
    except PressroomError as e:
        _fail(e)

    if as_json:
        data = {"slug": entry.slug, "path": entry.path, "sha": entry.sha, "fields": entry.fields, "body": entry.body}
        console.print(json_module.dumps(data, indent=2, default=str))
        return

    console.print(f"[bold cyan]{entry.slug}[/bold cyan] [dim]{entry.path} @ {entry.sha[:7]}[/dim]")
    for key, value in entry.fields.items():
        if isinstance(value, list):
            console.print(f"  [cyan]{key}:[/cyan]")
            for item in value:
                console.print(f"    - {item}")
        else:
            console.print(f"  [cyan]{key}:[/cyan] {value}")
    if entry.body:
        console.print()
        console.print(entry.body)


def _create(ctx, content_type: str, image: Path | None, unique: bool, options: dict[str, Any]) -> None:
    manager = ctx.manager(content_type)
    try:
        result = manager.create(_form_from_options(options), _read_upload(image), unique=unique)
    except PressroomError as e:
        _fail(e)
    _report(result)


def _update(ctx, content_type: str, slug: str, image: Path | None, options: dict[str, Any]) -> None:
    manager = ctx.manager(content_type)
    try:
        current = manager.get(slug)
        form = _form_from_fields(current.fields)
        form["body"] = current.body
        form.update(_form_from_options(options))
        result = manager.update(slug, form, _read_upload(image))
    except PressroomError as e:
        _fail(e)
    _report(result)


def _delete(ctx, content_type: str, slug: str, yes: bool) -> None:
    manager = ctx.manager(content_type)
    if not yes:
        click.confirm(f"Delete {content_type[:-1]} '{slug}' and its images?", abort=True)
    try:
        result = manager.delete(slug)
    except PressroomError as e:
        _fail(e)
    _report(result)


def _apply(options):
    def decorator(func):
        for option in reversed(options):
            func = option(func)
        return func

    return decorator


image_option = click.option(
    "--image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Image file to upload",
)
body_option = click.option("--body", default=None, help="Markdown body")
unique_option = click.option(
    "--unique", is_flag=True, help="Append a timestamp to the slug if it is already taken"
)


# ---------------------------------------------------------------------------
# pressroom events
# ---------------------------------------------------------------------------


EVENT_OPTIONS = [
    click.option("--title", default=None, help="Event title (derives the slug)"),
    click.option("--date", default=None, help="Start date (YYYY-MM-DD)"),
    click.option("--end-date", "endDate", default=None, help="End date (YYYY-MM-DD)"),
    click.option("--time", default=None, help="Time of day, free text"),
    click.option("--location", default=None, help="Where the event takes place"),
    click.option("--summary", default=None, help="Short description (10-500 characters)"),
    click.option("-t", "--tag", "tags", multiple=True, help="Tag (can repeat)"),
    click.option("--registration-link", "registrationLink", default=None, help="Registration URL"),
    click.option(
        "--registration-required/--no-registration-required",
        "registrationRequired",
        default=None,
        help="Whether registration is required",
    ),
    click.option("--draft/--publish", "draft", default=None, help="Mark as draft or published"),
    body_option,
]


@click.group(name="events")
def events() -> None:
    """Manage events."""
    pass


@events.command(name="list")
@click.option("-l", "--long", is_flag=True, help="Read each entry and show its title")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON array")
@click.pass_obj
def list_events(ctx, long: bool, as_json: bool) -> None:
    """List events on the remote branch."""
    _list(ctx, "events", long, as_json)


@events.command(name="show")
@click.argument("slug")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def show_event(ctx, slug: str, as_json: bool) -> None:
    """Show one event."""
    _show(ctx, "events", slug, as_json)


@events.command(name="create")
@_apply(EVENT_OPTIONS)
@image_option
@unique_option
@click.pass_obj
def create_event(ctx, image: Path | None, unique: bool, **options: Any) -> None:
    """Create an event.

    Without --image the event uses the default badge image.
    """
    _create(ctx, "events", image, unique, options)


@events.command(name="update")
@click.argument("slug")
@_apply(EVENT_OPTIONS)
@image_option
@click.pass_obj
def update_event(ctx, slug: str, image: Path | None, **options: Any) -> None:
    """Update an event; unset options keep their stored values.

    Changing the title renames the event to the new slug.
    """
    _update(ctx, "events", slug, image, options)


@events.command(name="delete")
@click.argument("slug")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@click.pass_obj
def delete_event(ctx, slug: str, yes: bool) -> None:
    """Delete an event and its uploaded images."""
    _delete(ctx, "events", slug, yes)


# ---------------------------------------------------------------------------
# pressroom scholarships
# ---------------------------------------------------------------------------


SCHOLARSHIP_OPTIONS = [
    click.option("--name", default=None, help="Scholarship name (derives the slug)"),
    click.option(
        "--type",
        "type",
        type=click.Choice(["scholarship", "fellowship", "internship"]),
        default=None,
        help="Kind of award",
    ),
    click.option("--amount", default=None, help="Award amount"),
    click.option(
        "--frequency",
        type=click.Choice(["One-time", "Annual", "Semester", "Monthly"], case_sensitive=False),
        default=None,
        help="How often it is awarded",
    ),
    click.option("--deadline", default=None, help="Application deadline (YYYY-MM-DD)"),
    click.option("--description", default=None, help="Description (10-5000 characters)"),
    click.option("-e", "--eligibility", multiple=True, help="Eligibility criterion (can repeat)"),
    click.option("--order", default=None, help="Sort order on the listing page"),
    click.option("--draft/--publish", "draft", default=None, help="Mark as draft or published"),
    body_option,
]


@click.group(name="scholarships")
def scholarships() -> None:
    """Manage scholarships."""
    pass


@scholarships.command(name="list")
@click.option("-l", "--long", is_flag=True, help="Read each entry and show its name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON array")
@click.pass_obj
def list_scholarships(ctx, long: bool, as_json: bool) -> None:
    """List scholarships on the remote branch."""
    _list(ctx, "scholarships", long, as_json)


@scholarships.command(name="show")
@click.argument("slug")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def show_scholarship(ctx, slug: str, as_json: bool) -> None:
    """Show one scholarship."""
    _show(ctx, "scholarships", slug, as_json)


@scholarships.command(name="create")
@_apply(SCHOLARSHIP_OPTIONS)
@image_option
@unique_option
@click.pass_obj
def create_scholarship(ctx, image: Path | None, unique: bool, **options: Any) -> None:
    """Create a scholarship."""
    _create(ctx, "scholarships", image, unique, options)


@scholarships.command(name="update")
@click.argument("slug")
@_apply(SCHOLARSHIP_OPTIONS)
@image_option
@click.pass_obj
def update_scholarship(ctx, slug: str, image: Path | None, **options: Any) -> None:
    """Update a scholarship; unset options keep their stored values.

    Changing the name renames the scholarship to the new slug.
    """
    _update(ctx, "scholarships", slug, image, options)


@scholarships.command(name="delete")
@click.argument("slug")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@click.pass_obj
def delete_scholarship(ctx, slug: str, yes: bool) -> None:
    """Delete a scholarship and its uploaded images."""
    _delete(ctx, "scholarships", slug, yes)
