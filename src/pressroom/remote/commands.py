"""CLI commands for inspecting the remote repository settings."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.group(name="remote")
def remote() -> None:
    """Inspect the GitHub repository the content is committed to."""
    pass


@remote.command(name="status")
@click.option("--check", is_flag=True, help="List the content folders to verify access")
@click.pass_obj
def status(ctx, check: bool) -> None:
    """Show repository coordinates and whether writes will be committed.

    The token itself is never printed.
    """
    from pressroom.content.types import CONTENT_TYPES
    from pressroom.core.paths import ContentPaths
    from pressroom.remote.client import GitHubContentsClient

    settings = ctx.settings
    remote_settings = settings.remote
    client = ctx.client or GitHubContentsClient(remote_settings)

    table = Table(title="Remote", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Owner", remote_settings.owner or "[red]not set[/red]")
    table.add_row("Repository", remote_settings.repo or "[red]not set[/red]")
    table.add_row("Branch", remote_settings.branch)
    table.add_row("API", remote_settings.api_url)
    table.add_row("Token", "set" if remote_settings.token else "[red]not set[/red]")
    table.add_row("Content root", settings.layout.content_root)
    table.add_row("Asset root", settings.layout.asset_root)
    table.add_row("Admin login", "set" if settings.admin.is_configured else "[yellow]not set[/yellow]")
    console.print(table)

    if client.writable:
        console.print("[green]Writes will be committed.[/green]")
    elif remote_settings.dry_run:
        console.print("[yellow]Dry run: writes are logged and skipped.[/yellow]")
    else:
        missing = ", ".join(remote_settings.missing)
        console.print(f"[yellow]Writes are logged and skipped (missing: {missing}).[/yellow]")

    if check:
        for name in CONTENT_TYPES:
            folder = ContentPaths(settings.layout, name).content_dir
            entries = client.list_directory(folder)
            console.print(f"  {folder}: {len(entries)} entries")
