"""
Main CLI dispatcher for pressroom.

Usage:
    pressroom events [list|show|create|update|delete]
    pressroom scholarships [list|show|create|update|delete]
    pressroom remote status
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from pressroom import __version__

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False, dry_run: bool = False, client=None, settings=None):
        self.verbose = verbose
        self.dry_run = dry_run
        self.console = console
        self.client = client
        self._settings = settings

    @property
    def settings(self):
        """Process settings, with ``--dry-run`` applied."""
        from pressroom.core.config import get_settings

        settings = self._settings or get_settings()
        if self.dry_run and not settings.remote.dry_run:
            settings = settings.with_dry_run()
        return settings

    def manager(self, content_type: str):
        """Entry manager for *content_type*, wired to the remote store."""
        from pressroom.entries import build_manager

        return build_manager(content_type, self.settings, self.client)


def setup_logging(verbose: bool) -> None:
    """Route the library's log records through rich."""
    logger = logging.getLogger("pressroom")
    logger.setLevel(logging.INFO if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False, markup=False))


@click.group()
@click.version_option(version=__version__, prog_name="pressroom")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-n", "--dry-run", is_flag=True, help="Preview without committing anything")
@click.pass_context
def main(ctx: click.Context, verbose: bool, dry_run: bool) -> None:
    """Publish events and scholarships to a GitHub-hosted site.

    Entries are markdown files committed through the GitHub contents API.
    """
    if isinstance(ctx.obj, Context):
        ctx.obj.verbose = verbose or ctx.obj.verbose
        ctx.obj.dry_run = dry_run or ctx.obj.dry_run
    else:
        ctx.obj = Context(verbose=verbose, dry_run=dry_run)

    setup_logging(ctx.obj.verbose)

    if ctx.obj.dry_run:
        console.print("[yellow]DRY RUN MODE - No changes will be committed[/yellow]")


# Import and register command groups (imports after main definition intentional)
from pressroom.entries.commands import events, scholarships  # noqa: E402
from pressroom.remote.commands import remote  # noqa: E402

main.add_command(events)
main.add_command(scholarships)
main.add_command(remote)


if __name__ == "__main__":
    main()
