"""Entry lifecycle managers for each content type."""

from __future__ import annotations

from pressroom.content.store import ContentStore
from pressroom.content.types import get_content_type
from pressroom.core.config import Settings
from pressroom.entries.base import EntryManager, validate_upload
from pressroom.entries.events import EventManager
from pressroom.entries.scholarships import ScholarshipManager
from pressroom.remote.client import ContentsClient, GitHubContentsClient

MANAGERS: dict[str, type[EntryManager]] = {
    EventManager.content_type.name: EventManager,
    ScholarshipManager.content_type.name: ScholarshipManager,
}


def build_manager(
    content_type: str,
    settings: Settings,
    client: ContentsClient | None = None,
) -> EntryManager:
    """Wire a manager, its store and a remote client for *content_type*.

    Args:
        content_type: ``events`` or ``scholarships``
        settings: Settings to build the GitHub client from
        client: Client to use instead of a new GitHubContentsClient

    Raises:
        KeyError: Unknown content type
    """
    ctype = get_content_type(content_type)
    store = ContentStore(client or GitHubContentsClient(settings.remote), ctype, settings.layout)
    return MANAGERS[ctype.name](store)


__all__ = [
    "EntryManager",
    "EventManager",
    "ScholarshipManager",
    "MANAGERS",
    "build_manager",
    "validate_upload",
]
