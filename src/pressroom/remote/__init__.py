"""Remote file store access."""

from pressroom.remote.client import (
    CommitResult,
    ContentsClient,
    DirectoryEntry,
    GitHubContentsClient,
    RemoteFile,
)

__all__ = [
    "CommitResult",
    "ContentsClient",
    "DirectoryEntry",
    "GitHubContentsClient",
    "RemoteFile",
]
