"""
GitHub contents API client.

Four operations against one repository branch: get a file with its blob SHA,
create-or-update a file, delete a file, and list a directory. Every write
carries the blob SHA as a compare-and-swap token; GitHub rejects a write whose
SHA is stale (409) or missing for an existing path (422), and both surface as
ConflictError.

When owner, repository or token is missing (or in dry-run mode) writes are
logged and skipped instead of failing, so local development without
credentials still completes requests end to end.

API Documentation: https://docs.github.com/en/rest/repos/contents
"""

from __future__ import annotations

import base64
import binascii
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import requests

from pressroom import __version__
from pressroom.core.config import RemoteSettings
from pressroom.core.errors import ConflictError, RemoteError, RemoteUnavailableError

logger = logging.getLogger(__name__)

CONFLICT_STATUSES = (409, 422)


@dataclass
class RemoteFile:
    """A file on the remote branch and the SHA of the version read."""

    path: str
    sha: str
    content: bytes
    name: str = ""

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


@dataclass
class DirectoryEntry:
    """One entry of a directory listing."""

    name: str
    type: str  # "file" or "dir"
    path: str
    sha: str | None = None


@dataclass
class CommitResult:
    """Outcome of a write.

    ``committed`` is False when the write was skipped: credentials missing,
    dry run, transport failure, or a delete of a path that was already gone.
    """

    path: str
    action: str  # "create", "update", "delete"
    committed: bool
    sha: str | None = None
    skipped_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return not self.committed


@runtime_checkable
class ContentsClient(Protocol):
    """Interface the content store needs from a remote file store.

    GitHubContentsClient is the production implementation; tests substitute
    an in-memory one.
    """

    @property
    def writable(self) -> bool:
        ...

    def get_file(self, path: str) -> RemoteFile | None:
        ...

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        ...

    def put_file(
        self,
        path: str,
        content: bytes | str,
        sha: str | None = None,
        message: str | None = None,
    ) -> CommitResult:
        ...

    def delete_file(
        self,
        path: str,
        sha: str | None = None,
        message: str | None = None,
    ) -> CommitResult:
        ...


class GitHubContentsClient:
    """Client for the GitHub repository contents API."""

    def __init__(self, settings: RemoteSettings, session: requests.Session | None = None):
        """Initialize client.

        Args:
            settings: Repository coordinates and credentials
            session: HTTP session to reuse (a new one by default)
        """
        self.settings = settings
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/vnd.github+json",
            "User-Agent": f"pressroom/{__version__}",
        })
        if settings.token:
            self._session.headers["Authorization"] = f"Bearer {settings.token}"

    @property
    def addressable(self) -> bool:
        """True if owner and repository are known, so reads can be attempted."""
        return bool(self.settings.owner and self.settings.repo)

    @property
    def writable(self) -> bool:
        """True if writes are sent to the remote."""
        return self.settings.is_configured and not self.settings.dry_run

    def _skip_reason(self) -> str:
        if self.settings.dry_run:
            return "dry run"
        return "credentials missing: " + ", ".join(self.settings.missing)

    def _url(self, path: str) -> str:
        return f"{self.settings.contents_url}/{urllib.parse.quote(path.strip('/'), safe='/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send one request.

        Raises:
            RemoteUnavailableError: Connection failure or timeout
        """
        try:
            return self._session.request(
                method,
                self._url(path),
                timeout=self.settings.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise RemoteUnavailableError(f"{method} {path} failed: {e.__class__.__name__}", path=path) from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
            if isinstance(data, dict) and data.get("message"):
                return str(data["message"])
        except ValueError:
            pass
        return response.reason or f"HTTP {response.status_code}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_file(self, path: str) -> RemoteFile | None:
        """Fetch a file and its current SHA.

        Args:
            path: Repository path

        Returns:
            RemoteFile, or None if the path does not exist, is a directory,
            or the remote cannot be reached

        Raises:
            RemoteError: The API answered with an error other than 404
        """
        if not self.addressable:
            logger.debug("Remote not configured; treating %s as absent", path)
            return None

        try:
            response = self._request("GET", path, params={"ref": self.settings.branch})
        except RemoteUnavailableError as e:
            logger.warning("Could not read %s: %s", path, e.message)
            return None

        if response.status_code == 404:
            return None
        if not response.ok:
            raise RemoteError(
                f"Reading {path} failed ({response.status_code}): {self._error_message(response)}",
                path=path,
                remote_status=response.status_code,
            )

        data = response.json()
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            return None

        try:
            content = base64.b64decode(data.get("content") or "")
        except (binascii.Error, ValueError) as e:
            raise RemoteError(f"Undecodable content for {path}", path=path) from e

        return RemoteFile(
            path=str(data.get("path", path)),
            sha=str(data["sha"]),
            content=content,
            name=str(data.get("name", path.rsplit("/", 1)[-1])),
        )

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List a directory.

        Returns:
            Entries in the directory; empty if it does not exist or on any
            error (absence and failure are not distinguished here)
        """
        if not self.addressable:
            return []

        try:
            response = self._request("GET", path, params={"ref": self.settings.branch})
        except RemoteUnavailableError as e:
            logger.warning("Could not list %s: %s", path, e.message)
            return []

        if not response.ok:
            if response.status_code != 404:
                logger.warning("Listing %s failed (%s)", path, response.status_code)
            return []

        try:
            data = response.json()
        except ValueError:
            return []
        if not isinstance(data, list):
            return []

        return [
            DirectoryEntry(
                name=str(item.get("name", "")),
                type=str(item.get("type", "file")),
                path=str(item.get("path", f"{path.rstrip('/')}/{item.get('name', '')}")),
                sha=item.get("sha"),
            )
            for item in data
            if isinstance(item, dict)
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put_file(
        self,
        path: str,
        content: bytes | str,
        sha: str | None = None,
        message: str | None = None,
    ) -> CommitResult:
        """Create or update a file.

        Args:
            path: Repository path
            content: New file content
            sha: Blob SHA of the version being replaced; None to create
            message: Commit message

        Returns:
            CommitResult (skipped when writes are disabled or the remote is unreachable)

        Raises:
            ConflictError: *sha* is stale, or absent while the path exists
            RemoteError: Any other rejection
        """
        action = "update" if sha else "create"
        if not self.writable:
            reason = self._skip_reason()
            logger.warning("Skipping %s of %s (%s)", action, path, reason)
            return CommitResult(path=path, action=action, committed=False, skipped_reason=reason)

        raw = content.encode("utf-8") if isinstance(content, str) else content
        body: dict[str, Any] = {
            "message": message or f"{action} {path}",
            "content": base64.b64encode(raw).decode("ascii"),
            "branch": self.settings.branch,
        }
        if sha:
            body["sha"] = sha

        try:
            response = self._request("PUT", path, json=body)
        except RemoteUnavailableError as e:
            logger.warning("Skipping %s of %s: %s", action, path, e.message)
            return CommitResult(path=path, action=action, committed=False, skipped_reason=e.message)

        if response.status_code in CONFLICT_STATUSES:
            logger.error("Rejected %s of %s: %s", action, path, self._error_message(response))
            raise ConflictError(
                f"{path} was changed by someone else; reload and try again",
                path=path,
            )
        if not response.ok:
            logger.error("Failed %s of %s (%s)", action, path, response.status_code)
            raise RemoteError(
                f"Committing {path} failed ({response.status_code}): {self._error_message(response)}",
                path=path,
                remote_status=response.status_code,
            )

        new_sha = None
        try:
            new_sha = response.json().get("content", {}).get("sha")
        except (ValueError, AttributeError):
            pass
        logger.info("Committed %s of %s", action, path)
        return CommitResult(path=path, action=action, committed=True, sha=new_sha)

    def delete_file(
        self,
        path: str,
        sha: str | None = None,
        message: str | None = None,
    ) -> CommitResult:
        """Delete a file.

        Deleting a path that does not exist is a successful no-op.

        Args:
            path: Repository path
            sha: Blob SHA of the version being deleted; looked up when None
            message: Commit message

        Returns:
            CommitResult

        Raises:
            ConflictError: *sha* is stale
            RemoteError: Any other rejection
        """
        if not self.writable:
            reason = self._skip_reason()
            logger.warning("Skipping delete of %s (%s)", path, reason)
            return CommitResult(path=path, action="delete", committed=False, skipped_reason=reason)

        if sha is None:
            existing = self.get_file(path)
            if existing is None:
                logger.info("Nothing to delete at %s", path)
                return CommitResult(path=path, action="delete", committed=False, skipped_reason="not found")
            sha = existing.sha

        body = {
            "message": message or f"delete {path}",
            "branch": self.settings.branch,
            "sha": sha,
        }
        try:
            response = self._request("DELETE", path, json=body)
        except RemoteUnavailableError as e:
            logger.warning("Skipping delete of %s: %s", path, e.message)
            return CommitResult(path=path, action="delete", committed=False, skipped_reason=e.message)

        if response.status_code == 404:
            logger.info("Nothing to delete at %s", path)
            return CommitResult(path=path, action="delete", committed=False, skipped_reason="not found")
        if response.status_code in CONFLICT_STATUSES:
            logger.error("Rejected delete of %s: %s", path, self._error_message(response))
            raise ConflictError(
                f"{path} was changed by someone else; reload and try again",
                path=path,
            )
        if not response.ok:
            logger.error("Failed delete of %s (%s)", path, response.status_code)
            raise RemoteError(
                f"Deleting {path} failed ({response.status_code}): {self._error_message(response)}",
                path=path,
                remote_status=response.status_code,
            )

        logger.info("Deleted %s", path)
        return CommitResult(path=path, action="delete", committed=True)
