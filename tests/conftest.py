"""Shared test fixtures for pressroom."""

import hashlib

import pytest

from pressroom.content.store import ContentStore
from pressroom.content.types import EVENTS, SCHOLARSHIPS
from pressroom.core.config import AdminCredentials, RemoteSettings, Settings, SiteLayout
from pressroom.core.errors import ConflictError, RemoteError
from pressroom.entries.events import EventManager
from pressroom.entries.scholarships import ScholarshipManager
from pressroom.remote.client import CommitResult, DirectoryEntry, RemoteFile

FIXED_TIME = 1718000000.0


def blob_sha(data: bytes) -> str:
    """Git blob SHA-1, as GitHub reports it."""
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


class FakeContentsClient:
    """In-memory stand-in for the GitHub contents API.

    Writes follow the same compare-and-swap rules as GitHub: creating an
    existing path or updating with a stale SHA raises ConflictError.
    """

    def __init__(self, writable=True):
        self.files = {}
        self.calls = []
        self.fail_deletes = set()
        self.before_write = None
        self.messages = []
        self._writable = writable

    @property
    def writable(self):
        return self._writable

    @property
    def mutating_calls(self):
        return [c for c in self.calls if c[0] in ("PUT", "DELETE")]

    def seed(self, path, content):
        """Commit *content* directly, bypassing the call log."""
        data = content.encode("utf-8") if isinstance(content, str) else content
        self.files[path] = data
        return blob_sha(data)

    def text(self, path):
        return self.files[path].decode("utf-8")

    def get_file(self, path):
        self.calls.append(("GET", path, None))
        data = self.files.get(path)
        if data is None:
            return None
        return RemoteFile(path=path, sha=blob_sha(data), content=data, name=path.rsplit("/", 1)[-1])

    def list_directory(self, path):
        self.calls.append(("LIST", path, None))
        prefix = path.rstrip("/") + "/"
        entries = {}
        for file_path, data in sorted(self.files.items()):
            if not file_path.startswith(prefix):
                continue
            rest = file_path[len(prefix):]
            name = rest.split("/", 1)[0]
            if "/" in rest:
                entries.setdefault(name, DirectoryEntry(name=name, type="dir", path=prefix + name))
            else:
                entries[name] = DirectoryEntry(name=name, type="file", path=file_path, sha=blob_sha(data))
        return list(entries.values())

    def _run_hook(self):
        if self.before_write is not None:
            hook, self.before_write = self.before_write, None
            hook(self)

    def put_file(self, path, content, sha=None, message=None):
        self.calls.append(("PUT", path, sha))
        self.messages.append(message)
        action = "update" if sha else "create"
        if not self._writable:
            return CommitResult(path=path, action=action, committed=False, skipped_reason="credentials missing")
        self._run_hook()
        data = content.encode("utf-8") if isinstance(content, str) else content
        current = self.files.get(path)
        if current is None and sha is not None:
            raise ConflictError(f"{path} does not exist", path=path)
        if current is not None and sha != blob_sha(current):
            raise ConflictError(f"{path} does not match", path=path)
        self.files[path] = data
        return CommitResult(path=path, action=action, committed=True, sha=blob_sha(data))

    def delete_file(self, path, sha=None, message=None):
        self.calls.append(("DELETE", path, sha))
        self.messages.append(message)
        if not self._writable:
            return CommitResult(path=path, action="delete", committed=False, skipped_reason="credentials missing")
        self._run_hook()
        if path in self.fail_deletes:
            raise RemoteError(f"Deleting {path} failed (500)", path=path, remote_status=500)
        current = self.files.get(path)
        if current is None:
            return CommitResult(path=path, action="delete", committed=False, skipped_reason="not found")
        if sha is not None and sha != blob_sha(current):
            raise ConflictError(f"{path} does not match", path=path)
        del self.files[path]
        return CommitResult(path=path, action="delete", committed=True)


@pytest.fixture
def fake_client():
    """Writable in-memory remote."""
    return FakeContentsClient()


@pytest.fixture
def offline_client():
    """In-memory remote that skips every write, like missing credentials."""
    return FakeContentsClient(writable=False)


@pytest.fixture
def layout():
    return SiteLayout()


@pytest.fixture
def clock():
    return lambda: FIXED_TIME


@pytest.fixture
def event_store(fake_client, layout, clock):
    return ContentStore(fake_client, EVENTS, layout, clock=clock)


@pytest.fixture
def scholarship_store(fake_client, layout, clock):
    return ContentStore(fake_client, SCHOLARSHIPS, layout, clock=clock)


@pytest.fixture
def event_manager(event_store):
    return EventManager(event_store)


@pytest.fixture
def scholarship_manager(scholarship_store):
    return ScholarshipManager(scholarship_store)


@pytest.fixture
def event_form():
    """A valid event form submission."""
    return {
        "title": "Fall  Welcome!!",
        "date": "2024-09-15",
        "time": "6:00 PM",
        "location": "Engineering Hall 101",
        "summary": "Kick off the semester with the chapter.",
        "tags": "welcome, social",
        "registrationRequired": "on",
    }


@pytest.fixture
def scholarship_form():
    """A valid scholarship form submission."""
    return {
        "name": "Nuclear Futures Award",
        "type": "scholarship",
        "amount": "2,500",
        "frequency": "Annual",
        "deadline": "2025-03-01",
        "description": "Supports undergraduates studying nuclear engineering.",
        "eligibility": "Enrolled full time\nGPA of 3.0 or higher\n",
    }


@pytest.fixture
def settings():
    """Fully configured settings pointing at a test repository."""
    return Settings(
        remote=RemoteSettings(owner="ans-chapter", repo="site", token="ghp_test"),
        admin=AdminCredentials(username="admin", password="s3cret"),
    )


@pytest.fixture
def fake_client_factory():
    return FakeContentsClient
