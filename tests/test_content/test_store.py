"""Tests for the content store."""

import logging

import pytest

from pressroom.content.frontmatter import Document, decode, encode
from pressroom.content.store import ContentStore, Upload
from pressroom.content.types import EVENTS
from pressroom.core.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

DOC = "src/content/events/fall-welcome.md"
NEW_DOC = "src/content/events/fall-kickoff.md"
ASSET_DIR = "public/uploads/events/fall-welcome"
DEFAULT_IMAGE = "/uploads/events/ANS-badge-red.png"


def make_document(title="Fall Welcome", **extra):
    fields = {
        "title": title,
        "date": "2024-09-15",
        "location": "Engineering Hall",
        "summary": "Kick off the semester.",
        "registrationRequired": False,
        "draft": False,
    }
    fields.update(extra)
    return Document(fields=fields, body="Doors open at six.")


def seed_event(client, path=DOC, image=DEFAULT_IMAGE, title="Fall Welcome"):
    text = encode(make_document(title, image=image).fields, "Old body", EVENTS.schema)
    return client.seed(path, text)


def stored_fields(client, path):
    return decode(client.text(path), EVENTS.schema).fields


@pytest.fixture
def offline_store(offline_client, layout, clock):
    return ContentStore(offline_client, EVENTS, layout, clock=clock)


# -----------------------------------------------------------------------------
# Reads
# -----------------------------------------------------------------------------


class TestReads:
    """Tests for read(), exists() and list_slugs()."""

    def test_read(self, event_store, fake_client):
        sha = seed_event(fake_client)
        entry = event_store.read("fall-welcome")

        assert entry.slug == "fall-welcome"
        assert entry.path == DOC
        assert entry.sha == sha
        assert entry.fields["title"] == "Fall Welcome"
        assert entry.body == "Old body"

    def test_read_missing(self, event_store):
        assert event_store.read("nope") is None

    def test_read_invalid_slug(self, event_store, fake_client):
        assert event_store.read("../secrets") is None
        assert fake_client.calls == []

    def test_exists_uses_remote(self, event_store, fake_client):
        assert event_store.exists("fall-welcome") is False
        seed_event(fake_client)
        assert event_store.exists("fall-welcome") is True

    def test_list_slugs(self, event_store, fake_client):
        seed_event(fake_client, "src/content/events/b-event.md")
        seed_event(fake_client, "src/content/events/a-event.md")
        fake_client.seed("src/content/events/notes.txt", "x")
        fake_client.seed("src/content/events/archive/old.md", "x")

        assert event_store.list_slugs() == ["a-event", "b-event"]


# -----------------------------------------------------------------------------
# Create
# -----------------------------------------------------------------------------


class TestCreate:
    """Tests for create()."""

    def test_without_upload_uses_default_image(self, event_store, fake_client):
        result = event_store.create("fall-welcome", make_document())

        assert result.committed
        assert result.asset_url == DEFAULT_IMAGE
        assert fake_client.mutating_calls == [("PUT", DOC, None)]
        assert stored_fields(fake_client, DOC)["image"] == DEFAULT_IMAGE

    def test_empty_upload_is_no_upload(self, event_store, fake_client):
        result = event_store.create("fall-welcome", make_document(), Upload("photo.jpg", b""))

        assert result.asset_url == DEFAULT_IMAGE
        assert fake_client.mutating_calls == [("PUT", DOC, None)]

    def test_upload_written_before_document(self, event_store, fake_client):
        result = event_store.create("fall-welcome", make_document(), Upload("Photo.JPG", b"jpeg-bytes"))

        asset = f"{ASSET_DIR}/event-1718000000000.jpg"
        assert fake_client.mutating_calls == [("PUT", asset, None), ("PUT", DOC, None)]
        assert fake_client.files[asset] == b"jpeg-bytes"
        assert result.asset_url == "/uploads/events/fall-welcome/event-1718000000000.jpg"
        assert stored_fields(fake_client, DOC)["image"] == result.asset_url

    def test_document_keeps_body(self, event_store, fake_client):
        event_store.create("fall-welcome", make_document())
        assert decode(fake_client.text(DOC)).body == "Doors open at six."

    def test_commit_messages(self, event_store, fake_client):
        event_store.create("fall-welcome", make_document())
        assert fake_client.messages == [f"chore(events): create {DOC}"]

    def test_existing_slug(self, event_store, fake_client):
        seed_event(fake_client)

        with pytest.raises(AlreadyExistsError):
            event_store.create("fall-welcome", make_document(), Upload("a.png", b"png"))

        assert fake_client.mutating_calls == []
        assert fake_client.calls == [("GET", DOC, None)]

    def test_invalid_slug(self, event_store, fake_client):
        with pytest.raises(ValidationError):
            event_store.create("Fall Welcome", make_document())
        assert fake_client.calls == []

    def test_unrepresentable_document_writes_nothing(self, event_store, fake_client):
        document = make_document()
        del document.fields["location"]

        with pytest.raises(ValidationError, match="location"):
            event_store.create("fall-welcome", document, Upload("a.png", b"png"))
        assert fake_client.mutating_calls == []

    def test_race_on_create_is_conflict(self, event_store, fake_client):
        fake_client.before_write = lambda c: c.seed(DOC, "someone else")

        with pytest.raises(ConflictError):
            event_store.create("fall-welcome", make_document())
        assert fake_client.text(DOC) == "someone else"


# -----------------------------------------------------------------------------
# Update
# -----------------------------------------------------------------------------


class TestUpdate:
    """Tests for update()."""

    def test_rewrites_with_sha_and_keeps_image(self, event_store, fake_client):
        old_url = "/uploads/events/fall-welcome/event-1.png"
        sha = seed_event(fake_client, image=old_url)

        result = event_store.update("fall-welcome", make_document(location="Library"))

        assert fake_client.mutating_calls == [("PUT", DOC, sha)]
        assert result.asset_url == old_url
        fields = stored_fields(fake_client, DOC)
        assert fields["location"] == "Library"
        assert fields["image"] == old_url
        assert fake_client.messages == [f"chore(events): update {DOC}"]

    def test_upload_replaces_owned_image(self, event_store, fake_client):
        old_asset = f"{ASSET_DIR}/event-1.png"
        fake_client.seed(old_asset, b"old")
        sha = seed_event(fake_client, image="/uploads/events/fall-welcome/event-1.png")

        result = event_store.update("fall-welcome", make_document(), Upload("new.webp", b"new"))

        new_asset = f"{ASSET_DIR}/event-1718000000000.webp"
        assert [c[:2] for c in fake_client.mutating_calls] == [
            ("DELETE", old_asset),
            ("PUT", new_asset),
            ("PUT", DOC),
        ]
        assert fake_client.mutating_calls[-1] == ("PUT", DOC, sha)
        assert old_asset not in fake_client.files
        assert fake_client.files[new_asset] == b"new"
        assert stored_fields(fake_client, DOC)["image"] == result.asset_url

    def test_default_image_never_deleted(self, event_store, fake_client):
        fake_client.seed("public/uploads/events/ANS-badge-red.png", b"badge")
        seed_event(fake_client, image=DEFAULT_IMAGE)

        event_store.update("fall-welcome", make_document(), Upload("new.png", b"new"))

        assert not [c for c in fake_client.mutating_calls if c[0] == "DELETE"]
        assert fake_client.files["public/uploads/events/ANS-badge-red.png"] == b"badge"

    def test_old_image_delete_failure_is_warning(self, event_store, fake_client, caplog):
        old_asset = f"{ASSET_DIR}/event-1.png"
        fake_client.seed(old_asset, b"old")
        seed_event(fake_client, image="/uploads/events/fall-welcome/event-1.png")
        fake_client.fail_deletes.add(old_asset)

        with caplog.at_level(logging.WARNING, logger="pressroom"):
            result = event_store.update("fall-welcome", make_document(), Upload("new.png", b"new"))

        assert result.committed
        assert len(result.warnings) == 1
        assert old_asset in result.warnings[0]
        assert old_asset in caplog.text
        assert stored_fields(fake_client, DOC)["image"] == "/uploads/events/fall-welcome/event-1718000000000.png"

    def test_stale_token_is_conflict(self, event_store, fake_client):
        seed_event(fake_client)
        fake_client.before_write = lambda c: c.seed(DOC, "edited out of band")

        with pytest.raises(ConflictError):
            event_store.update("fall-welcome", make_document(location="Library"))

        assert fake_client.text(DOC) == "edited out of band"

    def test_conflict_after_image_swap_leaves_dangling_image(self, event_store, fake_client):
        old_url = "/uploads/events/fall-welcome/event-1.png"
        old_asset = f"{ASSET_DIR}/event-1.png"
        fake_client.seed(old_asset, b"old")
        seed_event(fake_client, image=old_url)
        fake_client.before_write = lambda c: seed_event(c, image=old_url, title="Fall Welcome Edited")

        with pytest.raises(ConflictError):
            event_store.update("fall-welcome", make_document(), Upload("new.png", b"new"))

        assert stored_fields(fake_client, DOC)["image"] == old_url
        assert old_asset not in fake_client.files
        assert f"{ASSET_DIR}/event-1718000000000.png" in fake_client.files

    def test_missing_document(self, event_store, fake_client):
        with pytest.raises(NotFoundError):
            event_store.update("fall-welcome", make_document())
        assert fake_client.mutating_calls == []

    def test_missing_document_without_credentials_is_skipped(self, offline_store):
        result = offline_store.update("fall-welcome", make_document())

        assert result.skipped
        assert not result.committed
        assert result.warnings


# -----------------------------------------------------------------------------
# Rename
# -----------------------------------------------------------------------------


class TestRename:
    """Tests for rename()."""

    def test_new_document_then_old_deleted(self, event_store, fake_client):
        sha = seed_event(fake_client, image="/uploads/events/fall-welcome/event-1.png")
        fake_client.seed(f"{ASSET_DIR}/event-1.png", b"img")

        result = event_store.rename("fall-welcome", "fall-kickoff", make_document("Fall Kickoff"))

        assert fake_client.mutating_calls == [("PUT", NEW_DOC, None), ("DELETE", DOC, sha)]
        assert result.slug == "fall-kickoff"
        assert result.previous_slug == "fall-welcome"
        assert DOC not in fake_client.files
        assert stored_fields(fake_client, NEW_DOC)["title"] == "Fall Kickoff"
        # image stays where it was, and the new document still points at it
        assert stored_fields(fake_client, NEW_DOC)["image"] == "/uploads/events/fall-welcome/event-1.png"
        assert fake_client.files[f"{ASSET_DIR}/event-1.png"] == b"img"

    def test_upload_goes_under_new_slug(self, event_store, fake_client):
        seed_event(fake_client)

        result = event_store.rename(
            "fall-welcome", "fall-kickoff", make_document("Fall Kickoff"), Upload("a.gif", b"gif")
        )

        new_asset = "public/uploads/events/fall-kickoff/event-1718000000000.gif"
        assert fake_client.files[new_asset] == b"gif"
        assert result.asset_url == "/uploads/events/fall-kickoff/event-1718000000000.gif"
        assert [c[:2] for c in fake_client.mutating_calls] == [
            ("PUT", new_asset),
            ("PUT", NEW_DOC),
            ("DELETE", DOC),
        ]

    def test_old_delete_failure_still_succeeds(self, event_store, fake_client):
        seed_event(fake_client)
        fake_client.fail_deletes.add(DOC)

        result = event_store.rename("fall-welcome", "fall-kickoff", make_document("Fall Kickoff"))

        assert result.committed
        assert any(DOC in w for w in result.warnings)
        assert event_store.read("fall-kickoff").fields["title"] == "Fall Kickoff"
        # the old document is left as an orphan
        assert DOC in fake_client.files

    def test_target_exists(self, event_store, fake_client):
        seed_event(fake_client)
        seed_event(fake_client, NEW_DOC, title="Fall Kickoff")

        with pytest.raises(AlreadyExistsError):
            event_store.rename("fall-welcome", "fall-kickoff", make_document("Fall Kickoff"))
        assert fake_client.mutating_calls == []

    def test_missing_source(self, event_store, fake_client):
        with pytest.raises(NotFoundError):
            event_store.rename("fall-welcome", "fall-kickoff", make_document("Fall Kickoff"))
        assert fake_client.mutating_calls == []

    def test_without_credentials_keeps_old_document(self, offline_client, offline_store):
        seed_event(offline_client)

        result = offline_store.rename("fall-welcome", "fall-kickoff", make_document("Fall Kickoff"))

        assert not result.committed
        assert offline_client.mutating_calls == [("PUT", NEW_DOC, None)]
        assert DOC in offline_client.files


# -----------------------------------------------------------------------------
# Delete
# -----------------------------------------------------------------------------


class TestDelete:
    """Tests for delete()."""

    def test_missing_is_noop(self, event_store, fake_client):
        result = event_store.delete("fall-welcome")

        assert result.commits == []
        assert result.warnings == []
        assert fake_client.mutating_calls == []

    def test_assets_then_document(self, event_store, fake_client):
        sha = seed_event(fake_client, image="/uploads/events/fall-welcome/event-2.png")
        fake_client.seed(f"{ASSET_DIR}/event-1.png", b"1")
        fake_client.seed(f"{ASSET_DIR}/event-2.png", b"2")

        result = event_store.delete("fall-welcome")

        paths = [c[1] for c in fake_client.mutating_calls]
        assert paths[-1] == DOC
        assert fake_client.mutating_calls[-1] == ("DELETE", DOC, sha)
        assert set(paths[:2]) == {f"{ASSET_DIR}/event-1.png", f"{ASSET_DIR}/event-2.png"}
        assert fake_client.files == {}
        assert result.committed
        assert fake_client.messages[-1] == f"chore(events): delete {DOC}"

    def test_sweeps_folder_of_renamed_entry(self, event_store, fake_client):
        seed_event(fake_client, NEW_DOC, image="/uploads/events/fall-welcome/event-1.png", title="Fall Kickoff")
        fake_client.seed(f"{ASSET_DIR}/event-1.png", b"1")

        event_store.delete("fall-kickoff")

        assert fake_client.files == {}

    def test_default_image_survives(self, event_store, fake_client):
        fake_client.seed("public/uploads/events/ANS-badge-red.png", b"badge")
        seed_event(fake_client)

        event_store.delete("fall-welcome")

        assert list(fake_client.files) == ["public/uploads/events/ANS-badge-red.png"]

    def test_asset_failure_is_warning(self, event_store, fake_client):
        seed_event(fake_client)
        fake_client.seed(f"{ASSET_DIR}/event-1.png", b"1")
        fake_client.fail_deletes.add(f"{ASSET_DIR}/event-1.png")

        result = event_store.delete("fall-welcome")

        assert DOC not in fake_client.files
        assert len(result.warnings) == 1

    def test_folder_delete_failure_tolerated(self, event_store, fake_client):
        seed_event(fake_client)
        fake_client.fail_deletes.add(ASSET_DIR)

        result = event_store.delete("fall-welcome")

        assert DOC not in fake_client.files
        assert result.warnings == []

    def test_stale_token_is_conflict(self, event_store, fake_client):
        seed_event(fake_client)
        fake_client.before_write = lambda c: c.seed(DOC, "edited out of band")

        with pytest.raises(ConflictError):
            event_store.delete("fall-welcome")
        assert fake_client.text(DOC) == "edited out of band"

    def test_invalid_slug(self, event_store):
        with pytest.raises(ValidationError):
            event_store.delete("")


# -----------------------------------------------------------------------------
# Missing credentials
# -----------------------------------------------------------------------------


class TestWithoutCredentials:
    """Writes without credentials are logged no-ops that still succeed.

    Local development runs without a token and relies on requests completing;
    these tests pin that behavior down.
    """

    def test_create_succeeds_without_writing(self, offline_client, offline_store):
        result = offline_store.create("fall-welcome", make_document(), Upload("a.png", b"png"))

        assert not result.committed
        assert result.asset_url == "/uploads/events/fall-welcome/event-1718000000000.png"
        assert offline_client.files == {}
        assert [c[0] for c in offline_client.mutating_calls] == ["PUT", "PUT"]

    def test_update_succeeds_without_writing(self, offline_client, offline_store):
        seed_event(offline_client)
        before = dict(offline_client.files)

        result = offline_store.update("fall-welcome", make_document(location="Library"))

        assert not result.committed
        assert offline_client.files == before

    def test_delete_succeeds_without_writing(self, offline_client, offline_store):
        seed_event(offline_client)

        result = offline_store.delete("fall-welcome")

        assert not result.committed
        assert DOC in offline_client.files
