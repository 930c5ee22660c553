#!/usr/bin/env python3
"""
test_restore_manager.py
-----------------------
Unit tests for RestoreManager.

Key areas tested:
    - Round trip: a backup restored on another device reproduces the rows
    - Archive validation happens before anything is modified
    - The data replacement is all-or-nothing
    - Photo files are extracted by base name and URIs rewritten
    - Photo file failures after the data commit raise PartialRestoreIO
"""
# --- Standard library imports ---
import io
import json
import os
import zipfile

# --- Third party imports ---
import pytest

# --- Local imports ---
from missnote.core.exceptions import InvalidBackupFormat, PartialRestoreIO, RestoreError
from missnote.core.photo_files import photo_basename, photo_uri
from missnote.database.manager import MissNoteDB
from missnote.database.models import Mistake, MistakePhoto, Subject
from missnote.database.restore_manager import RestoreOutcome


def make_archive(data=None, photos=None, version=1, raw_document=None):
    """Build backup archive bytes from plain structures."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        if raw_document is not None:
            zf.writestr("data.json", raw_document)
        else:
            document = {"version": version, "exported_at": "2025-01-01T00:00:00.000Z"}
            document["data"] = data if data is not None else {}
            zf.writestr("data.json", json.dumps(document, ensure_ascii=False))
        for name, content in (photos or {}).items():
            zf.writestr(name, content)
    return buffer.getvalue()


SAMPLE_DATA = {
    "mistakes": [
        {
            "id": 7,
            "title": "Sign error",
            "body": "minus",
            "subject": "数学",
            "importance": 3,
            "occurred_at": "2024-01-02T00:00:00.000Z",
            "created_at": "2024-01-02T00:00:00.000Z",
            "updated_at": "2024-01-03T00:00:00.000Z",
        },
        {"id": 9, "title": "  Sparse  ", "body": "only required fields"},
    ],
    "mistake_photos": [
        {
            "id": 4,
            "mistake_id": 7,
            "uri": "/old/device/photos/1_ab.jpg",
            "created_at": "2024-01-02T00:00:00.000Z",
        },
        {"id": 5, "mistake_id": 7, "uri": "C:\\phone\\photos\\2_cd.png"},
    ],
    "subjects": [
        {"id": 1, "name": "数学", "sort_order": 0, "is_active": 1},
        {"id": 2, "name": "古文", "sort_order": 1, "is_active": 0},
    ],
}


@pytest.fixture
def existing_data(test_db):
    """Data present before a restore."""
    with test_db.session_scope():
        mistake_id = test_db.mistakes.insert({"title": "Existing", "body": "keep me"})
        test_db.photos.insert_batch(mistake_id, ["/here/existing.jpg"])
    return mistake_id


def _snapshot(db):
    with db.session_scope() as session:
        return {
            "mistakes": [(m.id, m.title) for m in session.query(Mistake).order_by(Mistake.id)],
            "photos": [(p.id, p.uri) for p in session.query(MistakePhoto).order_by(MistakePhoto.id)],
            "subjects": [s.name for s in session.query(Subject).order_by(Subject.id)],
        }


class TestRestoreSuccess:
    """Tests for a successful restore."""

    def test_replaces_all_data(self, test_db, existing_data, photos_dir):
        """Existing rows are replaced and IDs kept."""
        archive = make_archive(SAMPLE_DATA, {"photos/1_ab.jpg": b"jpeg", "photos/2_cd.png": b"png"})

        stats = test_db.restore_manager.restore_from_archive(archive, photos_dir)

        snapshot = _snapshot(test_db)
        assert snapshot["mistakes"] == [(7, "Sign error"), (9, "Sparse")]
        assert [pid for pid, _ in snapshot["photos"]] == [4, 5]
        assert snapshot["subjects"] == ["数学", "古文"]
        assert stats["mistakes"] == 2
        assert stats["photo_files"] == 2

    def test_missing_fields_get_defaults(self, test_db, photos_dir):
        """Sparse rows fall back to default values."""
        test_db.restore_manager.restore_from_archive(make_archive(SAMPLE_DATA), photos_dir)

        with test_db.session_scope() as session:
            sparse = session.get(Mistake, 9)
            assert sparse.subject == "英語"
            assert sparse.importance == 2
            assert sparse.occurred_at
            inactive = session.query(Subject).filter_by(name="古文").one()
            assert inactive.is_active is False

    def test_is_active_spellings(self, test_db, photos_dir):
        """is_active accepts booleans, 0/1 and their string forms."""
        subjects = [
            {"id": 1, "name": "国語", "is_active": False},
            {"id": 2, "name": "数学", "is_active": "0"},
            {"id": 3, "name": "英語", "is_active": "true"},
            {"id": 4, "name": "物理", "is_active": 1},
        ]
        test_db.restore_manager.restore_from_archive(
            make_archive({"subjects": subjects}), photos_dir
        )

        with test_db.session_scope():
            assert test_db.subjects.list_names() == ["英語", "物理"]

    def test_unreadable_is_active_rejected(self, test_db, existing_data, photos_dir):
        """An is_active value that is not a boolean aborts the restore."""
        before = _snapshot(test_db)
        archive = make_archive({"subjects": [{"id": 1, "name": "数学", "is_active": "maybe"}]})

        with pytest.raises(RestoreError):
            test_db.restore_manager.restore_from_archive(archive, photos_dir)
        assert _snapshot(test_db) == before

    def test_photo_files_and_uris(self, test_db, photos_dir):
        """Photo files land in this device's directory and URIs point at them."""
        archive = make_archive(
            SAMPLE_DATA,
            {"photos/1_ab.jpg": b"jpeg", "photos/2_cd.png": b"png", "photos/nested/3.jpg": b"n"},
        )

        test_db.restore_manager.restore_from_archive(archive, photos_dir)

        assert (photos_dir / "1_ab.jpg").read_bytes() == b"jpeg"
        assert (photos_dir / "3.jpg").read_bytes() == b"n"
        uris = [uri for _, uri in _snapshot(test_db)["photos"]]
        assert uris == [
            f"{photos_dir}{os.sep}1_ab.jpg",
            f"{photos_dir}{os.sep}2_cd.png",
        ]

    def test_round_trip_through_backup(self, test_db, tmp_dir, make_image):
        """A backup restored into another database reproduces its rows."""
        with test_db.session_scope():
            mistake_id = test_db.mistakes.insert(
                {"title": "Tense", "body": "had went", "subject": "英語", "importance": 1}
            )
            test_db.subjects.add("地学")
        test_db.attach_photos(mistake_id, [make_image("page.heic", b"heic-bytes")])
        archive = test_db.build_backup_archive()

        other = MissNoteDB(tmp_dir / "other.db", photos_dir=tmp_dir / "other_photos")
        try:
            other.restore_manager.restore_from_archive(archive, other.photos_dir)

            with test_db.session_scope() as session:
                source_rows = test_db.export_manager.export_all_data(session)
            with other.session_scope() as session:
                restored_rows = other.export_manager.export_all_data(session)

            assert restored_rows["mistakes"] == source_rows["mistakes"]
            assert restored_rows["subjects"] == source_rows["subjects"]

            [source_photo] = source_rows["mistake_photos"]
            [restored_photo] = restored_rows["mistake_photos"]
            name = photo_basename(source_photo["uri"])
            assert restored_photo == {
                **source_photo, "uri": photo_uri(other.photos_dir, name)
            }
            assert (other.photos_dir / name).read_bytes() == b"heic-bytes"
        finally:
            other.dispose()


class TestRestoreOutcome:
    """Tests for restore_backup() with a picker."""

    def test_canceled_picker_touches_nothing(self, test_db, existing_data):
        """A picker returning None cancels the restore."""
        before = _snapshot(test_db)
        assert test_db.restore_backup(lambda: None) is RestoreOutcome.CANCELED
        assert _snapshot(test_db) == before

    def test_picked_path(self, test_db, tmp_dir):
        """A picked archive path is restored."""
        path = tmp_dir / "backup.zip"
        path.write_bytes(make_archive(SAMPLE_DATA))

        assert test_db.restore_backup(lambda: path) is RestoreOutcome.OK
        assert _snapshot(test_db)["mistakes"][0] == (7, "Sign error")


class TestInvalidArchives:
    """Tests for archive validation."""

    @pytest.mark.parametrize(
        "archive",
        [
            b"definitely not a zip",
            make_archive(raw_document="{not json"),
            make_archive(raw_document="[1, 2, 3]"),
            make_archive(SAMPLE_DATA, version=2),
            make_archive(raw_document=json.dumps({"version": 1})),
            make_archive({"mistakes": {"id": 1}}),
        ],
        ids=["not-zip", "bad-json", "not-object", "version-2", "no-data", "table-not-list"],
    )
    def test_rejected_before_changes(self, test_db, existing_data, photos_dir, archive):
        """Invalid archives raise InvalidBackupFormat and change nothing."""
        before = _snapshot(test_db)
        with pytest.raises(InvalidBackupFormat):
            test_db.restore_manager.restore_from_archive(archive, photos_dir)
        assert _snapshot(test_db) == before

    def test_missing_data_document(self, test_db, photos_dir):
        """Archives without data.json are rejected."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("photos/a.jpg", b"x")

        with pytest.raises(InvalidBackupFormat, match="data.json"):
            test_db.restore_manager.restore_from_archive(buffer.getvalue(), photos_dir)


class TestRestoreAtomicity:
    """Tests for all-or-nothing data replacement."""

    @pytest.mark.parametrize(
        "data",
        [
            {"mistake_photos": [{"id": 1, "mistake_id": 404, "uri": "/x.jpg"}]},
            {"mistakes": [{"title": "no id", "body": "b"}]},
            {"subjects": [{"id": 1, "name": "数学"}, {"id": 2, "name": "数学"}]},
        ],
        ids=["dangling-photo", "missing-id", "duplicate-subject"],
    )
    def test_failed_restore_keeps_previous_data(self, test_db, existing_data, photos_dir, data):
        """Any failure while loading rolls back the wipe too."""
        before = _snapshot(test_db)
        with pytest.raises(RestoreError):
            test_db.restore_manager.restore_from_archive(make_archive(data), photos_dir)
        assert _snapshot(test_db) == before


class TestPartialRestore:
    """Tests for photo file failures after the data commit."""

    def test_unwritable_photo_directory(self, test_db, tmp_dir):
        """Data stays restored when photo files cannot be written."""
        blocker = tmp_dir / "photos_is_a_file"
        blocker.write_text("x")
        archive = make_archive(SAMPLE_DATA, {"photos/1_ab.jpg": b"jpeg"})

        with pytest.raises(PartialRestoreIO):
            test_db.restore_manager.restore_from_archive(archive, blocker)

        assert _snapshot(test_db)["mistakes"] == [(7, "Sign error"), (9, "Sparse")]
