#!/usr/bin/env python3
"""
restore_manager.py
------------------
Restore the MissNote database from a backup archive.

Restore Steps:
    1. Pick: a picker callable returns the archive path, or None when the
       user cancels (nothing is touched, outcome CANCELED).
    2. Validate: open the ZIP, read data.json, require version 1. Any
       problem raises InvalidBackupFormat before anything is touched.
    3. Replace: in ONE transaction, delete photos, mistakes and subjects,
       then insert subjects, mistakes and photos with their archived IDs.
       Foreign keys are checked at commit. Any failure rolls the whole
       transaction back (the previous dataset stays) and raises
       RestoreError.
    4. Photo files: create the photo directory and write every entry under
       ``photos/`` using its base name only.
    5. Normalize: point every photo URI at ``<photos_dir><base name>``.
       Failures in 4-5 raise PartialRestoreIO; the data from step 3 is
       already committed.

Usage:
    restorer = RestoreManager(db.SessionLocal, logger=db.logger)
    outcome = restorer.restore_backup(lambda: Path("backup.zip"), photos_dir)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import io
import json
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

# --- Third party imports ---
from sqlalchemy import delete, insert, text
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from missnote.core.exceptions import (
    DatabaseError,
    InvalidBackupFormat,
    PartialRestoreIO,
    RestoreError,
    ValidationError,
)
from missnote.core.logging_manager import MissNoteLogger, safe_logger
from missnote.core.photo_files import photo_basename, photo_uri
from .configs.backup_configs import (
    BACKUP_FORMAT_VERSION,
    BACKUP_TABLES,
    DATA_DOCUMENT_NAME,
    PHOTOS_FOLDER,
)
from .decorators import handle_db_errors, log_database_operation
from .models import MistakePhoto

ArchiveSource = Union[str, Path, bytes]


class RestoreOutcome(str, Enum):
    """Result of a user-initiated restore."""

    OK = "ok"
    CANCELED = "canceled"


@dataclass
class BackupArchive:
    """
    Validated contents of a backup archive.

    Attributes:
        version: Format version (always 1)
        exported_at: Export time recorded in the archive, if any
        data: Rows per table key
        photos: (base name, content) for every file under photos/
    """

    version: int
    exported_at: Optional[str]
    data: Dict[str, List[Dict[str, Any]]]
    photos: List[Tuple[str, bytes]] = field(default_factory=list)


class RestoreManager:
    """
    Validates backup archives and replaces the dataset with their content.

    Attributes:
        session_factory: Factory for the sessions restore transactions use
        logger: Optional logger
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        logger: Optional[MissNoteLogger] = None,
    ) -> None:
        self.session_factory = session_factory
        self.logger = logger

    # ---- Entry points ----
    @log_database_operation("restore_backup")
    def restore_backup(
        self,
        picker: Callable[[], Optional[ArchiveSource]],
        photos_dir: Union[str, Path],
    ) -> RestoreOutcome:
        """
        Let the user pick an archive and restore from it.

        Args:
            picker: Returns the chosen archive, or None on cancel
            photos_dir: Photo directory of this device

        Returns:
            RestoreOutcome.CANCELED if nothing was picked, else OK

        Raises:
            ValidationError: If photos_dir is empty
            InvalidBackupFormat, RestoreError, PartialRestoreIO: See module doc
        """
        source = picker()
        if source is None:
            safe_logger(self.logger).log_info("Restore canceled")
            return RestoreOutcome.CANCELED

        self.restore_from_archive(source, photos_dir)
        return RestoreOutcome.OK

    def restore_from_archive(
        self, source: ArchiveSource, photos_dir: Union[str, Path]
    ) -> Dict[str, int]:
        """
        Restore from an archive path or archive bytes.

        Returns:
            Statistics: rows per table, photo files written, URIs rewritten
        """
        if not str(photos_dir or "").strip():
            raise ValidationError("Photo directory is required for restore")

        archive = self.load_archive(source)

        session = self.session_factory()
        try:
            stats = self.replace_all_data(session, archive.data)
            session.commit()
        except Exception as e:
            session.rollback()
            safe_logger(self.logger).log_error(e, {"operation": "restore_replace"})
            raise RestoreError(f"Restore failed, no changes applied: {e}") from e
        finally:
            session.close()

        stats["photo_files"] = self._write_photo_files(archive.photos, Path(photos_dir))

        session = self.session_factory()
        try:
            stats["uris_rewritten"] = self.normalize_photo_uris(session, photos_dir)
            session.commit()
        except DatabaseError as e:
            session.rollback()
            raise PartialRestoreIO(
                f"Data restored but photo paths could not be updated: {e}"
            ) from e
        finally:
            session.close()

        safe_logger(self.logger).log_operation(
            "restore_completed", {"exported_at": archive.exported_at, **stats}
        )
        return stats

    # ---- Steps ----
    def load_archive(self, source: ArchiveSource) -> BackupArchive:
        """
        Open and validate a backup archive.

        Raises:
            InvalidBackupFormat: If the archive is unreadable, lacks
                data.json, or is not a version 1 backup
        """
        try:
            stream = io.BytesIO(source) if isinstance(source, bytes) else Path(source)
            with zipfile.ZipFile(stream) as zf:
                try:
                    raw = zf.read(DATA_DOCUMENT_NAME)
                except KeyError:
                    raise InvalidBackupFormat(
                        f"{DATA_DOCUMENT_NAME} not found in archive"
                    ) from None
                photos = [
                    (name, zf.read(info))
                    for info, name in self._photo_entries(zf)
                ]
        except (zipfile.BadZipFile, OSError) as e:
            raise InvalidBackupFormat(f"Cannot read backup archive: {e}") from e

        try:
            document = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidBackupFormat(f"{DATA_DOCUMENT_NAME} is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise InvalidBackupFormat(f"{DATA_DOCUMENT_NAME} is not an object")
        version = document.get("version")
        if version != BACKUP_FORMAT_VERSION:
            raise InvalidBackupFormat(f"Unsupported backup version: {version}")

        data = document.get("data")
        if not isinstance(data, dict):
            raise InvalidBackupFormat("Backup has no data section")
        tables = {}
        for config in BACKUP_TABLES:
            rows = data.get(config.json_key) or []
            if not isinstance(rows, list):
                raise InvalidBackupFormat(f"'{config.json_key}' must be a list")
            tables[config.json_key] = rows

        return BackupArchive(
            version=version,
            exported_at=document.get("exported_at"),
            data=tables,
            photos=photos,
        )

    @handle_db_errors
    @log_database_operation("replace_all_data")
    def replace_all_data(
        self, session: Session, data: Dict[str, List[Dict[str, Any]]]
    ) -> Dict[str, int]:
        """
        Wipe the three tables and load ``data`` keeping archived IDs.

        Runs inside the caller's transaction and does not commit.
        Foreign keys are deferred to commit time.

        Returns:
            Number of rows inserted per table key
        """
        for config in reversed(BACKUP_TABLES):
            session.execute(delete(config.model))
        session.execute(text("PRAGMA defer_foreign_keys = ON"))

        counts = {}
        for config in BACKUP_TABLES:
            try:
                rows = [config.loader(row) for row in data.get(config.json_key, [])]
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise ValidationError(f"Invalid row in '{config.json_key}': {e}") from e
            if rows:
                session.execute(insert(config.model), rows)
            counts[config.json_key] = len(rows)

        session.flush()
        session.expire_all()
        return counts

    @handle_db_errors
    @log_database_operation("normalize_photo_uris")
    def normalize_photo_uris(self, session: Session, photos_dir: Union[str, Path]) -> int:
        """
        Point every photo URI at this device's photo directory.

        Each URI becomes ``<photos_dir><base name>``; rows whose URI has
        no base name are left as they are.

        Returns:
            Number of URIs changed
        """
        changed = 0
        for photo in session.query(MistakePhoto).order_by(MistakePhoto.id).all():
            name = photo_basename(photo.uri or "")
            if not name:
                continue
            new_uri = photo_uri(photos_dir, name)
            if new_uri != photo.uri:
                photo.uri = new_uri
                changed += 1
        session.flush()
        return changed

    # ---- Helpers ----
    @staticmethod
    def _photo_entries(zf: zipfile.ZipFile) -> List[Tuple[zipfile.ZipInfo, str]]:
        """Files under photos/ with the base name each is restored as."""
        entries = []
        for info in zf.infolist():
            if info.is_dir() or not info.filename.startswith(PHOTOS_FOLDER):
                continue
            name = photo_basename(info.filename[len(PHOTOS_FOLDER):])
            if name in ("", ".", ".."):
                continue
            entries.append((info, name))
        return entries

    def _write_photo_files(
        self, photos: List[Tuple[str, bytes]], photos_dir: Path
    ) -> int:
        try:
            photos_dir.mkdir(parents=True, exist_ok=True)
            for name, content in photos:
                (photos_dir / name).write_bytes(content)
        except OSError as e:
            safe_logger(self.logger).log_error(e, {"operation": "restore_photo_files"})
            raise PartialRestoreIO(
                f"Data restored but photo files could not be written: {e}"
            ) from e
        return len(photos)
