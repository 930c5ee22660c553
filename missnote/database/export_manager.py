#!/usr/bin/env python3
"""
export_manager.py
-----------------
Backup export for the MissNote database.

A backup is one ZIP archive (deflate) holding:

    data.json        {"version": 1, "exported_at": <ISO-8601>,
                      "data": {"mistakes": [...], "mistake_photos": [...],
                               "subjects": [...]}}
    photos/<name>    every image file in the photo directory

Rows are written in ID order with their stored values, inactive
subjects included. Image files are picked by extension (jpg, jpeg, png,
heic, webp; any case) and keep their names.

Export Steps:
    1. export_all_data: every row of the three tables
    2. collect_photo_files: image files of the photo directory
    3. build_archive: data.json + photos/ as ZIP bytes
    4. export_backup: stage ``miss-log-backup-YYYYMMDD-HHMM.zip`` and
       hand it to a share target

Share targets implement ShareTarget. When none is available
SharingUnavailable is raised before anything is built. Any failure while
building raises ExportError and nothing reaches the share target.

Usage:
    exporter = ExportManager(logger=db.logger)
    with db.session_scope() as session:
        saved = exporter.export_backup(
            session, photos_dir, SaveToDirectory(Path("~/backups"))
        )
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import io
import json
import shutil
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

# --- Third party imports ---
from sqlalchemy.orm import Session

# --- Local imports ---
from missnote.core.exceptions import (
    DatabaseError,
    ExportError,
    SharingUnavailable,
    TemporalFileError,
    ValidationError,
)
from missnote.core.logging_manager import MissNoteLogger, safe_logger
from missnote.core.photo_files import list_image_files
from missnote.core.temporal_files import TemporalFileManager
from missnote.core.validators import now_timestamp
from .configs.backup_configs import (
    BACKUP_FILENAME_TEMPLATE,
    BACKUP_FORMAT_VERSION,
    BACKUP_TABLES,
    BACKUP_TIMESTAMP_FORMAT,
    DATA_DOCUMENT_NAME,
    PHOTOS_FOLDER,
)
from .decorators import handle_db_errors, log_database_operation

# Key order of the "data" object in data.json
DATA_KEYS = ["mistakes", "mistake_photos", "subjects"]


class ShareTarget(Protocol):
    """Destination an exported archive is handed to."""

    def is_available(self) -> bool:
        ...

    def share(self, archive_path: Path) -> Path:
        """Take the staged archive; return where it ended up."""
        ...


class SaveToDirectory:
    """Share target that copies archives into a directory."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory).expanduser()

    def is_available(self) -> bool:
        if self.directory.exists():
            return self.directory.is_dir()
        return True

    def share(self, archive_path: Path) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        destination = self.directory / archive_path.name
        shutil.copyfile(archive_path, destination)
        return destination


def backup_filename(moment: Optional[datetime] = None) -> str:
    """Archive file name for a backup taken at ``moment`` (local time)."""
    moment = moment or datetime.now()
    return BACKUP_FILENAME_TEMPLATE.format(
        timestamp=moment.strftime(BACKUP_TIMESTAMP_FORMAT)
    )


class ExportManager:
    """
    Builds backup archives and hands them to share targets.

    Attributes:
        logger: Optional logger
        staging_dir: Parent directory for staged archives (system temp if None)
    """

    def __init__(
        self,
        logger: Optional[MissNoteLogger] = None,
        staging_dir: Optional[Path] = None,
    ) -> None:
        self.logger = logger
        self.staging_dir = staging_dir

    @handle_db_errors
    @log_database_operation("export_all_data")
    def export_all_data(self, session: Session) -> Dict[str, List[Dict[str, Any]]]:
        """
        Serialize every row of mistakes, mistake_photos and subjects.

        Returns:
            Dictionary keyed by table name, rows in ID order
        """
        data = {
            config.json_key: [
                config.serializer(row)
                for row in session.query(config.model).order_by(config.model.id).all()
            ]
            for config in BACKUP_TABLES
        }
        return {key: data[key] for key in DATA_KEYS}

    def build_document(self, session: Session) -> Dict[str, Any]:
        """Backup document: format version, export time and all data."""
        return {
            "version": BACKUP_FORMAT_VERSION,
            "exported_at": now_timestamp(),
            "data": self.export_all_data(session),
        }

    @staticmethod
    def collect_photo_files(photos_dir: Union[str, Path]) -> List[Path]:
        """Image files to include; none when the directory is missing."""
        return list_image_files(Path(photos_dir))

    @log_database_operation("build_archive")
    def build_archive(self, session: Session, photos_dir: Union[str, Path]) -> bytes:
        """
        Build the backup archive in memory.

        Args:
            session: Session to read the dataset from
            photos_dir: Photo directory of this device

        Returns:
            ZIP archive bytes

        Raises:
            ValidationError: If photos_dir is empty
            ExportError: If the dataset or a photo cannot be read
        """
        if not str(photos_dir or "").strip():
            raise ValidationError("Photo directory is required for backup")

        try:
            document = self.build_document(session)
        except DatabaseError as e:
            raise ExportError(f"Failed to export data: {e}") from e

        try:
            photos = self.collect_photo_files(photos_dir)
            buffer = io.BytesIO()
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.writestr(
                    DATA_DOCUMENT_NAME, json.dumps(document, ensure_ascii=False)
                )
                for photo in photos:
                    archive.write(photo, arcname=f"{PHOTOS_FOLDER}{photo.name}")
        except OSError as e:
            raise ExportError(f"Failed to build backup archive: {e}") from e

        safe_logger(self.logger).log_operation(
            "backup_archive_built",
            {
                "mistakes": len(document["data"]["mistakes"]),
                "photos": len(photos),
                "bytes": buffer.tell(),
            },
        )
        return buffer.getvalue()

    @log_database_operation("export_backup")
    def export_backup(
        self,
        session: Session,
        photos_dir: Union[str, Path],
        share_target: Optional[ShareTarget],
    ) -> Path:
        """
        Create a backup archive and hand it to ``share_target``.

        Args:
            session: Session to read the dataset from
            photos_dir: Photo directory of this device
            share_target: Receiver of the staged archive

        Returns:
            Path reported by the share target

        Raises:
            SharingUnavailable: If there is no available share target
            ExportError: If the archive cannot be built, staged or handed over
        """
        if share_target is None or not share_target.is_available():
            raise SharingUnavailable("Sharing is not available")

        archive = self.build_archive(session, photos_dir)

        with TemporalFileManager(self.staging_dir) as temp_manager:
            try:
                staging = temp_manager.create_temp_dir(prefix="missnote_export_")
                staged_path = staging / backup_filename()
                staged_path.write_bytes(archive)
            except (OSError, TemporalFileError) as e:
                raise ExportError(f"Failed to stage backup archive: {e}") from e

            try:
                destination = share_target.share(staged_path)
            except OSError as e:
                raise ExportError(f"Failed to hand over backup archive: {e}") from e

        safe_logger(self.logger).log_operation(
            "backup_exported", {"archive": staged_path.name, "destination": destination}
        )
        return destination
