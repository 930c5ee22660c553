#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the MissNote persistence core.

Provides the MissNoteDB class, the single entry point callers use:
    - Engine and session factory for the SQLite database file
    - Schema creation/migration on every startup (SchemaManager)
    - Per-session entity managers (mistakes, photos, subjects)
    - Search through the QueryEngine
    - Photo attachment and deletion including the files on disk
    - Backup export and restore

Core Operations:
    Entity Management (inside session_scope):
        - db.mistakes: insert / update / delete / get_by_id
        - db.photos: insert_batch / list_by_mistake / delete
        - db.subjects: list_names / add / rename / soft_delete

    Listing:
        - search: filtered and sorted mistakes with preview photo
        - review: mistakes due for review by window
        - count_by_day: per-day counts for calendar views

    Photos:
        - add_mistake: record a mistake and its photos in one transaction
        - attach_photos: copy images in and attach them to a mistake
        - delete_photo: delete row, then the file (failure reported)

    Backup:
        - export_backup: build the ZIP and hand it to a share target
        - restore_backup: pick, validate and restore an archive

Notes
==============
- Schema failures abort construction with SchemaError
- SQLite foreign keys are enabled on every connection
- Retry logic handles SQLite lock contention
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

# --- Third party ---
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker

# --- Local imports ---
from missnote.core.exceptions import DatabaseError, ValidationError
from missnote.core.logging_manager import MissNoteLogger, safe_logger
from missnote.core.paths import ALEMBIC_DIR, PHOTOS_DIR
from missnote.core.photo_files import remove_photo_file, store_photo
from .export_manager import ExportManager, ShareTarget
from .managers import MistakeManager, PhotoManager, SubjectManager
from .models import MistakePhoto
from .query_engine import QueryEngine, SearchCriteria, SearchResult
from .restore_manager import ArchiveSource, RestoreManager, RestoreOutcome
from .schema_manager import SchemaManager


@dataclass
class PhotoDeletion:
    """
    Outcome of deleting a photo.

    The row is always gone when this is returned; the file may not be.

    Attributes:
        photo_id: Deleted photo
        deleted: False when no photo had this ID
        file_removed: True when the backing file is gone
        file_error: Why the file could not be removed
    """

    photo_id: int
    deleted: bool
    file_removed: bool = False
    file_error: Optional[str] = None


class MissNoteDB:
    """
    Entry point to the MissNote database.

    Attributes:
        db_path: SQLite database file
        alembic_dir: Alembic environment directory
        photos_dir: Photo directory of this device
        logger: MissNoteLogger, or None when no log directory was given
        engine: SQLAlchemy engine
        SessionLocal: Session factory
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        alembic_dir: Union[str, Path] = ALEMBIC_DIR,
        photos_dir: Union[str, Path] = PHOTOS_DIR,
        log_dir: Optional[Union[str, Path]] = None,
        staging_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Open (and create or migrate) the database.

        Args:
            db_path: Path to the SQLite file
            alembic_dir: Path to the Alembic directory
            photos_dir: Directory holding photo files
            log_dir: Directory for log files (optional)
            staging_dir: Parent directory for staged backup archives (optional)

        Raises:
            SchemaError: If the schema cannot be brought to the latest revision
            DatabaseError: If the engine cannot be created
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.alembic_dir = Path(alembic_dir).expanduser().resolve()
        self.photos_dir = Path(photos_dir).expanduser().resolve()

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve() / "system"
            self.logger: Optional[MissNoteLogger] = MissNoteLogger(
                self.log_dir, component_name="database"
            )
        else:
            self.logger = None

        self.export_manager = ExportManager(
            self.logger, Path(staging_dir).expanduser() if staging_dir else None
        )

        self._mistake_manager: Optional[MistakeManager] = None
        self._photo_manager: Optional[PhotoManager] = None
        self._subject_manager: Optional[SubjectManager] = None
        self._query_engine: Optional[QueryEngine] = None

        self._setup_engine()
        self.restore_manager = RestoreManager(self.SessionLocal, self.logger)
        self.schema_manager.ensure_schema()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        try:
            safe_logger(self.logger).log_operation(
                "database_init_start",
                {"db_path": str(self.db_path), "alembic_dir": str(self.alembic_dir)},
            )

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.schema_manager = SchemaManager(self.engine, self.alembic_dir, self.logger)

        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    def dispose(self) -> None:
        """Release all pooled connections."""
        self.engine.dispose()

    # ---- Session Management ----
    @contextmanager
    def session_scope(self):
        """
        Provide a transactional scope with per-session managers.

        Usage:
            with db.session_scope() as session:
                mistake_id = db.mistakes.insert({"title": "...", "body": "..."})
                db.photos.insert_batch(mistake_id, uris)
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        log = safe_logger(self.logger)

        self._mistake_manager = MistakeManager(session, self.logger)
        self._photo_manager = PhotoManager(session, self.logger)
        self._subject_manager = SubjectManager(session, self.logger)
        self._query_engine = QueryEngine(session, self.logger)

        log.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            log.log_debug("session_commit", {"session_id": session_id})

        except Exception as e:
            session.rollback()
            log.log_error(e, {"operation": "session_rollback", "session_id": session_id})
            raise
        finally:
            self._mistake_manager = None
            self._photo_manager = None
            self._subject_manager = None
            self._query_engine = None

            session.close()
            log.log_debug("session_close", {"session_id": session_id})

    # -------------------------------------------------------------------------
    # Entity Manager Properties
    # -------------------------------------------------------------------------

    @staticmethod
    def _require(manager: Any, name: str) -> Any:
        if manager is None:
            raise DatabaseError(
                f"{name} requires active session. "
                "Use within 'with db.session_scope():' block"
            )
        return manager

    @property
    def mistakes(self) -> MistakeManager:
        """
        Access MistakeManager.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._require(self._mistake_manager, "MistakeManager")

    @property
    def photos(self) -> PhotoManager:
        """
        Access PhotoManager.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._require(self._photo_manager, "PhotoManager")

    @property
    def subjects(self) -> SubjectManager:
        """
        Access SubjectManager.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._require(self._subject_manager, "SubjectManager")

    @property
    def queries(self) -> QueryEngine:
        """
        Access QueryEngine bound to the current session.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._require(self._query_engine, "QueryEngine")

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def search(
        self, criteria: Union[SearchCriteria, Mapping[str, Any], None] = None
    ) -> List[SearchResult]:
        """
        Search mistakes in a session of its own.

        Results are detached from the session; their photos relationship
        is not loaded, use ``first_photo_uri`` of the result instead.
        """
        with self.session_scope():
            return self.queries.search(criteria)

    def review(self, now: Optional[datetime] = None) -> Dict[str, List[SearchResult]]:
        """Mistakes due for review, grouped by window."""
        with self.session_scope():
            return self.queries.review(now)

    def count_by_day(self, from_: Any = None, to: Any = None) -> Dict[str, int]:
        """Per-day mistake counts in the half-open range."""
        with self.session_scope():
            return self.queries.count_by_day(from_, to)

    # -------------------------------------------------------------------------
    # Photos
    # -------------------------------------------------------------------------

    def add_mistake(
        self,
        metadata: Dict[str, Any],
        photo_sources: Iterable[Union[str, Path]] = (),
    ) -> Tuple[int, List[str]]:
        """
        Record a mistake and its photos in one transaction.

        The images are copied first; if the rows cannot be saved the
        copies are removed and nothing is recorded.

        Returns:
            (new mistake ID, stored photo URIs in the order of ``photo_sources``)

        Raises:
            ValidationError: If the fields are invalid or a source file does not exist
            DatabaseError: If an image cannot be copied or the rows cannot be saved
        """
        stored = self._copy_photos(photo_sources)
        try:
            with self.session_scope():
                mistake_id = self.mistakes.insert(metadata)
                self.photos.insert_batch(mistake_id, stored)
        except Exception:
            self._discard_photos(stored)
            raise
        return mistake_id, stored

    def attach_photos(
        self, mistake_id: int, sources: Iterable[Union[str, Path]]
    ) -> List[str]:
        """
        Copy images into the photo directory and attach them as one batch.

        Copies already made are removed again if the batch cannot be saved.

        Returns:
            Stored URIs in the order of ``sources``

        Raises:
            ValidationError: If a source file does not exist
            NotFoundError: If the mistake does not exist
            DatabaseError: If an image cannot be copied
        """
        stored = self._copy_photos(sources)
        try:
            with self.session_scope():
                self.photos.insert_batch(mistake_id, stored)
        except Exception:
            self._discard_photos(stored)
            raise
        return stored

    def _copy_photos(self, sources: Iterable[Union[str, Path]]) -> List[str]:
        """Copy every source into the photo directory, all or none."""
        stored: List[str] = []
        try:
            for source in sources:
                source_path = Path(source).expanduser()
                if not source_path.is_file():
                    raise ValidationError(f"Photo file not found: {source}")
                stored.append(store_photo(self.photos_dir, source_path))
        except OSError as e:
            self._discard_photos(stored)
            raise DatabaseError(f"Could not copy photo into {self.photos_dir}: {e}") from e
        except ValidationError:
            self._discard_photos(stored)
            raise
        return stored

    def _discard_photos(self, uris: List[str]) -> None:
        for uri in uris:
            removal = remove_photo_file(uri)
            if not removal.removed:
                safe_logger(self.logger).log_warning(
                    "Photo copy could not be removed", {"uri": uri, "error": removal.error}
                )

    def delete_photo(self, photo_id: int) -> PhotoDeletion:
        """
        Delete a photo row, then its file.

        The row deletion is committed first. A file that cannot be removed
        is reported in the result and logged as a warning.
        """
        with self.session_scope():
            photo: Optional[MistakePhoto] = self.photos.get_by_id(photo_id)
            if photo is None:
                return PhotoDeletion(photo_id=photo_id, deleted=False)
            uri = photo.uri
            self.photos.delete(photo_id)

        removal = remove_photo_file(uri)
        if not removal.removed:
            safe_logger(self.logger).log_warning(
                "Photo file could not be removed",
                {"photo_id": photo_id, "uri": uri, "error": removal.error},
            )

        return PhotoDeletion(
            photo_id=photo_id,
            deleted=True,
            file_removed=removal.removed,
            file_error=removal.error,
        )

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    def export_backup(self, share_target: Optional[ShareTarget]) -> Path:
        """
        Back up the database and photo files to ``share_target``.

        Raises:
            SharingUnavailable: If there is no available share target
            ExportError: If the archive cannot be built
        """
        with self.session_scope() as session:
            return self.export_manager.export_backup(
                session, self.photos_dir, share_target
            )

    def build_backup_archive(self) -> bytes:
        """Backup archive bytes without handing them anywhere."""
        with self.session_scope() as session:
            return self.export_manager.build_archive(session, self.photos_dir)

    def restore_backup(
        self, picker: Callable[[], Optional[ArchiveSource]]
    ) -> RestoreOutcome:
        """
        Replace all data with a picked backup archive.

        Raises:
            InvalidBackupFormat: If the archive is not a valid backup
            RestoreError: If the data could not be replaced (nothing changed)
            PartialRestoreIO: If the data was replaced but photo files failed
        """
        return self.restore_manager.restore_backup(picker, self.photos_dir)

    # -------------------------------------------------------------------------
    # Migrations
    # -------------------------------------------------------------------------

    def get_migration_history(self) -> Dict[str, Optional[str]]:
        """Current and head Alembic revisions of the database."""
        return self.schema_manager.get_migration_status()

    def upgrade_database(self, revision: str = "head") -> None:
        """Upgrade the schema to ``revision``."""
        self.schema_manager.upgrade(revision)
