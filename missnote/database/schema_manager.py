#!/usr/bin/env python3
"""
schema_manager.py
-----------------
Schema creation, migration and startup repair for the MissNote database.

ensure_schema() is idempotent and runs on every startup:

    1. Fresh database (no tables): create every table from the ORM
       metadata and stamp the Alembic revision to head.
       Existing database: ``alembic upgrade head``. Revisions check the
       live schema first, so databases written before Alembic tracking
       upgrade safely from base.
    2. Repair rows that still hold empty values (subject, importance,
       created_at, occurred_at, updated_at).
    3. Seed the default subjects, inserting only names not present.

All three steps run on one connection inside engine.begin(). The sqlite3
driver commits DDL that runs before the first data statement on its own, so
a failure can leave columns already added; the repair and seed rows are
rolled back. A later startup picks up from there because every revision
checks the live schema before altering it. Columns are only ever added,
never dropped or renamed. Any failure raises SchemaError.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from typing import Optional, Union

# --- Third party imports ---
from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import Connection, Engine, func, inspect, or_, update
from sqlalchemy.orm import Session

# --- Local imports ---
from missnote.core.exceptions import SchemaError
from missnote.core.logging_manager import MissNoteLogger, safe_logger
from missnote.core.validators import now_timestamp
from missnote.database.configs.defaults import (
    DEFAULT_IMPORTANCE,
    DEFAULT_SUBJECT,
    DEFAULT_SUBJECTS,
)
from missnote.database.managers.subject_manager import SubjectManager
from missnote.database.models import Base, Mistake


class SchemaManager:
    """
    Keeps the database schema at the latest revision.

    Attributes:
        engine: Engine of the database to manage
        alembic_dir: Directory holding env.py and versions/
        logger: Optional logger
    """

    def __init__(
        self,
        engine: Engine,
        alembic_dir: Union[str, Path],
        logger: Optional[MissNoteLogger] = None,
    ) -> None:
        self.engine = engine
        self.alembic_dir = Path(alembic_dir)
        self.logger = logger
        self.alembic_cfg = self._setup_alembic()

    def _setup_alembic(self) -> Config:
        """Build an in-memory Alembic configuration."""
        cfg = Config()
        cfg.set_main_option("script_location", str(self.alembic_dir))
        cfg.set_main_option(
            "sqlalchemy.url", self.engine.url.render_as_string(hide_password=False)
        )
        return cfg

    # ---- Public API ----
    def ensure_schema(self) -> str:
        """
        Bring the database to head, repair legacy values, seed subjects.

        Returns:
            "created" for a fresh database, "migrated" otherwise

        Raises:
            SchemaError: If any step fails. Data changes are rolled back;
                columns already added stay and are skipped on the next run
        """
        log = safe_logger(self.logger)
        try:
            with self.engine.begin() as conn:
                fresh = self._is_fresh(conn)
                self.alembic_cfg.attributes["connection"] = conn

                if fresh:
                    Base.metadata.create_all(bind=conn)
                    command.stamp(self.alembic_cfg, "head")
                else:
                    command.upgrade(self.alembic_cfg, "head")

                with Session(bind=conn) as session:
                    repaired = self._repair_legacy_values(session)
                    seeded = SubjectManager(session, self.logger).seed(DEFAULT_SUBJECTS)
                    session.commit()

            status = "created" if fresh else "migrated"
            log.log_operation(
                "schema_ensured",
                {"status": status, "rows_repaired": repaired, "subjects_seeded": seeded},
            )
            return status

        except Exception as e:
            log.log_error(e, {"operation": "ensure_schema"})
            raise SchemaError(f"Could not initialize database schema: {e}") from e
        finally:
            self.alembic_cfg.attributes.pop("connection", None)

    def upgrade(self, revision: str = "head") -> None:
        """
        Upgrade the schema to ``revision``.

        Raises:
            SchemaError: If the upgrade fails
        """
        try:
            with self.engine.begin() as conn:
                self.alembic_cfg.attributes["connection"] = conn
                command.upgrade(self.alembic_cfg, revision)
        except Exception as e:
            safe_logger(self.logger).log_error(e, {"operation": "upgrade_schema"})
            raise SchemaError(f"Database upgrade failed: {e}") from e
        finally:
            self.alembic_cfg.attributes.pop("connection", None)

    def current_revision(self) -> Optional[str]:
        """Alembic revision recorded in the database, or None."""
        with self.engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()

    def head_revision(self) -> Optional[str]:
        """Latest revision available in the migrations directory."""
        return ScriptDirectory.from_config(self.alembic_cfg).get_current_head()

    def get_migration_status(self) -> dict:
        """
        Current and head revisions with an up-to-date flag.

        Returns:
            Dictionary with current_revision, head_revision and status
            ("up_to_date" or "needs_migration")
        """
        current = self.current_revision()
        head = self.head_revision()
        return {
            "current_revision": current,
            "head_revision": head,
            "status": "up_to_date" if current == head else "needs_migration",
        }

    # ---- Helpers ----
    @staticmethod
    def _is_fresh(conn: Connection) -> bool:
        return len(inspect(conn).get_table_names()) == 0

    @staticmethod
    def _repair_legacy_values(session: Session) -> int:
        """
        Fill empty columns left by older application versions.

        Returns:
            Total number of rows touched across all repairs
        """
        now = now_timestamp()
        fallback_from_created = func.coalesce(
            func.nullif(Mistake.created_at, ""), now
        )
        repairs = [
            (
                or_(Mistake.subject.is_(None), Mistake.subject == ""),
                {Mistake.subject: DEFAULT_SUBJECT},
            ),
            (Mistake.importance.is_(None), {Mistake.importance: DEFAULT_IMPORTANCE}),
            (
                or_(Mistake.created_at.is_(None), Mistake.created_at == ""),
                {Mistake.created_at: now},
            ),
            (
                or_(Mistake.occurred_at.is_(None), Mistake.occurred_at == ""),
                {Mistake.occurred_at: fallback_from_created},
            ),
            (
                or_(Mistake.updated_at.is_(None), Mistake.updated_at == ""),
                {Mistake.updated_at: fallback_from_created},
            ),
        ]

        touched = 0
        for condition, values in repairs:
            result = session.execute(
                update(Mistake)
                .where(condition)
                .values(values)
                .execution_options(synchronize_session=False)
            )
            touched += result.rowcount or 0
        return touched
