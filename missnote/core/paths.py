#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants and configuration for the MissNote project.

This module defines the default locations used by the CLI and the
database facade when no explicit path is given. Every constant can be
overridden per invocation through the matching CLI option.

The project structure:
    ROOT/
    ├── missnote/      # Package source
    │   └── migrations/  # Alembic environment and revisions
    ├── data/          # User data (database, photos)
    ├── logs/          # Application logs
    ├── backups/       # Exported backup archives
    └── tmp/           # Staging area for archives being exported
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import sys
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/missnote/core/paths.py and navigates up
    the directory tree to find ROOT.

    Returns:
        Path object for project root
    """
    current_file = Path(__file__).resolve()

    # Navigate up: paths.py -> core/ -> missnote/ -> ROOT/
    return current_file.parent.parent.parent


# ----- Project directory -----
ROOT: Path = _get_project_root()
PACKAGE_DIR = ROOT / "missnote"
DATA_DIR = ROOT / "data"

# --- Database ---
ALEMBIC_DIR = PACKAGE_DIR / "migrations"
DB_PATH = DATA_DIR / "missnote.db"

# ---- Photos ----
PHOTOS_DIR = DATA_DIR / "photos"

# ---- Logs & Temp & Backups----
LOG_DIR = ROOT / "logs"
TMP_DIR = ROOT / "tmp"
BACKUP_DIR = ROOT / "backups"


# ----- Path Validation -----
def _validate_critical_paths() -> None:
    """
    Validate that critical paths exist.

    Prints warnings for missing paths but doesn't fail; data directories
    are created lazily on first use.
    """
    critical_paths = [
        (PACKAGE_DIR, "package directory"),
        (ALEMBIC_DIR, "migrations directory"),
    ]

    missing_paths = []
    for path, description in critical_paths:
        if not path.exists():
            missing_paths.append(f"{description} ({path})")

    if missing_paths:
        print(
            "Warning: Critical paths missing:\n  " + "\n  ".join(missing_paths),
            file=sys.stderr,
        )


# Validate paths on module import
_validate_critical_paths()
