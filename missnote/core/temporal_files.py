#!/usr/bin/env python3
"""
temporal_files.py
--------------------
Temporary staging directories with automatic cleanup.

Backup archives are written to a staging directory before they are
handed to a share target; the directory is removed once the handoff is
over, whether it succeeded or not.

Usage:
    from missnote.core.temporal_files import TemporalFileManager

    with TemporalFileManager() as temp_manager:
        staging = temp_manager.create_temp_dir(prefix="missnote_export_")
        ...
    # Directory removed on context exit
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

# --- Local imports ---
from .exceptions import TemporalFileError


class TemporalFileManager:
    """
    Creates temporary directories and removes them on exit.

    Attributes:
        base_dir: Parent directory for staging areas (system temp if None)
        active_dirs: Directories created and not yet removed
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir else Path(tempfile.gettempdir())
        self.active_dirs: List[Path] = []

    def create_temp_dir(self, prefix: str = "missnote_") -> Path:
        """
        Create a temporary directory and track it for cleanup.

        Raises:
            TemporalFileError: If directory creation fails
        """
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            temp_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=self.base_dir))
        except OSError as e:
            raise TemporalFileError(f"Failed to create temporary directory: {e}") from e
        self.active_dirs.append(temp_dir)
        return temp_dir

    def cleanup(self) -> Dict[str, int]:
        """
        Remove all tracked directories.

        Returns:
            Dictionary with cleanup statistics
        """
        stats = {"dirs_removed": 0, "errors": 0}
        for temp_dir in self.active_dirs[:]:
            try:
                if temp_dir.exists():
                    shutil.rmtree(temp_dir)
                    stats["dirs_removed"] += 1
                self.active_dirs.remove(temp_dir)
            except OSError:
                stats["errors"] += 1
        return stats

    def __enter__(self) -> "TemporalFileManager":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[Exception],
        exc_tb: Optional[Any],
    ) -> None:
        del exc_type, exc_val, exc_tb
        self.cleanup()
