#!/usr/bin/env python3
"""
photo_files.py
-------------------
Filesystem utilities for the photo directory.

Photos attached to mistakes live as plain files in a single directory
supplied by the caller. The database stores their absolute path; these
helpers generate file names, copy images in, remove them, and rebuild
paths after the directory moves (e.g. on restore to another device).

Functions:
    generate_photo_filename: Unique-enough name keeping the source extension
    photo_basename: Last path segment of a stored URI (``/`` or ``\\``)
    photo_uri: Join the photo directory and a file name
    is_image_file: Whether a file name carries a supported image extension
    list_image_files: Image files in a directory, sorted by name
    store_photo: Copy a source image into the photo directory
    remove_photo_file: Delete a stored image, reporting failure

Usage:
    from missnote.core.photo_files import store_photo, photo_basename

    uri = store_photo(Path("/data/photos"), Path("~/Pictures/IMG_0001.HEIC"))
    name = photo_basename(uri)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
import re
import secrets
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "heic", "webp"})
DEFAULT_EXTENSION = "jpg"

_EXTENSION_RE = re.compile(r"\.([a-zA-Z0-9]+)(\?|#|$)")


@dataclass
class PhotoFileRemoval:
    """
    Outcome of removing a photo file.

    Attributes:
        path: File that was targeted
        removed: True when the file is gone afterwards
        error: Description of the failure, when removal failed
    """

    path: str
    removed: bool
    error: Optional[str] = None


def generate_photo_filename(source: Union[str, Path]) -> str:
    """
    Build a new file name for an imported photo.

    Format: ``<epoch-milliseconds>_<random-hex>.<ext>`` where ``ext`` is the
    lowercased extension of the source, or ``jpg`` when it has none.
    Collisions are possible in theory but vanishingly unlikely.
    """
    match = _EXTENSION_RE.search(str(source))
    extension = match.group(1).lower() if match else DEFAULT_EXTENSION
    millis = int(time.time() * 1000)
    return f"{millis}_{secrets.token_hex(6)}.{extension}"


def photo_basename(uri: str) -> str:
    """Return the last path segment of a URI, splitting on both separators."""
    return re.split(r"[/\\]", uri)[-1]


def photo_uri(photos_dir: Union[str, Path], file_name: str) -> str:
    """
    Join the photo directory and a file name into a stored URI.

    A separator is inserted only when the directory lacks a trailing one.
    """
    directory = str(photos_dir)
    if directory and not directory.endswith(("/", "\\")):
        directory += os.sep
    return f"{directory}{file_name}"


def is_image_file(name: str) -> bool:
    """Check whether a file name has a supported image extension."""
    _, dot, extension = name.rpartition(".")
    return bool(dot) and extension.lower() in IMAGE_EXTENSIONS


def list_image_files(photos_dir: Path) -> List[Path]:
    """List image files in the photo directory, sorted by name."""
    if not photos_dir.is_dir():
        return []
    return sorted(
        (p for p in photos_dir.iterdir() if p.is_file() and is_image_file(p.name)),
        key=lambda p: p.name,
    )


def store_photo(photos_dir: Path, source: Path) -> str:
    """
    Copy a source image into the photo directory under a generated name.

    Args:
        photos_dir: Destination directory (created if missing)
        source: Image file to copy

    Returns:
        Stored URI of the copy

    Raises:
        OSError: If the source cannot be read or the copy cannot be written
    """
    photos_dir.mkdir(parents=True, exist_ok=True)
    file_name = generate_photo_filename(source)
    shutil.copyfile(source, photos_dir / file_name)
    return photo_uri(photos_dir, file_name)


def remove_photo_file(uri: str) -> PhotoFileRemoval:
    """
    Delete the file behind a stored photo URI.

    A file that is already gone counts as removed. Other failures are
    reported in the result instead of raised.
    """
    path = Path(uri)
    try:
        path.unlink()
    except FileNotFoundError:
        return PhotoFileRemoval(path=uri, removed=True)
    except OSError as e:
        return PhotoFileRemoval(path=uri, removed=False, error=str(e))
    return PhotoFileRemoval(path=uri, removed=True)
