#!/usr/bin/env python3
"""
backup_configs.py
-----------------

Configuration-driven table serialization for backup archives.

Each table in a backup is described once: its key in ``data.json``, its
ORM model, how a row is written out, and how an archived row is read
back (with the fallbacks applied to missing fields). ExportManager and
RestoreManager both iterate over BACKUP_TABLES.

Archive layout:
    data.json          {"version": 1, "exported_at": ..., "data": {...}}
    photos/<name>      image files, names kept verbatim
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Type

from missnote.core.validators import DataValidator, now_timestamp

from ..models import Mistake, MistakePhoto, Subject
from .defaults import DEFAULT_IMPORTANCE, DEFAULT_SUBJECT

BACKUP_FORMAT_VERSION = 1
DATA_DOCUMENT_NAME = "data.json"
PHOTOS_FOLDER = "photos/"
BACKUP_FILENAME_TEMPLATE = "miss-log-backup-{timestamp}.zip"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d-%H%M"


@dataclass
class TableBackupConfig:
    """
    Configuration for one table in a backup archive.

    Attributes:
        json_key: Key under ``data`` in data.json
        model: SQLAlchemy model class
        serializer: Row -> dict written to the archive
        loader: Archived dict -> column values for insertion
    """

    json_key: str
    model: Type
    serializer: Callable[[Any], Dict[str, Any]]
    loader: Callable[[Dict[str, Any]], Dict[str, Any]]


# ========================================
# Serializer Functions
# ========================================

def _serialize_subject(subject: Subject) -> Dict[str, Any]:
    return {
        "id": subject.id,
        "name": subject.name,
        "sort_order": subject.sort_order,
        "is_active": int(bool(subject.is_active)),
    }


def _serialize_mistake(mistake: Mistake) -> Dict[str, Any]:
    return {
        "id": mistake.id,
        "title": mistake.title,
        "body": mistake.body,
        "subject": mistake.subject,
        "importance": mistake.importance,
        "occurred_at": mistake.occurred_at,
        "created_at": mistake.created_at,
        "updated_at": mistake.updated_at,
    }


def _serialize_photo(photo: MistakePhoto) -> Dict[str, Any]:
    return {
        "id": photo.id,
        "mistake_id": photo.mistake_id,
        "uri": photo.uri,
        "created_at": photo.created_at,
    }


# ========================================
# Loader Functions
# ========================================

def _text(value: Any, default: str) -> str:
    return default if value is None else str(value)


def _load_subject(row: Dict[str, Any]) -> Dict[str, Any]:
    is_active = DataValidator.normalize_bool(row.get("is_active"))
    return {
        "id": int(row["id"]),
        "name": _text(row.get("name"), ""),
        "sort_order": int(row.get("sort_order") or 0),
        "is_active": True if is_active is None else is_active,
    }


def _load_mistake(row: Dict[str, Any]) -> Dict[str, Any]:
    now = now_timestamp()
    importance = row.get("importance")
    return {
        "id": int(row["id"]),
        "title": _text(row.get("title"), "").strip(),
        "body": _text(row.get("body"), "").strip(),
        "subject": _text(row.get("subject"), DEFAULT_SUBJECT),
        "importance": DEFAULT_IMPORTANCE if importance is None else int(importance),
        "occurred_at": _text(row.get("occurred_at"), now),
        "created_at": _text(row.get("created_at"), now),
        "updated_at": _text(row.get("updated_at"), now),
    }


def _load_photo(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": int(row["id"]),
        "mistake_id": int(row["mistake_id"]),
        "uri": _text(row.get("uri"), ""),
        "created_at": _text(row.get("created_at"), now_timestamp()),
    }


# Insertion order; deletion runs in reverse
BACKUP_TABLES: List[TableBackupConfig] = [
    TableBackupConfig("subjects", Subject, _serialize_subject, _load_subject),
    TableBackupConfig("mistakes", Mistake, _serialize_mistake, _load_mistake),
    TableBackupConfig("mistake_photos", MistakePhoto, _serialize_photo, _load_photo),
]
