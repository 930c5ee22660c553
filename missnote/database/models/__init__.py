"""
Database Models Package
------------------------

SQLAlchemy ORM models for the MissNote database.

- base: Base class (and SQLite foreign key hook)
- enums: Importance and SortMode
- core: Mistake and MistakePhoto
- entities: Subject

Usage:
    from missnote.database.models import Mistake, MistakePhoto, Subject
"""
from .base import Base
from .enums import Importance, SortMode
from .core import Mistake, MistakePhoto
from .entities import Subject

__all__ = [
    "Base",
    "Importance",
    "SortMode",
    "Mistake",
    "MistakePhoto",
    "Subject",
]
