"""
Entity managers for the MissNote database.

Each manager wraps one entity type and is created per session by
MissNoteDB.session_scope().
"""
from .base_manager import BaseManager
from .mistake_manager import MistakeManager
from .photo_manager import PhotoManager
from .subject_manager import SubjectManager

__all__ = [
    "BaseManager",
    "MistakeManager",
    "PhotoManager",
    "SubjectManager",
]
