"""
Entity Models
-------------

Curated lookup entities for the MissNote database.

Models:
    - Subject: Named category a mistake belongs to
"""
from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Subject(Base):
    """
    Curated subject name.

    Mistakes reference subjects by name, not by key, so a mistake keeps
    its subject text even if the subject is later hidden. Subjects are
    never hard-deleted; deletion clears ``is_active``.

    Attributes:
        id: Primary key
        name: Unique subject name
        sort_order: Display position, assigned increasing on creation
        is_active: False once the subject has been deleted
    """

    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name='{self.name}', active={self.is_active})>"
