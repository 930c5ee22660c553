"""
Core Models
------------

Central models for the MissNote database.

Models:
    - Mistake: One logged mistake (the primary model)
    - MistakePhoto: Image file attached to a mistake

Timestamps are ISO-8601 text columns (see core.validators), matching the
layout of databases created by earlier versions of the application.
"""
from __future__ import annotations

from typing import List

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from missnote.core.validators import now_timestamp

from ..configs.defaults import DEFAULT_IMPORTANCE, DEFAULT_SUBJECT
from .base import Base


# ----- Mistake Model -----
class Mistake(Base):
    """
    A single logged mistake.

    Attributes:
        id: Primary key
        title: Short description (non-empty, trimmed)
        body: Full notes (non-empty, trimmed)
        subject: Subject name, matched by value against Subject.name
        importance: 1 (low), 2 (mid) or 3 (high)
        occurred_at: When the mistake happened (user-editable)
        created_at: When this record was created
        updated_at: When this record was last edited

    Relationships:
        photos: One-to-many with MistakePhoto, deleted with the mistake
    """

    __tablename__ = "mistakes"
    __table_args__ = (
        CheckConstraint("importance IN (1, 2, 3)", name="ck_mistake_importance"),
        Index("ix_mistakes_occurred_at", "occurred_at"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    subject: Mapped[str] = mapped_column(
        String, nullable=False, default=DEFAULT_SUBJECT, server_default=DEFAULT_SUBJECT
    )
    importance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_IMPORTANCE,
        server_default=str(DEFAULT_IMPORTANCE),
    )
    occurred_at: Mapped[str] = mapped_column(String, nullable=False, default=now_timestamp)

    # ---- Timestamps ----
    created_at: Mapped[str] = mapped_column(String, nullable=False, default=now_timestamp)
    updated_at: Mapped[str] = mapped_column(String, nullable=False, default=now_timestamp)

    # ---- Relationships ----
    photos: Mapped[List["MistakePhoto"]] = relationship(
        "MistakePhoto",
        back_populates="mistake",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MistakePhoto.id",
    )

    def __repr__(self) -> str:
        return f"<Mistake(id={self.id}, title='{self.title}', subject='{self.subject}')>"


# ----- Photo Model -----
class MistakePhoto(Base):
    """
    Image file attached to a mistake.

    Attributes:
        id: Primary key, also the display order within a mistake
        mistake_id: Owning mistake (cascade delete)
        uri: Absolute path of the image on this device
        created_at: When the photo was attached
    """

    __tablename__ = "mistake_photos"
    __table_args__ = (Index("ix_mistake_photos_mistake_id", "mistake_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    mistake_id: Mapped[int] = mapped_column(
        ForeignKey("mistakes.id", ondelete="CASCADE"), nullable=False
    )
    uri: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(String, nullable=False, default=now_timestamp)

    mistake: Mapped["Mistake"] = relationship("Mistake", back_populates="photos")

    def __repr__(self) -> str:
        return f"<MistakePhoto(id={self.id}, mistake_id={self.mistake_id})>"
