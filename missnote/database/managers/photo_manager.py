#!/usr/bin/env python3
"""
photo_manager.py
--------------------
Manages MistakePhoto rows.

Photos are inserted in batches when a mistake is saved or edited, and
listed in insertion order. Deleting a photo removes only its row; the
database facade takes care of the file on disk.

Usage:
    photo_mgr = PhotoManager(session, logger)

    photos = photo_mgr.insert_batch(mistake_id, ["/data/photos/a.jpg"])
    first = photo_mgr.list_by_mistake(mistake_id)[0]
    photo_mgr.delete(first.id)
"""
from typing import Iterable, List, Optional

from missnote.core.exceptions import NotFoundError, ValidationError
from missnote.core.validators import DataValidator, now_timestamp
from missnote.database.decorators import handle_db_errors, log_database_operation
from missnote.database.models import Mistake, MistakePhoto
from .base_manager import BaseManager


class PhotoManager(BaseManager):
    """Manages mistake_photos table operations."""

    @handle_db_errors
    @log_database_operation("get_photo")
    def get_by_id(self, photo_id: int) -> Optional[MistakePhoto]:
        """Retrieve a photo by ID, or None."""
        return self._get_by_id(MistakePhoto, photo_id)

    @handle_db_errors
    @log_database_operation("get_all_photos")
    def get_all(self) -> List[MistakePhoto]:
        """Retrieve every photo ordered by ID."""
        return self._get_all(MistakePhoto)

    @handle_db_errors
    @log_database_operation("insert_photo_batch")
    def insert_batch(self, mistake_id: int, uris: Iterable[str]) -> List[MistakePhoto]:
        """
        Attach photos to a mistake.

        All rows of the batch share one ``created_at`` timestamp and keep
        the order of ``uris``.

        Args:
            mistake_id: Owning mistake
            uris: Stored URIs of the image files

        Returns:
            Created MistakePhoto objects (empty when ``uris`` is empty)

        Raises:
            NotFoundError: If the mistake does not exist
            ValidationError: If a URI is blank
        """
        cleaned = []
        for uri in uris:
            value = DataValidator.normalize_string(uri)
            if value is None:
                raise ValidationError("Photo URI cannot be empty")
            cleaned.append(value)

        if not cleaned:
            return []

        if self._get_by_id(Mistake, mistake_id) is None:
            raise NotFoundError(f"No Mistake found with id: {mistake_id}")

        created_at = now_timestamp()
        photos = [
            MistakePhoto(mistake_id=mistake_id, uri=uri, created_at=created_at)
            for uri in cleaned
        ]
        self.session.add_all(photos)
        self.session.flush()

        if self.logger:
            self.logger.log_debug(
                "Inserted photos", {"mistake_id": mistake_id, "count": len(photos)}
            )

        return photos

    @handle_db_errors
    @log_database_operation("list_photos")
    def list_by_mistake(self, mistake_id: int) -> List[MistakePhoto]:
        """
        List a mistake's photos in insertion order.

        Args:
            mistake_id: Owning mistake

        Returns:
            Photos ordered by ID ascending
        """
        return self._get_all(MistakePhoto, mistake_id=mistake_id)

    @handle_db_errors
    @log_database_operation("delete_photo")
    def delete(self, photo_id: int) -> bool:
        """
        Delete a photo row. The image file is not touched.

        Returns:
            True if a row was deleted, False if none had this ID
        """
        photo = self._get_by_id(MistakePhoto, photo_id)
        if photo is None:
            return False

        if photo.mistake is not None and photo in photo.mistake.photos:
            photo.mistake.photos.remove(photo)
        self.session.delete(photo)
        self.session.flush()
        return True
