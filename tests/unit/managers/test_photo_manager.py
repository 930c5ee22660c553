"""
test_photo_manager.py
---------------------
Unit tests for PhotoManager batch inserts, listing and deletion.
"""
import pytest

from missnote.core.exceptions import NotFoundError, ValidationError


@pytest.fixture
def mistake_id(mistake_manager):
    """A stored mistake to attach photos to."""
    return mistake_manager.insert({"title": "Graph misread", "body": "Axis was log"})


class TestPhotoManagerInsertBatch:
    """Test PhotoManager.insert_batch() method."""

    def test_insert_keeps_order_and_shares_created_at(self, photo_manager, mistake_id):
        """Test photos keep input order and one timestamp."""
        photos = photo_manager.insert_batch(mistake_id, ["/p/1.jpg", "/p/2.jpg", "/p/3.jpg"])

        assert [p.uri for p in photos] == ["/p/1.jpg", "/p/2.jpg", "/p/3.jpg"]
        assert len({p.created_at for p in photos}) == 1
        assert photos[0].id < photos[1].id < photos[2].id

    def test_empty_batch_is_noop(self, photo_manager, mistake_id):
        """Test an empty batch inserts nothing."""
        assert photo_manager.insert_batch(mistake_id, []) == []
        assert photo_manager.list_by_mistake(mistake_id) == []

    def test_missing_mistake_raises(self, photo_manager):
        """Test attaching to an unknown mistake raises NotFoundError."""
        with pytest.raises(NotFoundError):
            photo_manager.insert_batch(999, ["/p/1.jpg"])

    def test_blank_uri_raises(self, photo_manager, mistake_id):
        """Test blank URIs are rejected before anything is inserted."""
        with pytest.raises(ValidationError):
            photo_manager.insert_batch(mistake_id, ["/p/1.jpg", "  "])
        assert photo_manager.list_by_mistake(mistake_id) == []


class TestPhotoManagerListAndDelete:
    """Test list_by_mistake() and delete()."""

    def test_list_only_own_photos(self, photo_manager, mistake_manager, mistake_id):
        """Test listing returns the mistake's photos in insertion order."""
        other_id = mistake_manager.insert({"title": "other", "body": "b"})
        photo_manager.insert_batch(mistake_id, ["/p/a.jpg"])
        photo_manager.insert_batch(other_id, ["/p/x.jpg"])
        photo_manager.insert_batch(mistake_id, ["/p/b.jpg"])

        assert [p.uri for p in photo_manager.list_by_mistake(mistake_id)] == [
            "/p/a.jpg",
            "/p/b.jpg",
        ]

    def test_delete_removes_row(self, photo_manager, mistake_manager, mistake_id):
        """Test deleting a photo removes only that row."""
        first, second = photo_manager.insert_batch(mistake_id, ["/p/a.jpg", "/p/b.jpg"])

        assert photo_manager.delete(first.id) is True

        assert [p.id for p in photo_manager.list_by_mistake(mistake_id)] == [second.id]
        assert [p.uri for p in mistake_manager.get_by_id(mistake_id).photos] == ["/p/b.jpg"]

    def test_delete_missing_returns_false(self, photo_manager):
        """Test deleting an unknown photo returns False."""
        assert photo_manager.delete(999) is False
