"""
conftest.py
-----------
Shared pytest fixtures for MissNote tests.

Provides fixtures for:
- Temporary directories (database, photos, logs)
- Database setup and teardown
- Entity managers bound to a test session
- Image file factories
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def photos_dir(tmp_dir):
    """Photo directory of the test device (not created up front)."""
    return tmp_dir / "photos"


@pytest.fixture
def log_dir(tmp_dir):
    """Log directory for tests that inspect log output."""
    return tmp_dir / "logs"


# ----- Image Fixtures -----

@pytest.fixture
def make_image(tmp_dir):
    """
    Factory writing a small fake image file outside the photo directory.

    Usage:
        source = make_image("page.jpg", b"...")
    """
    source_dir = tmp_dir / "camera"
    source_dir.mkdir(exist_ok=True)

    def _make(name: str = "IMG_0001.jpg", content: bytes = b"\xff\xd8fake-jpeg") -> Path:
        path = source_dir / name
        path.write_bytes(content)
        return path

    return _make


# ----- Test Database Fixtures -----

@pytest.fixture
def test_db(test_db_path, photos_dir, tmp_dir):
    """
    Create test database instance with schema.

    Returns a MissNoteDB instance with an initialized schema and the
    default subjects seeded. Database is torn down after the test.
    """
    from missnote.database.manager import MissNoteDB

    db = MissNoteDB(
        db_path=test_db_path,
        photos_dir=photos_dir,
        staging_dir=tmp_dir / "staging",
    )

    yield db

    # Cleanup
    db.dispose()
    if test_db_path.exists():
        test_db_path.unlink()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


@pytest.fixture
def mistake_manager(db_session):
    """Create MistakeManager instance for testing."""
    from missnote.database.managers.mistake_manager import MistakeManager
    return MistakeManager(db_session)


@pytest.fixture
def photo_manager(db_session):
    """Create PhotoManager instance for testing."""
    from missnote.database.managers.photo_manager import PhotoManager
    return PhotoManager(db_session)


@pytest.fixture
def subject_manager(db_session):
    """Create SubjectManager instance for testing."""
    from missnote.database.managers.subject_manager import SubjectManager
    return SubjectManager(db_session)


@pytest.fixture
def query_engine(db_session):
    """Create QueryEngine instance for testing."""
    from missnote.database.query_engine import QueryEngine
    return QueryEngine(db_session)
