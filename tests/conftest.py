"""Shared pytest fixtures for all tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest

from shareline.database import init_database
from shareline.file_storage import FileStorage
from shareline.repositories.user_repository import UserRepository


class FakeClock:
    """
    Controllable replacement for utcnow().
    """

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def test_db(tmp_path, monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary test database for each test.
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setattr("shareline.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("shareline.config.DATABASE_PATH", str(db_path))
    init_database()
    yield db_path


@pytest.fixture
def upload_dir(tmp_path, monkeypatch) -> Path:
    """
    Point the storage root at a temporary directory.
    """
    root = tmp_path / "uploads"
    monkeypatch.setattr("shareline.config.UPLOAD_DIR", str(root))
    return root


@pytest.fixture
def storage(upload_dir) -> FileStorage:
    return FileStorage(upload_dir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fixed_mime(monkeypatch):
    """
    Replace libmagic sniffing with a deterministic classifier.

    Content starting with %PDF is reported as a PDF, anything else as plain text.
    """
    def classify(path, sample_size=None):
        with open(path, "rb") as f:
            head = f.read(8)
        return "application/pdf" if head.startswith(b"%PDF") else "text/plain"

    monkeypatch.setattr("shareline.content_type.sniff_content_type", classify)
    return classify


@pytest.fixture
def alice(test_db):
    return UserRepository.create_user(
        external_id="google-alice",
        name="Alice",
        email="alice@example.com",
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def bob(test_db):
    return UserRepository.create_user(
        external_id="google-bob",
        name="Bob",
        email="bob@example.com",
        created_at=datetime.now(timezone.utc),
    )
