"""Pytest configuration and fixtures."""

import base64
import os
import uuid
from datetime import datetime, timedelta

# Settings are cached on first use; configure them before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sightings_api.db.base import Base
from sightings_api.db.session import get_db
from sightings_api.errors import NotFoundError
from sightings_api.main import app
from sightings_api.moderation.lifecycle import SightingLifecycle
from sightings_api.services.records import SightingRecords
from sightings_api.storage.service import StoredObject, get_storage_service

# Use test database URL from environment or default to SQLite in-memory
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")

ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]

T0 = datetime(2026, 3, 1, 12, 0, 0)


class MemoryStorage:
    """In-memory stand-in for the MinIO-backed StorageService."""

    def __init__(self):
        self.objects: dict[str, StoredObject] = {}

    def put_object(self, object_key: str, data: bytes, content_type: str) -> str:
        self.objects[object_key] = StoredObject(data=data, content_type=content_type)
        return object_key

    def get_object(self, object_key: str) -> StoredObject:
        if object_key not in self.objects:
            raise NotFoundError(f"Object not found: {object_key}")
        return self.objects[object_key]

    def delete_object(self, object_key: str) -> None:
        self.objects.pop(object_key, None)


class FakeClock:
    """Controllable clock returning naive UTC datetimes."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="function")
def db():
    """
    Create a test database session.

    For integration tests, use TEST_DATABASE_URL environment variable
    to point to a real PostgreSQL instance.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL)

    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def records(db: Session) -> SightingRecords:
    return SightingRecords(db)


@pytest.fixture
def lifecycle(records: SightingRecords, storage: MemoryStorage, clock: FakeClock) -> SightingLifecycle:
    return SightingLifecycle(
        records,
        storage,
        clock=clock,
        pending_ttl=timedelta(hours=48),
        purge_attachments_on_expire=True,
    )


@pytest.fixture
def client(db: Session, storage: MemoryStorage):
    """Test client wired to the test database and in-memory storage."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    token = base64.b64encode(f"admin:{ADMIN_PASSWORD}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


def multipart_body(fields: dict, photo: tuple = None) -> tuple[bytes, dict]:
    """
    Build a multipart/form-data body.

    Args:
        fields: Plain form fields
        photo: Optional ``(filename, data, content_type)`` sent as ``photos``

    Returns:
        Body bytes and the matching Content-Type header
    """
    boundary = uuid.uuid4().hex
    parts = []
    for name, value in fields.items():
        parts.append(
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode()
        )
    if photo is not None:
        filename, data, content_type = photo
        parts.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="photos"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n\r\n"
            ).encode()
            + data
            + b"\r\n"
        )
    parts.append(f"--{boundary}--\r\n".encode())
    return b"".join(parts), {"Content-Type": f"multipart/form-data; boundary={boundary}"}


@pytest.fixture
def submit(client):
    """Post a sighting through the intake endpoint."""

    def _submit(photo: tuple = None, **fields):
        form = {"title": "Big Foot", "description": "Saw something", "consent": "true"}
        form.update(fields)
        form = {k: v for k, v in form.items() if v is not None}
        body, headers = multipart_body(form, photo)
        return client.post("/api/sightings", content=body, headers=headers)

    return _submit
