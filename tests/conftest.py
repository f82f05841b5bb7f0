"""
Pytest configuration for BookTrade.
"""
import os
import tempfile

import pytest

# Test environment must be in place before booktrade.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TARGET_FOLDER", tempfile.mkdtemp(prefix="booktrade-test-"))
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ADMIN_EMAIL", "admin@booktrade.test")
os.environ.setdefault("BACKEND_DOMAIN", "api.booktrade.test")
os.environ.setdefault("FRONTEND_DOMAIN", "booktrade.test")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

from booktrade.config import Settings, get_settings  # noqa: E402
from booktrade.database import Base, SessionLocal, engine  # noqa: E402
from booktrade.models import User  # noqa: E402
from booktrade.repository import ListingRepository  # noqa: E402
from booktrade.services import ActivationNotifier, ListingManager  # noqa: E402
from booktrade.storage import BlobStore  # noqa: E402
from tests.helpers import BOOK_FIELDS, run  # noqa: E402


@pytest.fixture
def db():
    """Fresh schema on the shared in-memory SQLite connection."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repo(db):
    return ListingRepository(db)


@pytest.fixture
def settings(tmp_path):
    return Settings(target_folder=str(tmp_path / "blobs"))


@pytest.fixture
def blob_store(settings):
    return BlobStore(settings)


@pytest.fixture
def dispatched():
    """Mails handed to the notifier's dispatch, in order."""
    return []


@pytest.fixture
def notifier(settings, dispatched):
    return ActivationNotifier(settings, dispatch=dispatched.append)


@pytest.fixture
def manager(repo, blob_store, notifier):
    return ListingManager(repo, blob_store, notifier, max_images=3)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name=None, email=None, location="Madrid"):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@booktrade.test",
            location=location,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def owner(make_user):
    return make_user(name="Ana", email="ana@booktrade.test", location="Valencia")


@pytest.fixture
def other_user(make_user):
    return make_user(name="Luis", email="luis@booktrade.test")


@pytest.fixture
def make_book(manager):
    """Create a listing through the manager and return the Book row."""

    def _make(owner_id, images=(), **overrides):
        fields = {**BOOK_FIELDS, **overrides}
        book_id = run(manager.create(owner_id, fields, list(images)))
        return manager.repo.get_book(book_id)

    return _make


@pytest.fixture
def app_client(db, notifier):
    """FastAPI test client bound to the test session and recording notifier."""
    from fastapi.testclient import TestClient

    from booktrade.database import get_db
    from booktrade.dependencies import get_notifier
    from booktrade.main import app

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def app_blobs():
    """Blob store the running app writes to (global settings)."""
    return BlobStore(get_settings())


@pytest.fixture
def auth_headers():
    import jwt

    def _headers(user):
        token = jwt.encode({"id": user.id, "email": user.email}, get_settings().jwt_secret, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _headers
