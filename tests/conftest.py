import os
import tempfile
from collections.abc import Generator

import pytest

# Settings are read lazily from the environment, set them before the app is imported
_UPLOAD_DIR = tempfile.mkdtemp(prefix="clubhub-test-uploads-")
os.environ.update(
    {
        "JWT_SECRET_KEY": "supersecretkey",
        "DATABASE_URL": "sqlite://",
        "UPLOAD_DIR": _UPLOAD_DIR,
        "UPLOAD_DELAY_SECONDS": "0",
        "APP_CREATE_TABLES": "false",
        "ADMIN_EMAILS": '["chief@example.com"]',
        "CELERY_BROKER_URL": "memory://",
        "CELERY_RESULT_BACKEND": "cache+memory://",
        "SMTP_HOST": "",
    }
)

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine.base import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tests.helpers import FakeImageHost, register_and_login  # noqa: E402


@pytest.fixture(scope="function")
def engine() -> Generator[Engine]:
    """In-memory SQLite engine shared by every connection of one test."""
    from clubhub.models import Event, EventRegistration, Gallery, GalleryPhoto, Resource, User  # noqa: F401
    from clubhub.models.db import Base

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_maker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_maker: sessionmaker[Session]) -> Generator[Session]:
    session = session_maker()
    yield session
    session.close()


@pytest.fixture(scope="function")
def image_host() -> FakeImageHost:
    return FakeImageHost()


@pytest.fixture(scope="function")
def upload_dir():
    from pathlib import Path

    return Path(_UPLOAD_DIR)


@pytest.fixture(scope="function")
def client(db_session: Session, image_host: FakeImageHost) -> Generator[TestClient]:
    from clubhub.dependencies import set_image_host_instance
    from clubhub.main import app
    from clubhub.models.db import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    set_image_host_instance(image_host)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    set_image_host_instance(None)


@pytest.fixture(scope="function")
def test_user_data() -> dict[str, str]:
    return {
        "name": "Asha Verma",
        "email": "asha@example.com",
        "password": "testpassword123",
        "registration_no": "21bcs501",
        "branch": "CSE",
        "semester": "5",
        "mobile": "9876543210",
    }


@pytest.fixture(scope="function")
def authenticated_client(client: TestClient, test_user_data: dict[str, str]) -> Generator[TestClient]:
    token = register_and_login(client, test_user_data)
    client.headers.update({"Authorization": f"Bearer {token}"})
    yield client
    client.headers.clear()


@pytest.fixture(scope="function")
def admin_headers(client: TestClient) -> dict[str, str]:
    """Headers of a member promoted to admin through ADMIN_EMAILS."""
    token = register_and_login(
        client,
        {
            "name": "Club Chief",
            "email": "chief@example.com",
            "password": "chiefpassword",
            "registration_no": "21BCS900",
            "branch": "CSE",
            "semester": "7",
            "mobile": "9000000001",
        },
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def gallery_id(authenticated_client: TestClient) -> str:
    """A gallery with a thumbnail and two photos."""
    files = [
        ("thumbnail", ("cover.jpg", b"cover-bytes", "image/jpeg")),
        ("photos", ("one.jpg", b"one-bytes", "image/jpeg")),
        ("photos", ("two.jpg", b"two-bytes", "image/jpeg")),
    ]
    resp = authenticated_client.post("/galleries", data={"title": "Hackathon 2024", "description": "Day one"}, files=files)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]
