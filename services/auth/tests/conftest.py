from __future__ import annotations

from http.cookies import SimpleCookie

import pytest
from fastapi.testclient import TestClient

from dairy_auth.core.config import Settings
from dairy_auth.db.session import Database
from dairy_auth.main import create_app
from dairy_auth.services.credentials import CredentialStore
from dairy_auth.services.notifier import ResetRequest
from dairy_auth.services.sessions import SessionIssuer

JWT_TEST_SECRET = "dairy-test-secret-0123456789abcdef0123456789"


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[ResetRequest] = []

    def send(self, request: ResetRequest) -> None:
        self.sent.append(request)


def refresh_cookie_value(response, name: str = "refreshToken") -> str | None:
    header = response.headers.get("set-cookie")
    if not header:
        return None
    morsel = SimpleCookie(header).get(name)
    return morsel.value if morsel else None


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        APP_ENV="test",
        DATABASE_DSN=f"sqlite:///{tmp_path / 'auth.db'}",
        DB_AUTO_CREATE=True,
        JWT_SECRET=JWT_TEST_SECRET,
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture
def database(settings: Settings):
    db = Database(settings.DATABASE_DSN)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def app(settings: Settings, database: Database, notifier: RecordingNotifier):
    return create_app(settings, database=database, reset_notifier=notifier)


@pytest.fixture
def client(app):
    # https so the Secure refresh cookie round-trips through the client jar.
    with TestClient(app, base_url="https://testserver") as c:
        yield c


@pytest.fixture
def make_issuer(database: Database, settings: Settings):
    sessions = []

    def _make() -> SessionIssuer:
        session = database.session()
        sessions.append(session)
        return SessionIssuer(session, CredentialStore(session, rounds=settings.BCRYPT_ROUNDS), settings)

    yield _make
    for session in sessions:
        session.close()
