from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from users_api.core.config import AppSettings, OpenAPISettings, Settings
from users_api.errors import NotFoundError
from users_api.main import create_app
from users_api.schemas.user import User, UserRequest
from users_api.store import UserStore

ROOT = Path(__file__).resolve().parents[1]
SPEC_PATH = ROOT / "openapi" / "openapi.yaml"

JOHN = {"first_name": "John", "last_name": "Doe", "email": "john@example.com"}


class RecordingStore:
    """In-memory stand-in that records calls and can be told to fail."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.closed = False
        self._users = {}
        self._next_id = 1

    def _fail(self):
        if self.error is not None:
            raise self.error

    def create_user(self, request: UserRequest) -> User:
        self.calls.append(("create_user", request))
        self._fail()
        now = datetime.now(timezone.utc)
        user = User(id=self._next_id, created_at=now, updated_at=now, **request.model_dump())
        self._users[user.id] = user
        self._next_id += 1
        return user

    def get_user(self, user_id: int) -> User:
        self.calls.append(("get_user", user_id))
        self._fail()
        try:
            return self._users[user_id]
        except KeyError:
            raise NotFoundError(user_id) from None

    def update_user(self, user_id: int, request: UserRequest) -> User:
        self.calls.append(("update_user", user_id, request))
        self._fail()
        current = self.get_user(user_id)
        user = current.model_copy(
            update={**request.model_dump(), "updated_at": datetime.now(timezone.utc)}
        )
        self._users[user_id] = user
        return user

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        app=AppSettings(mode="test", swagger_ui=""),
        openapi=OpenAPISettings(spec_path=str(SPEC_PATH), api_prefix="/api/v1"),
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> UserStore:
    store = UserStore(engine)
    store.create_schema()
    return store


@pytest.fixture
def fake_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def fake_client(settings, fake_store):
    app = create_app(settings, store=fake_store)
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
