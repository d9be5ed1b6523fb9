import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import secrets  # noqa: E402
from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.db import Base, get_engine, make_session_factory  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.auth import AuthSession, SessionStatus  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.auth_flow import hash_token  # noqa: E402
from app.services.common import utcnow  # noqa: E402
from app.services.documents import record_locks  # noqa: E402

from tests.mocks import FakeOTPProvider  # noqa: E402


@pytest.fixture
def engine():
    engine = get_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def _clear_record_locks():
    yield
    record_locks._busy.clear()


def _make_user(db_session, mobile_number: str, **overrides) -> User:
    user = User(mobile_number=mobile_number, **overrides)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def user(db_session):
    return _make_user(db_session, "+971501234567", full_name="Test User")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, "+971509999999", full_name="Someone Else")


@pytest.fixture
def otp_provider():
    return FakeOTPProvider()


@pytest.fixture
def client(session_factory, otp_provider):
    app = create_app(session_factory=session_factory, otp_provider=otp_provider)
    with TestClient(app) as test_client:
        yield test_client


def _open_session(db_session, user) -> str:
    token = secrets.token_urlsafe(16)
    db_session.add(
        AuthSession(
            user_id=user.id,
            token_hash=hash_token(token),
            provider_token="provider-token",
            status=SessionStatus.active,
            expires_at=utcnow() + timedelta(hours=1),
        )
    )
    db_session.commit()
    return token


@pytest.fixture
def auth_headers(db_session, user):
    return {"Authorization": f"Bearer {_open_session(db_session, user)}"}


@pytest.fixture
def other_auth_headers(db_session, other_user):
    return {"Authorization": f"Bearer {_open_session(db_session, other_user)}"}
