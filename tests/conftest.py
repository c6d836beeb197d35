"""Shared test fixtures."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel
from sqlmodel.pool import StaticPool

from secret_santa.core import security
from secret_santa.core.config import settings
from secret_santa.core.database import get_session, make_engine
from secret_santa.errors import DeliveryError
from secret_santa.main import app
from secret_santa.models import Participant, ParticipantRead
from secret_santa.notifications.mailer import get_mailer

ADMIN_PASSWORD = "north-pole"


class FakeMailer:
    """Records messages instead of sending them; fails for chosen addresses."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []

    def send(self, to_email, subject, text, html):
        if to_email in self.fail_for:
            raise DeliveryError(f"Mailbox {to_email} unavailable")
        self.sent.append({"to": to_email, "subject": subject, "text": text, "html": html})


def _make_roster(*names: str) -> list[ParticipantRead]:
    return [
        ParticipantRead(id=uuid4(), name=name, email=f"{name.lower()}@example.com")
        for name in names
    ]


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database with the production pragmas."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="mailer")
def mailer_fixture() -> FakeMailer:
    return FakeMailer()


@pytest.fixture(name="client")
def client_fixture(session: Session, mailer: FakeMailer, monkeypatch):
    """Create a test client with the test database session and a fake mailer."""

    def get_session_override():
        return session

    monkeypatch.setattr(settings, "admin_password", ADMIN_PASSWORD)
    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_mailer] = lambda: mailer
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="admin_headers")
def admin_headers_fixture() -> dict:
    """Authorization header carrying a freshly issued admin token."""
    return {"Authorization": f"Bearer {security.issue_token()}"}


@pytest.fixture(name="participants")
def participants_fixture(session: Session) -> list[Participant]:
    """Register Alice, Bob and Carol, in that order."""
    people = [
        Participant(name="Alice", email="alice@example.com", wishlist="Books"),
        Participant(name="Bob", email="bob@example.com", wishlist=""),
        Participant(name="Carol", email="carol@example.com", wishlist="Tea, socks"),
    ]
    for person in people:
        session.add(person)
        session.commit()
    for person in people:
        session.refresh(person)
    return people


@pytest.fixture(name="make_roster")
def make_roster_fixture():
    """Factory building an in-memory roster without touching the database."""
    return _make_roster
