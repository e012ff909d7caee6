"""Shared fixtures: in-memory database, fake mailer, temp file store, API client."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from billtracker.core.config import SimpleSettings
from billtracker.db import models
from billtracker.db.base import Base
from billtracker.db.session import make_session_factory
from billtracker.main import create_app
from billtracker.services.files import LocalFileStore
from billtracker.services.security import hash_password


@dataclass
class SentMail:
    to: str
    subject: str
    html: str
    text: str
    attachments: List = field(default_factory=list)


class FakeMailer:
    """Records every send; addresses in `fail_for` raise like a dead SMTP server."""

    def __init__(self):
        self.sent: List[SentMail] = []
        self.fail_for = set()

    def send(self, to, subject, html_body, text_body, attachments=()):
        if to in self.fail_for:
            raise ConnectionError(f"SMTP refused {to}")
        self.sent.append(SentMail(to, subject, html_body, text_body, list(attachments)))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def file_store(tmp_path):
    return LocalFileStore(str(tmp_path / "uploads"))


@pytest.fixture
def settings(tmp_path):
    s = SimpleSettings()
    s.SECRET_KEY = "test-secret"
    s.UPLOAD_ROOT = str(tmp_path / "uploads")
    s.MAX_UPLOAD_BYTES = 1024
    s.TIMEZONE = "America/Sao_Paulo"
    s.LOG_LEVEL = "WARNING"
    return s


@pytest.fixture
def client(settings, session_factory, mailer, file_store):
    app = create_app(settings=settings, session_factory=session_factory, mailer=mailer, file_store=file_store)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(email="ana@example.com", name="Ana", password="segredo123", **kw):
        kw.setdefault("notification_days_before", 3)
        user = models.User(name=name, email=email, hashed_password=hash_password(password), **kw)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_bill(db):
    def _make(user, name="Conta de luz", due_date=date(2024, 6, 10), amount="120.50", **kw):
        bill = models.Bill(
            user_id=user.id,
            name=name,
            due_date=due_date,
            amount=Decimal(amount),
            status=kw.pop("status", models.BillStatus.pending),
            **kw,
        )
        db.add(bill)
        db.commit()
        db.refresh(bill)
        return bill

    return _make


@pytest.fixture
def auth_headers(client):
    def _headers(email="ana@example.com", password="segredo123", name="Ana"):
        resp = client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})
        if resp.status_code == 409:
            resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _headers
