"""
Shared fixtures: in-memory SQLite, a TestClient wired to it, and helpers to
mint identity-provider tokens.
"""
import os

os.environ.setdefault("IDP_SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import billdesk.models  # noqa: F401
from billdesk.core.config import settings
from billdesk.core.database import Base, get_db
from billdesk.main import app
from billdesk.routes.invoices import get_document_service
from billdesk.services.document_service import InvoiceDocumentService
from billdesk.services.storage import LocalObjectStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(tmp_path):
    return LocalObjectStore(str(tmp_path / "objects"))


@pytest.fixture
def document_service(session_factory, store):
    return InvoiceDocumentService(session_factory, store)


@pytest.fixture
def client(session_factory, document_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_service] = lambda: document_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(sub="user-1", role=None, expires_in=timedelta(minutes=5), secret=None, **extra):
    claims = {"sub": sub, "exp": datetime.now(timezone.utc) + expires_in, **extra}
    if role is not None:
        claims[settings.ROLE_CLAIM] = role
    return jwt.encode(claims, secret or settings.IDP_SECRET_KEY, algorithm=settings.IDP_ALGORITHM)


def auth_headers(role=None, **kwargs):
    return {"Authorization": f"Bearer {make_token(role=role, **kwargs)}"}


@pytest.fixture
def as_admin():
    return auth_headers(role="ADMIN", sub="admin-1")


@pytest.fixture
def as_accounts():
    return auth_headers(role="ACCOUNTS", sub="accounts-1")


@pytest.fixture
def as_design():
    return auth_headers(role="DESIGN", sub="design-1")
