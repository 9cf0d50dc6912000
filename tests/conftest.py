"""
Name: Shared Test Fixtures

Responsibilities:
  - Point settings at an in-memory database before the app is imported
  - Provide a SQLite session shared by the test and the app under test
  - Offer factories for users and domains plus the X-User header
"""

import json
import os

os.environ.setdefault("TEAMDESK_DATABASE_URL", "sqlite://")
os.environ.setdefault("TEAMDESK_AUTH_ENABLED", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from teamdesk.api.deps import get_db
from teamdesk.db import models as _models  # noqa: F401
from teamdesk.db.base import Base
from teamdesk.db.models import Domain, User


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db_session):
    from teamdesk.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session):
    def _make(email: str, role: str = "member", domains: list[str] | None = None, **extra) -> User:
        domains = list(domains or [])
        user = User(
            email=email.lower(),
            name=extra.pop("name", email.split("@")[0]),
            role=role,
            domain=domains[0] if domains else None,
            domains=domains,
            **extra,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_domain(db_session):
    def _make(name: str, leads: list[str] | None = None, members: list[str] | None = None) -> Domain:
        row = Domain(name=name, leads=list(leads or []), members=list(members or []))
        db_session.add(row)
        db_session.commit()
        return row

    return _make


def as_user(user: User) -> dict[str, str]:
    return {"X-User": json.dumps({"id": user.id, "email": user.email})}


@pytest.fixture()
def headers():
    return as_user
