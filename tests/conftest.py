# tests/conftest.py
"""
Fixtures compartidas.

Cada test corre contra un SQLite en memoria propio (StaticPool para que todas
las sesiones vean la misma conexión) y `get_db` se sobreescribe en la app.
"""
from __future__ import annotations

import os
import sys

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_SECRET", "test-secret")

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from safetool.db.session import RequestAwareSession, init_db
from safetool.dependencies.db import get_db
from safetool.core.security import create_access_token
from safetool.main import app


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=RequestAwareSession)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(session_factory):
    def _get_db(request: Request):
        s = session_factory()
        try:
            s.info["request_meta"] = getattr(request.state, "audit_meta", {}) or {}
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    token = create_access_token(sub="ingeniero", roles=["user"])
    return {"Authorization": f"Bearer {token}"}
