import os
import tempfile
from pathlib import Path

# The app engine is built at import time; point it at a throwaway file before roomwise loads.
_DB_DIR = tempfile.mkdtemp(prefix="roomwise-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{Path(_DB_DIR) / 'app.db'}")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from roomwise.api.deps import get_db
from roomwise.db.base import Base
from roomwise.main import app
import roomwise.models  # noqa: F401


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
