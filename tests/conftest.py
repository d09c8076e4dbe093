import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import storage


@pytest.fixture
def db(monkeypatch):
    """In-memory SQLite engine swapped in for the module-level engine."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    monkeypatch.setattr(storage, "_engine", engine)
    storage.init_db()
    yield engine
    engine.dispose()
