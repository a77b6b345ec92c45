from __future__ import annotations

import os
import tempfile
from typing import Generator, Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from expense_tracker.core.config import settings
from expense_tracker.core.database import Base, get_db, install_sqlite_pragmas
from expense_tracker.main import app
from expense_tracker import models
from expense_tracker.services.category_service import CategoryService
from expense_tracker.store import LedgerStore


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # temp-file SQLite so the developer database is never touched
    fd, path = tempfile.mkstemp(prefix="expense_tracker_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = create_engine(test_db_url, connect_args={"check_same_thread": False})
    install_sqlite_pragmas(eng)
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Any, Any, Any]:
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    # demo account only; categories are seeded lazily on first listing
    session.add(models.User(email=settings.DEMO_EMAIL, is_active=True))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        with engine.connect() as conn:
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            conn.commit()
            # SQLite ignores this pragma inside a transaction, so restore it after the commit
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")
                conn.commit()


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    # FastAPI DI override
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def account_id(db_session) -> int:
    return db_session.query(models.User).filter_by(email=settings.DEMO_EMAIL).one().id


@pytest.fixture()
def store(db_session) -> LedgerStore:
    return LedgerStore(db_session)


@pytest.fixture()
def categories(store, account_id) -> dict[str, models.Category]:
    """Default categories keyed by name."""
    return {c.name: c for c in CategoryService(store).list_categories(account_id)}
