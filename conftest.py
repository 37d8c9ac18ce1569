"""
Pytest fixtures for PageGuard tests. Each test gets its own temporary SQLite DB.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pageguard.database import get_db, init_db


@pytest.fixture
def db_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'pageguard.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    """FastAPI TestClient bound to the temporary DB. Lifespan is not run."""
    from fastapi.testclient import TestClient

    from pageguard.api import routes
    from pageguard.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    routes.notification_service.limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def trusted():
    return ("facebook.com", "tiktok.com")
