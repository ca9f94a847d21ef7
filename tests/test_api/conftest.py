"""FastAPI test client backed by a shared in-memory SQLite database."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from apps.api.core.auth import ADMIN_ROLE, create_token
from apps.api.core.deps import get_db
from apps.api.main import app
from catalogdb.db.base import Base
from catalogdb.db.session import make_engine


@pytest.fixture
def db_sessionmaker():
    engine = make_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def client(db_sessionmaker):
    def override_get_db():
        with db_sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_token("admin-1", email="admin@example.com", role=ADMIN_ROLE)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers():
    token = create_token("user-1", email="reader@example.com", role="user")
    return {"Authorization": f"Bearer {token}"}
