import os
import tempfile

# Keep the app's own engine away from the working directory
_app_db_fd, _app_db_path = tempfile.mkstemp(suffix=".db")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_app_db_path}")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_db
from app.core.database import Base
from app.core.middleware import request_limiter
from app.models.score import Score, utcnow
from main import app


@pytest.fixture(scope="session")
def test_db():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)

@pytest.fixture
def db_session(test_db):
    session = test_db()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

@pytest.fixture(autouse=True)
def db_cleanup(db_session):
    db_session.query(Score).delete()
    db_session.commit()
    request_limiter.reset()
    yield
    request_limiter.reset()

@pytest.fixture
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def add_scores(db_session):
    """Insert score rows directly, bypassing validation and submission limits."""
    def _add(*rows, ip_address="10.0.0.1"):
        created = []
        for moves, time in rows:
            score = Score(
                name=f"player_{moves}_{time}",
                time=time,
                moves=moves,
                date=utcnow(),
                ip_address=ip_address
            )
            db_session.add(score)
            created.append(score)
        db_session.commit()
        return created
    return _add
