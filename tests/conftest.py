import os

# must be set before backend.app.database builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app import models  # noqa: F401
from backend.app.database import Base, get_db
from backend.app.main import app
from backend.app.models import Applicant, Reviewer


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def add_applicant(db_session):
    def _add(name, category="regular", external_id=None):
        applicant = Applicant(
            external_id=external_id or f"ext-{name.lower().replace(' ', '-')}",
            name=name,
            category=category,
        )
        db_session.add(applicant)
        db_session.commit()
        return applicant

    return _add


@pytest.fixture
def add_reviewer(db_session):
    def _add(name, email=None, is_admin=False):
        reviewer = Reviewer(name=name, email=email, is_admin=is_admin)
        db_session.add(reviewer)
        db_session.commit()
        return reviewer

    return _add
