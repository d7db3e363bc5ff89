"""Pytest configuration and fixtures."""
import os

# Point the application at a throwaway in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORE_BACKEND"] = "sql"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from surveykit import models  # noqa: F401
from surveykit.core.db import Base, get_db, make_engine
from surveykit.records import NewQuestion, QuestionType
from surveykit.store import InMemorySurveyStore, SqlSurveyStore


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database shared by every connection of the test."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(params=["sql", "memory"])
def store(request):
    """Every store test runs against both implementations."""
    if request.param == "memory":
        return InMemorySurveyStore()
    return SqlSurveyStore(request.getfixturevalue("db_session"))


@pytest.fixture
def owner_id(store):
    return store.ensure_user("owner-1").id


@pytest.fixture
def survey_factory(store, owner_id):
    """Create surveys with a default question set."""

    def _create(title="Customer feedback", questions=None, owner=None, **fields):
        if questions is None:
            questions = [
                NewQuestion("Favourite colour?", QuestionType.MULTIPLE_CHOICE, required=True, options=["Red", "Blue"]),
                NewQuestion("How likely are you to recommend us?", QuestionType.RATING),
                NewQuestion("Anything else?", QuestionType.TEXTAREA),
            ]
        return store.create_survey(owner or owner_id, title, questions=questions, **fields)

    return _create


@pytest.fixture
def client(session_factory):
    """Test client with get_db overridden to the per-test database."""
    from surveykit.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
