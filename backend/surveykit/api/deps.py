"""FastAPI dependencies: store selection and caller identity."""
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from surveykit.core.config import settings
from surveykit.core.db import get_db
from surveykit.core.errors import UnauthenticatedError
from surveykit.services.access import SurveyAccess
from surveykit.store import InMemorySurveyStore, SqlSurveyStore, SurveyStore


@lru_cache
def memory_store() -> InMemorySurveyStore:
    return InMemorySurveyStore(settings.share_token_bytes)


def get_memory_store() -> SurveyStore:
    return memory_store()


def get_sql_store(db: Session = Depends(get_db)) -> SurveyStore:
    return SqlSurveyStore(db, settings.share_token_bytes)


def store_dependency(backend: str) -> Callable[..., SurveyStore]:
    """Pick the store dependency once, so memory mode never opens a database session."""
    if backend == "memory":
        return get_memory_store
    return get_sql_store


get_store = store_dependency(settings.store_backend)


def get_access(store: SurveyStore = Depends(get_store)) -> SurveyAccess:
    return SurveyAccess(store)


def get_caller_id(request: Request, store: SurveyStore = Depends(get_store)) -> str:
    """Resolve the authenticated user id asserted by the upstream gateway."""
    user_id = (request.headers.get(settings.identity_header) or "").strip()
    if not user_id:
        raise UnauthenticatedError("Authentication required")
    store.ensure_user(user_id)
    return user_id
