from surveykit.store.base import SurveyStore
from surveykit.store.memory import InMemorySurveyStore
from surveykit.store.sql import SqlSurveyStore

__all__ = ["SurveyStore", "InMemorySurveyStore", "SqlSurveyStore"]
