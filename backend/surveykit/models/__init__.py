from surveykit.models.user import User
from surveykit.models.survey import Survey, SurveyQuestion
from surveykit.models.response import SurveyResponse, SurveyAnswer

__all__ = ["User", "Survey", "SurveyQuestion", "SurveyResponse", "SurveyAnswer"]
