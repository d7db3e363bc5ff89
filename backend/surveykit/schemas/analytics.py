from surveykit.records import QuestionType
from surveykit.schemas.base import CamelSchema


class QuestionAnalyticsOut(CamelSchema):
    question_id: str
    text: str
    type: QuestionType
    total: int
    counts: dict[str, int] | None = None
    values: list[str] | None = None


class SurveyAnalyticsOut(CamelSchema):
    survey_id: str
    response_count: int
    questions: list[QuestionAnalyticsOut]


class StatsOut(CamelSchema):
    total_surveys: int
    active_surveys: int
    total_responses: int
    avg_completion_rate: float
