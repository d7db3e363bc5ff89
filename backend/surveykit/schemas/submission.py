from datetime import datetime

from pydantic import Field

from surveykit.records import NewAnswer
from surveykit.schemas.base import CamelSchema

class AnswerIn(CamelSchema):
    question_id: str
    value: str

class SubmissionIn(CamelSchema):
    respondent_id: str | None = Field(default=None, max_length=255)
    answers: list[AnswerIn] = []

    def to_new(self) -> list[NewAnswer]:
        return [NewAnswer(question_id=a.question_id, value=a.value) for a in self.answers]

class SubmissionOut(CamelSchema):
    message: str
    response_id: str

class ResponseOut(CamelSchema):
    id: str
    survey_id: str
    respondent_id: str | None
    created_at: datetime | None

class AnswerOut(CamelSchema):
    id: str
    response_id: str
    question_id: str
    value: str
    created_at: datetime | None

class ResponsesOut(CamelSchema):
    responses: list[ResponseOut]
    answers: list[AnswerOut]
