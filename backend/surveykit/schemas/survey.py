from datetime import datetime

from pydantic import Field

from surveykit.records import NewQuestion, QuestionType, SurveyStatus
from surveykit.schemas.base import CamelSchema

class QuestionCreate(CamelSchema):
    text: str = Field(min_length=1)
    type: QuestionType
    required: bool = False
    options: list[str] = []
    position: int | None = Field(default=None, ge=0)

    def to_new(self) -> NewQuestion:
        return NewQuestion(text=self.text, type=self.type, required=self.required, options=list(self.options))

class QuestionUpdate(CamelSchema):
    text: str | None = Field(default=None, min_length=1)
    type: QuestionType | None = None
    required: bool | None = None
    options: list[str] | None = None

class QuestionOrder(CamelSchema):
    question_ids: list[str]

class SurveyCreate(CamelSchema):
    title: str = Field(min_length=1)
    description: str | None = None
    anonymous: bool = True
    multiple_responses: bool = False
    questions: list[QuestionCreate] = []

class SurveyUpdate(CamelSchema):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: SurveyStatus | None = None
    anonymous: bool | None = None
    multiple_responses: bool | None = None

class QuestionOut(CamelSchema):
    id: str
    survey_id: str
    text: str
    type: QuestionType
    required: bool
    options: list[str]
    order: int

class SurveyOut(CamelSchema):
    id: str
    title: str
    description: str | None
    status: SurveyStatus
    anonymous: bool
    multiple_responses: bool
    share_token: str
    created_at: datetime | None
    updated_at: datetime | None

class SurveySummaryOut(SurveyOut):
    response_count: int

class SurveyDetailOut(SurveyOut):
    share_url: str
    questions: list[QuestionOut]

class PublicSurveyOut(CamelSchema):
    id: str
    title: str
    description: str | None
    status: SurveyStatus
    anonymous: bool
    share_token: str
    questions: list[QuestionOut]
