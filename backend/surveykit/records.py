"""Plain records handed out by every store implementation."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TEXT = "text"
    RATING = "rating"
    TEXTAREA = "textarea"


@dataclass
class User:
    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Survey:
    id: str
    title: str
    owner_id: str
    share_token: str
    description: str | None = None
    status: SurveyStatus = SurveyStatus.DRAFT
    anonymous: bool = True
    multiple_responses: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_public(self) -> bool:
        return self.status == SurveyStatus.ACTIVE


@dataclass
class Question:
    id: str
    survey_id: str
    text: str
    type: QuestionType
    order: int
    required: bool = False
    options: list[str] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass
class Response:
    id: str
    survey_id: str
    respondent_id: str | None = None
    created_at: datetime | None = None


@dataclass
class Answer:
    id: str
    response_id: str
    question_id: str
    value: str
    created_at: datetime | None = None


@dataclass
class NewQuestion:
    """Question payload before it has an id or a position."""

    text: str
    type: QuestionType
    required: bool = False
    options: list[str] = field(default_factory=list)


@dataclass
class NewAnswer:
    question_id: str
    value: str


@dataclass
class OwnerCounts:
    total_surveys: int = 0
    active_surveys: int = 0
    total_responses: int = 0
